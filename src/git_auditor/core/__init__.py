"""Core business logic — fetch layer, rubric rules, scoring and data models.

This module has no dependency on the CLI or on persistence. Everything that
touches the network goes through :class:`clients.github.GitHubClient`;
everything else is pure.
"""
