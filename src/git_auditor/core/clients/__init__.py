"""HTTP clients for GitHub and the contribution-count service."""
