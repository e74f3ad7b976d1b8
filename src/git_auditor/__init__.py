"""Git Auditor.

Score a public GitHub profile from 0 to 100 — profile, engineering,
governance, security and activity — with concrete actions to improve it.
"""

__version__ = "0.1.0"
