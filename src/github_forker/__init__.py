"""GitHub Forker.

Forks a GitHub repository under the authenticated user's account with:
- configuration loaded from `.env`
- structured logging
- optional rename, default branch selection and open issue replication
"""

__version__ = "0.1.0"

from github_forker.forker.config import ForkerSettings

__all__ = ["__version__", "ForkerSettings"]
