"""Fork workflow package."""

from github_forker.forker.config import ForkerSettings

__all__ = ["ForkerSettings"]
