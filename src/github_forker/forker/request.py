"""Resolved fork request.

The command line is parsed once into a `ForkRequest`; nothing mutates it afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RepositoryRef:
    """A repository identified by owner and name."""

    owner: str
    name: str

    @classmethod
    def parse(cls, value: str) -> RepositoryRef:
        """Parse an `owner/name` identifier.

        Raises:
            ValueError: If the identifier is not exactly two non-empty parts.
        """

        parts = value.strip().split("/")
        if len(parts) != 2:
            raise ValueError(f"Invalid repository format {value!r}; use 'owner/repo-name'")
        owner, name = (p.strip() for p in parts)
        if not owner or not name:
            raise ValueError(f"Invalid repository format {value!r}; use 'owner/repo-name'")
        return cls(owner=owner, name=name)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True, slots=True)
class ForkRequest:
    source: RepositoryRef
    target_name: str | None = None
    default_branch: str | None = None
    copy_issues: bool = False

    @property
    def fork_name(self) -> str:
        """Name the fork should end up with."""

        return self.target_name or self.source.name

    @property
    def wants_rename(self) -> bool:
        return bool(self.target_name) and self.target_name != self.source.name


@dataclass(frozen=True, slots=True)
class ForkResult:
    fork_owner: str
    fork_name: str
    created: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.fork_owner}/{self.fork_name}"
