"""Fork setup service.

Ensures a fork of the source repository exists under the authenticated user, then
applies the optional rename and default branch and enables issues on it.

Only fork creation is fatal. Every later step degrades to a warning and keeps the
previous state of the fork.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import requests

from github_forker.forker.github.client import GitHubClient
from github_forker.forker.request import ForkRequest, ForkResult, RepositoryRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SelfForkError(Exception):
    """Raised when the source repository already belongs to the authenticated user."""

    source: RepositoryRef
    actor: str

    def __str__(self) -> str:
        return (
            f"Cannot fork your own repository ({self.source.full_name}); "
            "use a repository owned by a different user"
        )


@dataclass(frozen=True, slots=True)
class ForkSetupError(Exception):
    """Raised when the fork could not be created."""

    source: RepositoryRef
    reason: str

    def __str__(self) -> str:
        return (
            f"Failed to fork {self.source.full_name}: {self.reason}. "
            "The repository may not exist or be private, you may lack permission to fork it, "
            "or the network may be unavailable."
        )


@dataclass(frozen=True, slots=True)
class BranchSetup:
    """Outcome of applying the requested default branch."""

    branch: str
    applied: bool
    available_branches: tuple[str, ...] = ()


def ensure_not_self_fork(source: RepositoryRef, actor: str) -> None:
    # GitHub logins are case-insensitive.
    if source.owner.casefold() == actor.casefold():
        raise SelfForkError(source=source, actor=actor)


class ForkService:
    """Idempotent fork creation plus best-effort fork configuration."""

    def __init__(
        self,
        *,
        github: GitHubClient,
        rename_delay_seconds: float = 2.0,
        propagation_delay_seconds: float = 2.0,
    ) -> None:
        self._github = github
        self._rename_delay_seconds = rename_delay_seconds
        self._propagation_delay_seconds = propagation_delay_seconds

    def ensure_fork(self, request: ForkRequest, *, actor: str) -> ForkResult:
        """Return a fork of `request.source` owned by `actor`, creating it if needed.

        Raises:
            SelfForkError: If `actor` owns the source repository.
            ForkSetupError: If the fork could not be created.
        """

        source = request.source
        ensure_not_self_fork(source, actor)

        candidate = ForkResult(fork_owner=actor, fork_name=request.fork_name, created=False)
        try:
            exists = self._github.repository_exists(candidate.full_name)
        except requests.RequestException as e:
            raise ForkSetupError(source=source, reason=str(e)) from e

        if exists:
            logger.info("Using existing repository", extra={"repo": candidate.full_name})
            return candidate

        logger.info("Forking repository", extra={"source": source.full_name})
        try:
            reported = self._github.create_fork(source.full_name)
        except requests.RequestException as e:
            raise ForkSetupError(source=source, reason=str(e)) from e

        result = ForkResult(fork_owner=actor, fork_name=source.name, created=True)
        logger.info("Fork created", extra={"repo": result.full_name, "reported": reported})

        target_name = request.target_name
        if request.wants_rename and target_name:
            result = self._rename(result, target_name)

        time.sleep(self._propagation_delay_seconds)
        return result

    def _rename(self, fork: ForkResult, target_name: str) -> ForkResult:
        time.sleep(self._rename_delay_seconds)
        try:
            self._github.rename_repository(fork.full_name, target_name)
        except (requests.RequestException, ValueError) as e:
            logger.warning(
                "Could not rename repository; keeping original name",
                extra={"repo": fork.full_name, "target_name": target_name, "error": str(e)},
            )
            return fork

        renamed = ForkResult(fork_owner=fork.fork_owner, fork_name=target_name, created=True)
        logger.info("Repository renamed", extra={"repo": renamed.full_name})
        return renamed

    def set_default_branch(self, fork: ForkResult, branch: str) -> BranchSetup:
        """Make `branch` the fork's default branch if it exists there."""

        try:
            exists = self._github.branch_exists(fork.full_name, branch)
        except requests.RequestException as e:
            logger.warning(
                "Could not check branch; default branch unchanged",
                extra={"repo": fork.full_name, "branch": branch, "error": str(e)},
            )
            return BranchSetup(branch=branch, applied=False)

        if not exists:
            available = self._available_branches(fork)
            logger.warning(
                "Branch does not exist in the fork",
                extra={"repo": fork.full_name, "branch": branch, "available": list(available)},
            )
            return BranchSetup(branch=branch, applied=False, available_branches=available)

        try:
            self._github.set_default_branch(fork.full_name, branch)
        except (requests.RequestException, ValueError) as e:
            logger.warning(
                "Could not set default branch",
                extra={"repo": fork.full_name, "branch": branch, "error": str(e)},
            )
            return BranchSetup(branch=branch, applied=False)

        logger.info("Default branch set", extra={"repo": fork.full_name, "branch": branch})
        return BranchSetup(branch=branch, applied=True)

    def _available_branches(self, fork: ForkResult) -> tuple[str, ...]:
        # Listing is informational only; failures are discarded.
        try:
            return tuple(self._github.list_branches(fork.full_name))
        except (requests.RequestException, ValueError) as e:
            logger.debug(
                "Could not fetch branches",
                extra={"repo": fork.full_name, "error": str(e)},
            )
            return ()

    def enable_issues(self, fork: ForkResult) -> bool:
        try:
            self._github.enable_issues(fork.full_name)
        except requests.RequestException as e:
            logger.warning(
                "Could not enable issues",
                extra={"repo": fork.full_name, "error": str(e)},
            )
            return False
        logger.info("Issues enabled", extra={"repo": fork.full_name})
        return True
