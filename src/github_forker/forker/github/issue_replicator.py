"""Open issue replication from a source repository into its fork.

The source's open issues are fetched once into a snapshot (pull requests and
non-open items removed, ordered by issue number). Each issue is then recreated
in the fork with a provenance line, its body and its labels.

A failure on one issue never stops the batch: every issue ends in exactly one
outcome (created, skipped, failed) which is folded into a `ReplicationSummary`.
Only a failure of the initial fetch abandons copying, and even that is not fatal
to the workflow.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from typing import Any

import requests
from github import GithubException

from github_forker.forker.github.client import (
    CreatedIssue,
    GitHubClient,
    is_issue_url,
    issue_number_from_url,
)
from github_forker.forker.request import ForkResult, RepositoryRef
from github_forker.github_labels import label_names

logger = logging.getLogger(__name__)

# Errors raised by remote calls while copying a single issue.
_REMOTE_ERRORS: tuple[type[Exception], ...] = (requests.RequestException, GithubException)


@dataclass(frozen=True, slots=True)
class SourceIssue:
    """Snapshot of one open issue in the source repository."""

    number: int
    title: str
    body: str
    html_url: str
    labels: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class IssueCreated:
    source_number: int
    new_number: int | None
    # Labels attached to the issue whose definitions could not be copied.
    unsynced_labels: tuple[str, ...] = ()

    @property
    def new_number_display(self) -> str:
        return str(self.new_number) if self.new_number is not None else "unknown"


@dataclass(frozen=True, slots=True)
class IssueSkipped:
    reason: str


@dataclass(frozen=True, slots=True)
class IssueFailed:
    source_number: int
    reason: str


ReplicationOutcome = IssueCreated | IssueSkipped | IssueFailed


@dataclass(frozen=True, slots=True)
class ReplicationSummary:
    """Aggregated counts for one replication run.

    Skipped issues (title missing or number not an integer) are counted separately, so
    `copied + failed + skipped == total` once the loop has run.
    """

    total: int = 0
    copied: int = 0
    failed: int = 0
    skipped: int = 0
    fetch_failed: bool = False

    def with_outcome(self, outcome: ReplicationOutcome) -> ReplicationSummary:
        if isinstance(outcome, IssueCreated):
            return replace(self, copied=self.copied + 1)
        if isinstance(outcome, IssueFailed):
            return replace(self, failed=self.failed + 1)
        return replace(self, skipped=self.skipped + 1)


def filter_open_issues(items: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
    """Keep open, non-pull-request issues, ordered by ascending issue number."""

    selected = [
        item
        for item in items
        if item.get("pull_request") is None and item.get("state") == "open"
    ]

    def sort_key(item: dict[str, Any]) -> tuple[int, int]:
        number = item.get("number")
        if isinstance(number, int) and not isinstance(number, bool):
            return (0, number)
        # Items without a usable number sort last and are skipped at extraction.
        return (1, 0)

    return sorted(selected, key=sort_key)


def extract_issue(item: dict[str, Any]) -> SourceIssue | None:
    """Read the fields needed to copy an issue, or None if the title or number is missing."""

    title = item.get("title")
    number = item.get("number")
    if not isinstance(title, str):
        return None
    if not isinstance(number, int) or isinstance(number, bool):
        return None

    body = item.get("body")
    html_url = item.get("html_url")
    return SourceIssue(
        number=number,
        title=title,
        body=body if isinstance(body, str) else "",
        html_url=html_url if isinstance(html_url, str) else "",
        labels=label_names(item.get("labels")),
    )


def compose_body(source: RepositoryRef, issue: SourceIssue) -> str:
    """Prefix the original body with a link back to the source issue."""

    provenance = f"*Copied from [{source.full_name}#{issue.number}]({issue.html_url})*"
    return f"{provenance}\n\n---\n\n{issue.body}"


class IssueReplicator:
    """Copies open issues (with labels) from a source repository into its fork."""

    def __init__(
        self,
        *,
        github: GitHubClient,
        pacing_seconds: float = 1.0,
        on_outcome: Callable[[SourceIssue | None, ReplicationOutcome], None] | None = None,
    ) -> None:
        self._github = github
        self._pacing_seconds = pacing_seconds
        self._on_outcome = on_outcome

    def fetch_snapshot(self, source: RepositoryRef) -> list[dict[str, Any]]:
        """Fetch and filter the source's open issues.

        Raises:
            requests.RequestException: If the issue list could not be fetched.
            ValueError: If GitHub returned something other than a list.
        """

        raw = self._github.list_open_issues(source.full_name)
        snapshot = filter_open_issues(raw)
        logger.info(
            "Fetched open issues",
            extra={"repo": source.full_name, "fetched": len(raw), "open_issues": len(snapshot)},
        )
        return snapshot

    def replicate(self, source: RepositoryRef, fork: ForkResult) -> ReplicationSummary:
        try:
            snapshot = self.fetch_snapshot(source)
        except (requests.RequestException, ValueError) as e:
            logger.warning(
                "Failed to fetch issues; continuing without copying issues",
                extra={"repo": source.full_name, "error": str(e)},
            )
            return ReplicationSummary(fetch_failed=True)

        summary = ReplicationSummary(total=len(snapshot))
        if not snapshot:
            logger.info("No open issues found to copy", extra={"repo": source.full_name})
            return summary

        for position, item in enumerate(snapshot, start=1):
            issue = extract_issue(item)
            if issue is None:
                outcome: ReplicationOutcome = IssueSkipped(
                    reason=f"issue {position}/{len(snapshot)} has no usable title or number"
                )
                logger.warning("Skipping issue", extra={"position": position})
            else:
                outcome = self.copy_issue(source, fork, issue)
                # Pacing applies to every attempted issue, successful or not.
                time.sleep(self._pacing_seconds)

            summary = summary.with_outcome(outcome)
            if self._on_outcome is not None:
                self._on_outcome(issue, outcome)

        logger.info(
            "Issue copy finished",
            extra={
                "repo": fork.full_name,
                "total": summary.total,
                "copied": summary.copied,
                "failed": summary.failed,
                "skipped": summary.skipped,
            },
        )
        return summary

    def copy_issue(
        self, source: RepositoryRef, fork: ForkResult, issue: SourceIssue
    ) -> IssueCreated | IssueFailed:
        """Recreate a single issue in the fork. Never raises for remote failures."""

        unsynced_labels = self.sync_labels(source, fork, issue.labels)
        try:
            created = self._github.create_issue(
                repository=fork.full_name,
                title=issue.title,
                body=compose_body(source, issue),
                labels=list(issue.labels) or None,
            )
        except (*_REMOTE_ERRORS, ValueError) as e:
            logger.warning(
                "Could not copy issue",
                extra={"source_issue": issue.number, "error": str(e)},
            )
            return IssueFailed(source_number=issue.number, reason=str(e))

        return self._check_created(fork, issue, created, unsynced_labels)

    @staticmethod
    def _check_created(
        fork: ForkResult,
        issue: SourceIssue,
        created: object,
        unsynced_labels: tuple[str, ...] = (),
    ) -> IssueCreated | IssueFailed:
        if not isinstance(created, CreatedIssue):
            reason = f"unexpected create result: {created!r}"
        elif not is_issue_url(created.url, repository=fork.full_name):
            reason = f"create result is not an issue URL in {fork.full_name}: {created.url!r}"
        else:
            new_number = issue_number_from_url(created.url, repository=fork.full_name)
            logger.info(
                "Issue copied",
                extra={"source_issue": issue.number, "new_issue": new_number},
            )
            return IssueCreated(
                source_number=issue.number,
                new_number=new_number,
                unsynced_labels=unsynced_labels,
            )

        logger.warning("Could not copy issue", extra={"source_issue": issue.number, "error": reason})
        return IssueFailed(source_number=issue.number, reason=reason)

    def sync_labels(
        self, source: RepositoryRef, fork: ForkResult, labels: Sequence[str]
    ) -> tuple[str, ...]:
        """Recreate the source's label definitions in the fork.

        Every failure is discarded: a label problem never blocks issue creation.
        API errors are logged at debug level; malformed label payloads are logged
        as warnings since they point at a contract violation.

        Returns:
            Names of the labels that could not be looked up or created.
        """

        unsynced: list[str] = []
        for name in labels:
            try:
                spec = self._github.get_label(source.full_name, name)
            except _REMOTE_ERRORS as e:
                logger.debug(
                    "Label lookup failed; skipping",
                    extra={"label": name, "repo": source.full_name, "error": str(e)},
                )
                unsynced.append(name)
                continue
            except ValueError as e:
                logger.warning(
                    "Malformed label data; skipping",
                    extra={"label": name, "repo": source.full_name, "error": str(e)},
                )
                unsynced.append(name)
                continue

            try:
                created = self._github.create_label(fork.full_name, spec)
            except _REMOTE_ERRORS as e:
                logger.debug(
                    "Label creation failed; ignoring",
                    extra={"label": name, "repo": fork.full_name, "error": str(e)},
                )
                unsynced.append(name)
                continue

            if created:
                logger.debug("Label created", extra={"label": name, "repo": fork.full_name})
        return tuple(unsynced)
