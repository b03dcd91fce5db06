"""CLI entrypoint for the forker.

Forks a repository, optionally renames it and sets its default branch, enables
issues and optionally copies the source's open issues into the fork.
"""

from __future__ import annotations

import argparse
import logging
import sys

from github import GithubException
from pydantic import ValidationError

from github_forker import __version__
from github_forker.forker.config import ForkerSettings
from github_forker.forker.github.client import GitHubClient
from github_forker.forker.github.fork_service import (
    ForkService,
    ForkSetupError,
    SelfForkError,
)
from github_forker.forker.github.issue_replicator import (
    IssueCreated,
    IssueFailed,
    IssueReplicator,
    ReplicationOutcome,
    ReplicationSummary,
    SourceIssue,
)
from github_forker.forker.logging import configure_logging
from github_forker.forker.request import ForkRequest, ForkResult, RepositoryRef

logger = logging.getLogger(__name__)

_EXAMPLES = """\
examples:
  github-forker zenocross/puter
  github-forker zenocross/puter --branch main
  github-forker zenocross/puter --copy-issues
  github-forker zenocross/puter --target-name my-puter
  github-forker zenocross/puter --branch main --copy-issues --target-name my-custom-puter
"""


def _repository_ref(value: str) -> RepositoryRef:
    try:
        return RepositoryRef.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _non_empty(value: str) -> str:
    if not value.strip():
        raise argparse.ArgumentTypeError("value must not be empty")
    return value.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="github-forker",
        description="Fork a GitHub repository under your account",
        epilog=_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument("--version", action="version", version=f"github-forker {__version__}")
    parser.add_argument(
        "source",
        type=_repository_ref,
        help="Source repository in the form 'owner/repo'",
    )
    parser.add_argument(
        "--branch",
        type=_non_empty,
        default=None,
        help="Set default branch for the forked repository",
    )
    parser.add_argument(
        "--copy-issues",
        action="store_true",
        help="Copy open issues from the source repository",
    )
    parser.add_argument(
        "--target-name",
        type=_non_empty,
        default=None,
        help="Custom name for the forked repository",
    )
    return parser


def request_from_args(args: argparse.Namespace) -> ForkRequest:
    return ForkRequest(
        source=args.source,
        target_name=args.target_name,
        default_branch=args.branch,
        copy_issues=args.copy_issues,
    )


def _print_banner(request: ForkRequest) -> None:
    print("GitHub Repository Forker")
    print("=" * 50)
    print(f"Source repository: {request.source.full_name}")
    if request.target_name:
        print(f"Target name: {request.target_name}")
    if request.default_branch:
        print(f"Default branch: {request.default_branch}")
    print(f"Will copy issues: {'Yes' if request.copy_issues else 'No'}")
    print()


def _print_outcome(issue: SourceIssue | None, outcome: ReplicationOutcome) -> None:
    if isinstance(outcome, IssueCreated):
        print(f"  Issue #{outcome.source_number} copied as #{outcome.new_number_display}")
    elif isinstance(outcome, IssueFailed):
        print(f"  Warning: could not copy issue #{outcome.source_number}")
        print(f"     Error: {outcome.reason}")
    else:
        print(f"  Warning: skipped an issue ({outcome.reason})")


def _print_replication_summary(summary: ReplicationSummary) -> None:
    if summary.fetch_failed:
        print("Failed to fetch issues; continuing without copying issues")
        return
    if summary.total == 0:
        print("No open issues found to copy")
        return
    print(f"Copied {summary.copied} out of {summary.total} issues")
    if summary.failed:
        print(f"Failed to copy {summary.failed} issues")
    if summary.skipped:
        print(f"Skipped {summary.skipped} issues without a usable title")


def _print_final_summary(settings: ForkerSettings, fork: ForkResult, copy_issues: bool) -> None:
    fork_url = settings.repository_web_url(fork.full_name)
    print()
    print("All done!")
    print(f"Your repository: {fork_url}")
    if copy_issues:
        print(f"Issues: {fork_url}/issues")
    print()
    print("Next steps:")
    print(f"  - Clone locally:  git clone {fork_url}.git")
    print(f"  - View online:    {fork_url}")


def run(request: ForkRequest, *, settings: ForkerSettings, github: GitHubClient) -> int:
    """Run the fork workflow against an already-constructed client."""

    try:
        actor = github.get_authenticated_login()
    except (GithubException, ValueError) as e:
        logger.error("Authentication failed", extra={"error": str(e)})
        print(f"Error: authentication failed: {e}", file=sys.stderr)
        return 1
    print(f"Authenticated as: {actor}")

    fork_service = ForkService(
        github=github,
        rename_delay_seconds=settings.rename_delay_seconds,
        propagation_delay_seconds=settings.fork_propagation_seconds,
    )

    print()
    print("Step 1: Setting up repository...")
    try:
        fork = fork_service.ensure_fork(request, actor=actor)
    except (SelfForkError, ForkSetupError) as e:
        logger.error(str(e), extra={"source": request.source.full_name})
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not fork.created:
        print(f"Repository already exists: {fork.full_name}; using existing repository")
    elif request.wants_rename and fork.fork_name != request.target_name:
        print(f"Warning: could not rename repository to {request.target_name}")
        print(f"    Repository remains as {fork.full_name}")
    else:
        print(f"Fork ready at {fork.full_name}")

    print()
    if request.default_branch:
        print(f"Step 2: Setting default branch to {request.default_branch}...")
        branch = fork_service.set_default_branch(fork, request.default_branch)
        if branch.applied:
            print(f"Default branch set to {branch.branch}")
        elif branch.available_branches:
            print(f"Warning: branch '{branch.branch}' does not exist in the fork")
            print("Available branches:")
            for name in branch.available_branches:
                print(f"  - {name}")
        else:
            print(f"Warning: could not set default branch to {branch.branch}")
    else:
        print("Step 2: Branch not specified, keeping the default branch")

    print()
    print("Step 3: Enabling issues...")
    if fork_service.enable_issues(fork):
        print("Issues enabled successfully")
    else:
        print("Warning: could not enable issues")

    print()
    if request.copy_issues:
        print(f"Step 4: Copying issues from {request.source.full_name}...")
        replicator = IssueReplicator(
            github=github,
            pacing_seconds=settings.issue_pacing_seconds,
            on_outcome=_print_outcome,
        )
        summary = replicator.replicate(request.source, fork)
        _print_replication_summary(summary)
    else:
        print("Step 4: Skipping issue copying (--copy-issues not specified)")

    _print_final_summary(settings, fork, request.copy_issues)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    request = request_from_args(args)

    try:
        settings = ForkerSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)
    _print_banner(request)

    try:
        github = GitHubClient(
            token=settings.github_token,
            base_url=settings.github_base_url,
            issue_page_limit=settings.issue_page_limit,
        )
        try:
            return run(request, settings=settings, github=github)
        finally:
            github.close()

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
