"""GitHub API client wrapper.

This intentionally wraps PyGithub and the REST API to keep GitHub calls out of CLI code
and make tests easy.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlparse

import requests
from github import Auth, Github

from github_forker.github_labels import LabelSpec

logger = logging.getLogger(__name__)

_ISSUE_PATH_RE = re.compile(r"^/(?P<owner>[^/]+)/(?P<repo>[^/]+)/issues/(?P<number>[0-9]+)/?$")


@dataclass(frozen=True, slots=True)
class CreatedIssue:
    """Minimal issue metadata returned from GitHub after creation."""

    repository: str
    number: int
    url: str


def issue_number_from_url(url: str, *, repository: str | None = None) -> int | None:
    """Return the issue number if `url` is a web URL pointing at an issue.

    When `repository` ("owner/repo") is given, the URL must point into that repository
    (compared case-insensitively). The host is not checked so GitHub Enterprise URLs work.
    """

    if not isinstance(url, str) or not url.strip():
        return None
    parsed = urlparse(url.strip())
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        return None
    match = _ISSUE_PATH_RE.match(parsed.path)
    if match is None:
        return None
    if repository is not None:
        expected = repository.strip().strip("/").lower()
        actual = f"{match.group('owner')}/{match.group('repo')}".lower()
        if actual != expected:
            return None
    return int(match.group("number"))


def is_issue_url(url: str, *, repository: str | None = None) -> bool:
    """True if `url` identifies an issue (optionally in a specific repository)."""

    return issue_number_from_url(url, repository=repository) is not None


class GitHubClient:
    """Small wrapper around PyGithub and the REST API for the fork workflow."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        github_api: Github | None = None,
        session: requests.Session | None = None,
        issue_page_limit: int = 10,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")

        self._rest_base_url = base_url.rstrip("/")
        self._issue_page_limit = issue_page_limit
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "github-forker",
            }
        )

        auth = Auth.Token(token)
        self._github = github_api or Github(auth=auth, base_url=self._rest_base_url)

    def _repo_url(self, *, repository: str, path: str = "") -> str:
        repo = repository.strip().strip("/")
        path = path.lstrip("/")
        if not path:
            return f"{self._rest_base_url}/repos/{repo}"
        return f"{self._rest_base_url}/repos/{repo}/{path}"

    def _get_paginated_json_list(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        max_pages: int = 10,
    ) -> list[dict[str, Any]]:
        """Fetch a REST endpoint that returns a JSON list, following page-number pagination.

        Stops at the first short page or after `max_pages` pages of 100 items each.
        """

        items: list[dict[str, Any]] = []
        per_page = 100
        for page in range(1, max_pages + 1):
            resp = self._session.get(
                url,
                params={**(params or {}), "per_page": per_page, "page": page},
                timeout=30,
            )
            resp.raise_for_status()
            payload = resp.json()
            if not isinstance(payload, list):
                raise ValueError(f"Unexpected list response from {url}")

            page_items: list[dict[str, Any]] = [p for p in payload if isinstance(p, dict)]
            items.extend(page_items)

            if len(payload) < per_page:
                break
        else:
            logger.warning(
                "Page limit reached; results may be truncated",
                extra={"url": url, "max_pages": max_pages},
            )
        return items

    def get_authenticated_login(self) -> str:
        """Return the login of the user the token belongs to.

        Raises:
            github.GithubException: If the token is rejected.
        """

        login = self._github.get_user().login
        if not isinstance(login, str) or not login.strip():
            raise ValueError("Unexpected user response: missing login")
        logger.info("Authenticated with GitHub", extra={"login": login})
        return login

    def repository_exists(self, repository: str) -> bool:
        url = self._repo_url(repository=repository)
        resp = self._session.get(url, timeout=30)
        if resp.status_code == 404:
            return False
        resp.raise_for_status()
        return True

    def create_fork(self, repository: str) -> str | None:
        """Fork `repository` under the authenticated user without cloning anything.

        GitHub accepts the request (202) and copies the repository asynchronously.

        Returns:
            The fork's full name as reported by GitHub, or None if the response omits it.
        """

        url = self._repo_url(repository=repository, path="forks")
        resp = self._session.post(url, json={}, timeout=60)
        resp.raise_for_status()
        data = resp.json()
        full_name = data.get("full_name") if isinstance(data, dict) else None
        if not isinstance(full_name, str) or not full_name.strip():
            logger.warning("Fork response has no full_name", extra={"source": repository})
            return None
        logger.info("Fork requested", extra={"source": repository, "fork": full_name})
        return full_name

    def _patch_repository(self, repository: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = self._repo_url(repository=repository)
        resp = self._session.patch(url, json=payload, timeout=30)
        resp.raise_for_status()
        data = resp.json()
        return data if isinstance(data, dict) else {}

    def rename_repository(self, repository: str, new_name: str) -> str:
        """Rename a repository. Returns the new full name."""

        if not new_name.strip():
            raise ValueError("new_name is required")
        data = self._patch_repository(repository, {"name": new_name})
        full_name = data.get("full_name")
        if isinstance(full_name, str) and full_name.strip():
            return full_name
        owner = repository.strip().split("/", 1)[0]
        return f"{owner}/{new_name}"

    def set_default_branch(self, repository: str, branch: str) -> None:
        if not branch.strip():
            raise ValueError("branch is required")
        self._patch_repository(repository, {"default_branch": branch})

    def enable_issues(self, repository: str) -> None:
        self._patch_repository(repository, {"has_issues": True})

    def branch_exists(self, repository: str, branch: str) -> bool:
        url = self._repo_url(repository=repository, path=f"branches/{quote(branch, safe='')}")
        resp = self._session.get(url, timeout=30)
        if resp.status_code == 404:
            return False
        resp.raise_for_status()
        return True

    def list_branches(self, repository: str) -> list[str]:
        url = self._repo_url(repository=repository, path="branches")
        names: list[str] = []
        for item in self._get_paginated_json_list(url):
            name = item.get("name")
            if isinstance(name, str) and name.strip():
                names.append(name)
        return names

    def list_open_issues(self, repository: str) -> list[dict[str, Any]]:
        """Return raw open issue payloads (pull requests included, as GitHub returns them)."""

        url = self._repo_url(repository=repository, path="issues")
        return self._get_paginated_json_list(
            url,
            params={"state": "open"},
            max_pages=self._issue_page_limit,
        )

    def get_label(self, repository: str, name: str) -> LabelSpec:
        url = self._repo_url(repository=repository, path=f"labels/{quote(name, safe='')}")
        resp = self._session.get(url, timeout=30)
        resp.raise_for_status()
        return LabelSpec.from_api(resp.json())

    def create_label(self, repository: str, label: LabelSpec) -> bool:
        """Create a label. Returns False when it already exists."""

        url = self._repo_url(repository=repository, path="labels")
        resp = self._session.post(url, json=label.to_payload(), timeout=30)
        if resp.status_code == 422:
            # Label likely already exists.
            return False
        resp.raise_for_status()
        return True

    def create_issue(
        self,
        *,
        repository: str,
        title: str,
        body: str,
        labels: Sequence[str] | None = None,
    ) -> CreatedIssue:
        if not title.strip():
            raise ValueError("Issue title is required")

        repo = self._github.get_repo(repository.strip().strip("/"), lazy=True)
        if labels:
            issue = repo.create_issue(title=title, body=body, labels=list(labels))
        else:
            issue = repo.create_issue(title=title, body=body)

        return CreatedIssue(
            repository=repository,
            number=issue.number,
            url=issue.html_url or "",
        )

    def close(self) -> None:
        self._session.close()
        self._github.close()
        logger.debug("GitHub client closed")
