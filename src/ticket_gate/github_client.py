from __future__ import annotations

from typing import Callable, Optional

import requests

from ticket_gate.constants import DEFAULT_GITHUB_API_BASE
from ticket_gate.retry import RetryConfig, call_with_retry, is_transient_status

_PAGE_SIZE = 100


class GitHubClient:
    """Read-only access to the pull request the gate runs for."""

    def __init__(
        self,
        token_provider: Callable[[], str],
        api_base: str = DEFAULT_GITHUB_API_BASE,
        session: Optional[requests.Session] = None,
        retry_config: Optional[RetryConfig] = None,
    ) -> None:
        self._token_provider = token_provider
        self._api_base = api_base.rstrip("/")
        self._session = session or requests.Session()
        self._retry_config = retry_config

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self._api_base}{path}"
        base_headers = kwargs.pop("headers", {})

        def _do_request() -> requests.Response:
            headers = dict(base_headers)
            headers.update(
                {
                    "Authorization": f"token {self._token_provider()}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                }
            )
            return self._session.request(method, url, headers=headers, timeout=20, **kwargs)

        response = call_with_retry(
            operation_name=f"github_{method}_{path}",
            fn=_do_request,
            is_retryable_exception=lambda exc: isinstance(exc, requests.RequestException),
            is_retryable_result=lambda r: is_transient_status(r.status_code),
            config=self._retry_config,
        )
        response.raise_for_status()
        return response

    def list_pull_commits(self, owner: str, repo: str, pull_number: int) -> list[dict]:
        """List every commit on a pull request, oldest first."""
        page = 1
        commits: list[dict] = []
        while True:
            response = self._request(
                "GET",
                f"/repos/{owner}/{repo}/pulls/{pull_number}/commits",
                params={"per_page": _PAGE_SIZE, "page": page},
            )
            page_data = response.json()
            if not page_data:
                break
            commits.extend(page_data)
            if len(page_data) < _PAGE_SIZE:
                break
            page += 1
        return commits

    def get_last_commit_message(self, owner: str, repo: str, pull_number: int) -> str:
        commits = self.list_pull_commits(owner, repo, pull_number)
        if not commits:
            return ""
        return str((commits[-1].get("commit") or {}).get("message") or "")
