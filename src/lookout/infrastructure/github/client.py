"""GitHub REST API client."""

from __future__ import annotations

import logging
import re
import urllib.parse

from dataclasses import dataclass
from typing import cast

import httpx

from lookout.domain.diff.value_objects import ChangedFile
from lookout.infrastructure.constants import GitHubAPI
from lookout.shared.constants import DEFAULT_TIMEOUT_SECONDS
from lookout.shared.exceptions import CodeHostError, FileFetchError, PublishError
from lookout.shared.types import ChangeStatus, CommitSHA, FilePath

logger = logging.getLogger(__name__)

_LINK_NEXT_RE = re.compile(r'<([^>]+)>;\s*rel="next"')


def _next_page_url(response: httpx.Response) -> str | None:
    """Extract the next page URL from a GitHub ``Link`` header."""
    link = response.headers.get("link", "")
    match = _LINK_NEXT_RE.search(link)
    return match.group(1) if match else None


def _change_status(raw: object) -> ChangeStatus:
    # GitHub also reports "copied", "changed" and "unchanged".
    try:
        return ChangeStatus(str(raw))
    except ValueError:
        return ChangeStatus.MODIFIED


def _to_changed_file(entry: dict[str, object]) -> ChangedFile:
    additions = entry.get("additions")
    deletions = entry.get("deletions")
    return ChangedFile(
        path=FilePath(str(entry.get("filename", ""))),
        patch=str(entry.get("patch") or ""),
        additions=additions if isinstance(additions, int) else 0,
        deletions=deletions if isinstance(deletions, int) else 0,
        status=_change_status(entry.get("status")),
    )


# =============================================================================
# CLIENT
# =============================================================================

_STATUS_OK_MAX = 299
_STATUS_NOT_FOUND = 404
_FILES_PER_PAGE = 100


@dataclass
class GitHubClient:
    """Implements CodeHost as a thin wrapper around the GitHub REST API."""

    token: str

    def list_pull_request_files(
        self, repository: str, pr_number: int
    ) -> list[ChangedFile]:
        """List every file changed by a PR, following pagination.

        Raises:
            CodeHostError: If the API call fails.
        """
        entries = self._get_list(
            f"/repos/{repository}/pulls/{pr_number}/files"
            f"?per_page={_FILES_PER_PAGE}"
        )
        files = [_to_changed_file(entry) for entry in entries]
        logger.debug("PR %s#%d changes %d files", repository, pr_number, len(files))
        return files

    def get_head_sha(self, repository: str, pr_number: int) -> CommitSHA:
        """Fetch the SHA at the head of the PR branch.

        Raises:
            CodeHostError: If the API call fails or the response is malformed.
        """
        data = self._get(f"/repos/{repository}/pulls/{pr_number}")
        head = data.get("head")
        if isinstance(head, dict):
            head_data = cast(dict[str, object], head)
            sha = head_data.get("sha")
            if isinstance(sha, str):
                return CommitSHA(sha)
        msg = f"Cannot extract head SHA for {repository}#{pr_number}"
        raise CodeHostError(msg)

    def get_file_content(
        self, repository: str, path: FilePath, ref: str
    ) -> str | None:
        """Fetch raw file content at a specific ref.

        Returns:
            The file text, or None if the file does not exist at the ref.

        Raises:
            FileFetchError: If the API call fails for any other reason.
        """
        encoded_path = urllib.parse.quote(str(path), safe="/")
        base = f"{GitHubAPI.BASE_URL}/repos/{repository}/contents"
        url = f"{base}/{encoded_path}?ref={ref}"
        headers = self._headers()
        headers["accept"] = GitHubAPI.ACCEPT_RAW

        try:
            with httpx.Client(timeout=DEFAULT_TIMEOUT_SECONDS) as client:
                response = client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise FileFetchError(path, f"GitHub API error: {e}") from e

        if response.status_code == _STATUS_NOT_FOUND:
            return None
        if response.status_code > _STATUS_OK_MAX:
            raise FileFetchError(path, f"GitHub API HTTP {response.status_code}")
        return response.text

    def post_issue_comment(self, repository: str, pr_number: int, body: str) -> int:
        """Post a comment on a PR (as issue comment).

        Returns:
            The id of the created comment.

        Raises:
            PublishError: If the API call fails.
        """
        url = f"{GitHubAPI.BASE_URL}/repos/{repository}/issues/{pr_number}/comments"
        data = self._post(url, {"body": body})
        comment_id = data.get("id")
        if isinstance(comment_id, int):
            return comment_id
        msg = "Cannot extract id from created comment"
        raise PublishError(msg)

    # =================================================================
    # HTTP helpers
    # =================================================================

    def _get(self, path: str) -> dict[str, object]:
        url = f"{GitHubAPI.BASE_URL}{path}"
        response = self._request(url, self._headers())
        return response.json()  # type: ignore[no-any-return]

    def _get_list(self, path: str) -> list[dict[str, object]]:
        url: str | None = f"{GitHubAPI.BASE_URL}{path}"
        all_items: list[dict[str, object]] = []
        while url is not None:
            response = self._request(url, self._headers())
            data = response.json()
            if isinstance(data, list):
                all_items.extend(cast(list[dict[str, object]], data))
            url = _next_page_url(response)
        return all_items

    def _post(self, url: str, payload: dict[str, object]) -> dict[str, object]:
        try:
            with httpx.Client(timeout=DEFAULT_TIMEOUT_SECONDS) as client:
                response = client.post(url, json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            raise PublishError(f"GitHub API error: {e}") from e

        if response.status_code > _STATUS_OK_MAX:
            raise PublishError(
                f"GitHub API HTTP {response.status_code}: {response.text}"
            )
        return response.json()  # type: ignore[no-any-return]

    def _request(self, url: str, headers: dict[str, str]) -> httpx.Response:
        try:
            with httpx.Client(timeout=DEFAULT_TIMEOUT_SECONDS) as client:
                response = client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise CodeHostError(f"GitHub API error: {e}") from e

        if response.status_code > _STATUS_OK_MAX:
            raise CodeHostError(
                f"GitHub API HTTP {response.status_code}: {response.text}"
            )
        return response

    def _headers(self) -> dict[str, str]:
        return {
            "authorization": f"Bearer {self.token}",
            "accept": GitHubAPI.ACCEPT_JSON,
        }


# =============================================================================
# PROVIDER
# =============================================================================


@dataclass
class StaticTokenProvider:
    """Implements CodeHostProvider with one token for every installation.

    Installation tokens are minted outside this process; the installation
    id is only used for logging.
    """

    token: str

    def for_installation(self, installation_id: int) -> GitHubClient:
        logger.debug("Using static token for installation %d", installation_id)
        return GitHubClient(token=self.token)
