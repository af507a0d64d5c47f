"""Tests for GitHub REST API client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx
import pytest

from lookout.infrastructure.github.client import GitHubClient, StaticTokenProvider
from lookout.shared.exceptions import CodeHostError, FileFetchError, PublishError
from lookout.shared.types import ChangeStatus, FilePath

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def client() -> GitHubClient:
    return GitHubClient(token="test-token")


def _mock_response(
    status_code: int = 200,
    json_data: dict[str, object] | list[dict[str, object]] | None = None,
    text: str = "",
    headers: dict[str, str] | None = None,
) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = json_data if json_data is not None else {}
    resp.text = text
    resp.headers = headers or {}
    return resp


def _patch_httpx(response: MagicMock):
    mock_client = MagicMock()
    mock_client.get.return_value = response
    mock_client.post.return_value = response
    mock_client.__enter__ = MagicMock(return_value=mock_client)
    mock_client.__exit__ = MagicMock(return_value=False)
    return patch(
        "lookout.infrastructure.github.client.httpx.Client",
        return_value=mock_client,
    )


# =============================================================================
# Pull request files
# =============================================================================


def test_list_pull_request_files_maps_entries(client: GitHubClient) -> None:
    response = _mock_response(
        json_data=[
            {
                "filename": "src/app.ts",
                "status": "modified",
                "additions": 4,
                "deletions": 1,
                "patch": "@@ -1 +1 @@",
            },
            {"filename": "logo.png", "status": "added", "additions": 0},
            {"filename": "src/copy.ts", "status": "copied"},
        ]
    )

    with _patch_httpx(response):
        files = client.list_pull_request_files("acme/web", 7)

    assert [f.path for f in files] == ["src/app.ts", "logo.png", "src/copy.ts"]
    assert files[0].additions == 4
    assert files[0].patch == "@@ -1 +1 @@"
    assert files[1].status is ChangeStatus.ADDED
    assert files[1].patch == ""
    assert files[2].status is ChangeStatus.MODIFIED


def test_list_pull_request_files_follows_pagination(client: GitHubClient) -> None:
    next_url = "https://api.github.com/repos/acme/web/pulls/7/files?page=2"
    page_one = _mock_response(
        json_data=[{"filename": "a.ts"}],
        headers={"link": f'<{next_url}>; rel="next", <{next_url}>; rel="last"'},
    )
    page_two = _mock_response(json_data=[{"filename": "b.ts"}])

    with _patch_httpx(page_one) as mock_cls:
        mock_cls.return_value.get.side_effect = [page_one, page_two]
        files = client.list_pull_request_files("acme/web", 7)

    assert [f.path for f in files] == ["a.ts", "b.ts"]
    second_url = mock_cls.return_value.get.call_args_list[1].args[0]
    assert second_url == next_url


def test_list_pull_request_files_raises_on_error(client: GitHubClient) -> None:
    response = _mock_response(status_code=500, text="boom")

    with _patch_httpx(response), pytest.raises(CodeHostError, match="HTTP 500"):
        client.list_pull_request_files("acme/web", 7)


# =============================================================================
# Head SHA
# =============================================================================


def test_get_head_sha(client: GitHubClient) -> None:
    response = _mock_response(json_data={"head": {"sha": "abc123"}})

    with _patch_httpx(response):
        assert client.get_head_sha("acme/web", 7) == "abc123"


def test_get_head_sha_malformed(client: GitHubClient) -> None:
    response = _mock_response(json_data={"head": None})

    with _patch_httpx(response), pytest.raises(CodeHostError, match="head SHA"):
        client.get_head_sha("acme/web", 7)


# =============================================================================
# File content
# =============================================================================


def test_get_file_content_returns_raw_text(client: GitHubClient) -> None:
    response = _mock_response(text="export const a = 1;\n")

    with _patch_httpx(response) as mock_cls:
        text = client.get_file_content("acme/web", FilePath("src/a b.ts"), "abc123")

    assert text == "export const a = 1;\n"
    call = mock_cls.return_value.get.call_args
    assert call.args[0] == (
        "https://api.github.com/repos/acme/web/contents/src/a%20b.ts?ref=abc123"
    )
    assert call.kwargs["headers"]["accept"] == "application/vnd.github.v3.raw"
    assert call.kwargs["headers"]["authorization"] == "Bearer test-token"


def test_get_file_content_missing_is_none(client: GitHubClient) -> None:
    response = _mock_response(status_code=404, text="Not Found")

    with _patch_httpx(response):
        assert client.get_file_content("acme/web", FilePath("x.ts"), "abc") is None


def test_get_file_content_http_error(client: GitHubClient) -> None:
    response = _mock_response(status_code=502)

    with _patch_httpx(response), pytest.raises(FileFetchError, match="HTTP 502"):
        client.get_file_content("acme/web", FilePath("x.ts"), "abc")


def test_get_file_content_transport_error(client: GitHubClient) -> None:
    with _patch_httpx(_mock_response()) as mock_cls:
        mock_cls.return_value.get.side_effect = httpx.ConnectError("refused")
        with pytest.raises(FileFetchError) as exc_info:
            client.get_file_content("acme/web", FilePath("x.ts"), "abc")

    assert exc_info.value.path == "x.ts"


# =============================================================================
# POST operations
# =============================================================================


def test_post_issue_comment_returns_id(client: GitHubClient) -> None:
    response = _mock_response(status_code=201, json_data={"id": 555})

    with _patch_httpx(response) as mock_cls:
        comment_id = client.post_issue_comment("acme/web", 7, "Looks risky")

    assert comment_id == 555
    call = mock_cls.return_value.post.call_args
    assert call.args[0].endswith("/repos/acme/web/issues/7/comments")
    assert call.kwargs["json"] == {"body": "Looks risky"}


def test_post_issue_comment_without_id(client: GitHubClient) -> None:
    response = _mock_response(status_code=201, json_data={})

    with _patch_httpx(response), pytest.raises(PublishError, match="extract id"):
        client.post_issue_comment("acme/web", 7, "body")


def test_post_issue_comment_http_error(client: GitHubClient) -> None:
    response = _mock_response(status_code=403, text="Forbidden")

    with _patch_httpx(response), pytest.raises(PublishError, match="HTTP 403"):
        client.post_issue_comment("acme/web", 7, "body")


def test_static_token_provider_builds_clients() -> None:
    host = StaticTokenProvider(token="t").for_installation(42)
    assert isinstance(host, GitHubClient)
    assert host.token == "t"
