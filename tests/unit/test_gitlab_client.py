"""Unit tests for the GitLab client (mocked session)."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
import requests

from gitlab_issue_provisioner.orchestrator.errors import ServiceError
from gitlab_issue_provisioner.orchestrator.gitlab.client import (
    CreatedIssue,
    GitLabClient,
    issue_labels,
)


def _response(status_code: int = 201, payload: object | None = None) -> Mock:
    resp = Mock(spec=requests.Response)
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    resp.text = "" if payload is None else str(payload)
    resp.json.return_value = payload
    return resp


def _client(post: Mock, **kwargs: object) -> GitLabClient:
    session = requests.Session()
    session.post = post  # type: ignore[method-assign]
    return GitLabClient(
        token="test-token",
        project_id=str(kwargs.get("project_id", "1234")),
        base_url=str(kwargs.get("base_url", "https://gitlab.example.com/")),
        session=session,
    )


def test_issue_labels_always_start_with_improvement() -> None:
    assert issue_labels([]) == "Improvement"
    assert issue_labels(["Backend"]) == "Improvement,Backend"
    assert issue_labels(["Improvement", "UX"]) == "Improvement,Improvement,UX"


def test_create_issue_posts_title_description_and_labels() -> None:
    post = Mock(return_value=_response(payload={"iid": 101, "project_id": 1234, "title": "X"}))
    client = _client(post)

    created = client.create_issue(title="X", description="Body", labels=["Backend"])

    assert created == CreatedIssue(iid=101, title="X", project_id=1234, web_url=None)
    post.assert_called_once_with(
        "https://gitlab.example.com/api/v4/projects/1234/issues",
        json={"title": "X", "description": "Body", "labels": "Improvement,Backend"},
        params=None,
        timeout=30.0,
    )


def test_client_sets_private_token_header_on_session() -> None:
    session = requests.Session()

    GitLabClient(token="test-token", project_id="1234", session=session)

    assert session.headers["PRIVATE-TOKEN"] == "test-token"


def test_project_path_is_url_encoded() -> None:
    post = Mock(return_value=_response(payload={"iid": 5}))
    client = _client(post, project_id="group/sub/project")

    client.create_issue(title="X", description="", labels=[])

    assert post.call_args.args[0] == (
        "https://gitlab.example.com/api/v4/projects/group%2Fsub%2Fproject/issues"
    )


def test_create_issue_raises_service_error_on_http_failure() -> None:
    post = Mock(return_value=_response(status_code=403, payload={"message": "403 Forbidden"}))
    client = _client(post)

    with pytest.raises(ServiceError) as excinfo:
        client.create_issue(title="X", description="", labels=[])

    assert excinfo.value.status_code == 403


def test_create_issue_raises_service_error_on_network_failure() -> None:
    post = Mock(side_effect=requests.ConnectionError("unreachable"))
    client = _client(post)

    with pytest.raises(ServiceError, match="unreachable") as excinfo:
        client.create_issue(title="X", description="", labels=[])

    assert excinfo.value.status_code is None


def test_create_issue_requires_integer_iid() -> None:
    post = Mock(return_value=_response(payload={"id": 99, "iid": "7"}))
    client = _client(post)

    with pytest.raises(ServiceError, match="missing iid"):
        client.create_issue(title="X", description="", labels=[])


@pytest.mark.parametrize("hours", [0, -3])
def test_set_time_estimate_skips_request_for_non_positive_hours(hours: int) -> None:
    post = Mock()
    client = _client(post)

    assert client.set_time_estimate(issue_iid=101, hours=hours) is False
    post.assert_not_called()


def test_set_time_estimate_sends_duration_in_hours() -> None:
    post = Mock(return_value=_response(status_code=200, payload={"time_estimate": 36000}))
    client = _client(post)

    assert client.set_time_estimate(issue_iid=101, hours=10) is True

    post.assert_called_once_with(
        "https://gitlab.example.com/api/v4/projects/1234/issues/101/time_estimate",
        json=None,
        params={"duration": "10h"},
        timeout=30.0,
    )


def test_set_time_estimate_raises_service_error_on_http_failure() -> None:
    post = Mock(return_value=_response(status_code=500, payload="boom"))
    client = _client(post)

    with pytest.raises(ServiceError):
        client.set_time_estimate(issue_iid=101, hours=1)


def test_client_requires_token_and_project() -> None:
    with pytest.raises(ValueError, match="token"):
        GitLabClient(token="", project_id="1")
    with pytest.raises(ValueError, match="project"):
        GitLabClient(token="t", project_id=" ")
