"""GitLab REST client for the two calls the provisioner makes.

This wraps a `requests.Session` to keep HTTP out of the runner and make tests easy:
the session can be injected.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

from gitlab_issue_provisioner.orchestrator.errors import ServiceError

logger = logging.getLogger(__name__)

IMPROVEMENT_LABEL = "Improvement"

_ERROR_BODY_LIMIT = 500


@dataclass(frozen=True, slots=True)
class CreatedIssue:
    """Minimal issue metadata returned from GitLab."""

    iid: int
    title: str = ""
    project_id: int | None = None
    web_url: str | None = None


def issue_labels(labels: Sequence[str]) -> str:
    """Return the comma-joined label list sent to GitLab, `Improvement` first."""

    return ",".join([IMPROVEMENT_LABEL, *labels])


def format_duration(hours: int) -> str:
    return f"{hours}h"


class GitLabClient:
    """Small wrapper around the GitLab v4 issues API."""

    def __init__(
        self,
        *,
        token: str,
        project_id: str,
        base_url: str = "https://gitlab.com",
        timeout_seconds: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitLab token is required")
        if not str(project_id).strip():
            raise ValueError("GitLab project id is required")

        self._project_id = str(project_id).strip().strip("/")
        self._api_base_url = base_url.rstrip("/") + "/api/v4"
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "PRIVATE-TOKEN": token,
                "Accept": "application/json",
                "User-Agent": "gitlab-issue-provisioner",
            }
        )

    @property
    def project_id(self) -> str:
        """Return the configured project id or path."""

        return self._project_id

    def _issues_url(self, *, issue_iid: int | None = None, suffix: str = "") -> str:
        # Paths like "group/project" must be sent as a single encoded segment.
        project = quote(self._project_id, safe="")
        url = f"{self._api_base_url}/projects/{project}/issues"
        if issue_iid is None:
            return url
        if issue_iid <= 0:
            raise ValueError("issue_iid must be a positive integer")
        if suffix and not suffix.startswith("/"):
            suffix = "/" + suffix
        return f"{url}/{issue_iid}{suffix}"

    def _post(
        self,
        url: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> requests.Response:
        try:
            resp = self._session.post(url, json=json, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            raise ServiceError(f"GitLab request failed: {e}") from e

        if not resp.ok:
            raise ServiceError(
                f"GitLab returned HTTP {resp.status_code} for {url}: "
                f"{resp.text[:_ERROR_BODY_LIMIT]}",
                status_code=resp.status_code,
            )
        return resp

    def create_issue(self, *, title: str, description: str, labels: Sequence[str]) -> CreatedIssue:
        """Create an issue; `Improvement` is always prepended to the labels.

        Raises:
            ServiceError: on a non-success status, a network failure, or a response
                without an integer `iid`.
        """

        payload = {
            "title": title,
            "description": description,
            "labels": issue_labels(labels),
        }
        logger.info("Creating issue", extra={"title": title, "labels": payload["labels"]})
        resp = self._post(self._issues_url(), json=payload)

        try:
            data: Any = resp.json()
        except ValueError as e:
            raise ServiceError("GitLab create issue response is not JSON") from e
        if not isinstance(data, dict):
            raise ServiceError("Unexpected create issue response: not an object")

        iid = data.get("iid")
        # bool is an int subclass; GitLab never sends one here.
        if not isinstance(iid, int) or isinstance(iid, bool):
            raise ServiceError("Unexpected create issue response: missing iid")

        project_id = data.get("project_id")
        web_url = data.get("web_url")
        created = CreatedIssue(
            iid=iid,
            title=data.get("title") if isinstance(data.get("title"), str) else title,
            project_id=project_id if isinstance(project_id, int) else None,
            web_url=web_url if isinstance(web_url, str) and web_url.strip() else None,
        )
        logger.info("Issue created", extra={"issue_iid": created.iid, "web_url": created.web_url})
        return created

    def set_time_estimate(self, *, issue_iid: int, hours: int) -> bool:
        """Set the issue's time estimate.

        Returns:
            False when `hours <= 0` (no request is made), True otherwise.
        """

        if hours <= 0:
            logger.debug("No time estimate to set", extra={"issue_iid": issue_iid})
            return False

        duration = format_duration(hours)
        self._post(
            self._issues_url(issue_iid=issue_iid, suffix="time_estimate"),
            params={"duration": duration},
        )
        logger.info("Time estimate set", extra={"issue_iid": issue_iid, "duration": duration})
        return True

    def close(self) -> None:
        self._session.close()
