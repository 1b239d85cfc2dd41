"""Configuration for the issue provisioner.

Static settings are loaded from:
- environment variables
- and a local `.env` file (if present)

The list of issues to create lives in a separate JSON file (`ISSUES_FILE`), and the
issue description is a markdown file read once and used verbatim for every issue.

To avoid collisions with other tools that read `GITLAB_TOKEN`, the token is read from
a dedicated variable: `PROVISIONER_GITLAB_TOKEN`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class IssueSpec(BaseModel):
    """One issue to create, as listed in the issues file."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    title: str = Field(min_length=1)
    labels: tuple[str, ...] = Field(default=())
    estimate_hours: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("estimate_hours", "estimateHours", "estimateHrs"),
        description="Time estimate in whole hours; 0 means no estimate is set",
    )


class ProvisionerSettings(BaseSettings):
    """Settings for the provisioner.

    Environment variables:
    - PROVISIONER_GITLAB_TOKEN
    - GITLAB_PROJECT_ID
    - GITLAB_BASE_URL          (optional)
    - ISSUE_DESCRIPTION_PATH   (optional)
    - ISSUE_TEMPLATE_DIR       (optional)
    - ISSUE_DESTINATION_ROOT   (optional)
    - ISSUES_FILE              (optional)
    - PROVISIONER_FAIL_FAST    (optional)
    - NOTIFICATIONS_ENABLED    (optional)
    - REQUEST_TIMEOUT_SECONDS  (optional)
    - LOG_LEVEL                (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `ProvisionerSettings(_env_file=path_to_env)`.
    """

    # Defaults are empty so `ProvisionerSettings()` type-checks; the validator below
    # enforces that real values are provided.
    gitlab_token: str = Field(
        default="",
        validation_alias="PROVISIONER_GITLAB_TOKEN",
        description="GitLab personal access token sent as PRIVATE-TOKEN",
    )
    gitlab_base_url: str = Field(
        default="https://gitlab.com",
        validation_alias="GITLAB_BASE_URL",
        description="GitLab instance URL (without /api/v4)",
    )
    gitlab_project_id: str = Field(
        default="",
        validation_alias="GITLAB_PROJECT_ID",
        description="Numeric project id or 'group/project' path",
    )

    description_path: Path = Field(
        default=Path("description.md"),
        validation_alias="ISSUE_DESCRIPTION_PATH",
        description="Markdown file used verbatim as the body of every issue",
    )
    template_dir: Path = Field(
        default=Path("template"),
        validation_alias="ISSUE_TEMPLATE_DIR",
        description="Folder copied into each issue's working folder",
    )
    destination_root: Path = Field(
        default=Path("issues"),
        validation_alias="ISSUE_DESTINATION_ROOT",
        description="Parent folder of the per-issue working folders",
    )
    issues_file: Path = Field(
        default=Path("issues.json"),
        validation_alias="ISSUES_FILE",
        description="JSON list of issues to create",
    )

    fail_fast: bool = Field(
        default=False,
        validation_alias="PROVISIONER_FAIL_FAST",
        description="Stop the whole run after the first failed issue",
    )
    notifications_enabled: bool = Field(
        default=True,
        validation_alias="NOTIFICATIONS_ENABLED",
        description="Show a desktop notification for each provisioned folder",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        validation_alias="REQUEST_TIMEOUT_SECONDS",
        description="Timeout for each GitLab API request",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    @model_validator(mode="after")
    def _require_gitlab_target(self) -> ProvisionerSettings:
        if not self.gitlab_token.strip():
            raise ValueError("PROVISIONER_GITLAB_TOKEN is required")
        if not self.gitlab_project_id.strip():
            raise ValueError("GITLAB_PROJECT_ID is required")
        return self


@dataclass(frozen=True, slots=True)
class ProvisioningConfig:
    """Immutable per-run configuration handed to the runner."""

    description: str
    template_dir: Path
    destination_root: Path
    fail_fast: bool = False

    @classmethod
    def from_settings(cls, settings: ProvisionerSettings) -> ProvisioningConfig:
        return cls(
            description=load_description(settings.description_path),
            template_dir=settings.template_dir,
            destination_root=settings.destination_root,
            fail_fast=settings.fail_fast,
        )


def load_description(path: Path) -> str:
    """Read the issue description file once, whole, verbatim."""

    return path.read_text(encoding="utf-8")


def load_issue_specs(path: Path) -> list[IssueSpec]:
    """Load the ordered list of issues to create.

    The file must contain a JSON array of objects with `title`, optional `labels`
    and optional `estimate_hours`.

    Raises:
        ValueError: if the file is not a JSON array.
        pydantic.ValidationError: if an entry has an unexpected shape.
    """

    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"Issues file must contain a JSON list: {path}")
    return [IssueSpec.model_validate(item) for item in raw]
