"""Test configuration and fixtures."""

from pathlib import Path

import pytest

from gitlab_issue_provisioner.orchestrator.config import ProvisioningConfig

SETTINGS_ENV_VARS = (
    "PROVISIONER_GITLAB_TOKEN",
    "GITLAB_BASE_URL",
    "GITLAB_PROJECT_ID",
    "ISSUE_DESCRIPTION_PATH",
    "ISSUE_TEMPLATE_DIR",
    "ISSUE_DESTINATION_ROOT",
    "ISSUES_FILE",
    "PROVISIONER_FAIL_FAST",
    "NOTIFICATIONS_ENABLED",
    "REQUEST_TIMEOUT_SECONDS",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Run in an empty working directory with no provisioner env vars set."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """Provide a template folder with one issue file."""
    template = tmp_path / "template"
    template.mkdir()
    (template / "issue-template.md").write_text("# Template\n", encoding="utf-8")
    return template


@pytest.fixture
def destination_root(tmp_path: Path) -> Path:
    return tmp_path / "issues"


@pytest.fixture
def provisioning_config(template_dir: Path, destination_root: Path) -> ProvisioningConfig:
    """Provide a run configuration pointing at temporary folders."""
    return ProvisioningConfig(
        description="Shared description\n",
        template_dir=template_dir,
        destination_root=destination_root,
    )
