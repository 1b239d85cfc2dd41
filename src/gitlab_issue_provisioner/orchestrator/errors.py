"""Error types raised by the provisioning steps.

Each step raises one of these; the runner turns them into per-issue outcomes.
"""

from __future__ import annotations

from pathlib import Path


class ProvisionerError(Exception):
    """Base class for errors raised while provisioning an issue."""


class ServiceError(ProvisionerError):
    """The GitLab API returned a non-success status or could not be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FilesystemError(ProvisionerError):
    """The template could not be read or the destination could not be written."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class NotificationError(ProvisionerError):
    """No notification backend is available, or it failed to start."""
