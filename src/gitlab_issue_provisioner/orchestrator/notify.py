"""Desktop notifications for newly provisioned issue folders.

The notification is fire-and-forget: the backend is started as a detached process and
never waited on. Its single action opens the issue folder.

Backends:
- Linux: `notify-send --action` (libnotify >= 0.7.9), result piped into `xdg-open`
- macOS: `terminal-notifier -open`
- Windows: PowerShell with the BurntToast module
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Protocol

from gitlab_issue_provisioner.orchestrator.errors import NotificationError

logger = logging.getLogger(__name__)

APP_NAME = "GitLab Issue Provisioner"
ACTION_LABEL = "Open folder"

# $1 is the folder; notify-send prints the action key when the button is clicked.
_LINUX_SCRIPT = (
    'choice=$(notify-send --app-name="$2" --wait --action=open="$3" "$4" "$5"); '
    'if [ "$choice" = "open" ]; then xdg-open "$1"; fi'
)


class Notifier(Protocol):
    def notify(self, *, issue_iid: int, folder: Path) -> None: ...


def notification_lines(issue_iid: int, folder: Path) -> tuple[str, str]:
    return f"Issue #{issue_iid} created", str(folder)


def _powershell_quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class DesktopNotifier:
    """Show a native notification with an "Open folder" button.

    Backend processes are kept so finished ones can be reaped with `poll()`. A
    notification still on screen when the run ends stays open in its own session.
    """

    def __init__(self, *, platform: str | None = None) -> None:
        self._platform = platform or sys.platform
        self._processes: list[subprocess.Popen[bytes]] = []

    @property
    def pending(self) -> int:
        """Number of notifications whose backend process is still running."""

        self._reap()
        return len(self._processes)

    def _reap(self) -> None:
        self._processes = [p for p in self._processes if p.poll() is None]

    def build_command(self, *, issue_iid: int, folder: Path) -> list[str]:
        """Return the command line for the current platform.

        Raises:
            NotificationError: if no supported notification backend is installed.
        """

        title, body = notification_lines(issue_iid, folder)
        target = str(folder.resolve())

        if self._platform.startswith("linux"):
            if shutil.which("notify-send") is None:
                raise NotificationError("notify-send is not installed")
            return [
                "sh", "-c", _LINUX_SCRIPT, "notify", target, APP_NAME, ACTION_LABEL, title, body
            ]

        if self._platform == "darwin":
            if shutil.which("terminal-notifier") is None:
                raise NotificationError("terminal-notifier is not installed")
            return [
                "terminal-notifier",
                "-title",
                APP_NAME,
                "-subtitle",
                title,
                "-message",
                body,
                "-open",
                folder.resolve().as_uri(),
            ]

        if self._platform.startswith("win"):
            shell = shutil.which("pwsh") or shutil.which("powershell")
            if shell is None:
                raise NotificationError("PowerShell is not available")
            script = (
                "Import-Module BurntToast -ErrorAction Stop; "
                f"$button = New-BTButton -Content {_powershell_quote(ACTION_LABEL)} "
                f"-Arguments {_powershell_quote(target)} -ActivationType Protocol; "
                f"New-BurntToastNotification -Text {_powershell_quote(title)}, "
                f"{_powershell_quote(body)} -Button $button"
            )
            return [shell, "-NoProfile", "-NonInteractive", "-Command", script]

        raise NotificationError(f"No notification backend for platform {self._platform!r}")

    def notify(self, *, issue_iid: int, folder: Path) -> None:
        command = self.build_command(issue_iid=issue_iid, folder=folder)
        self._reap()
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            raise NotificationError(f"Failed to start notification backend: {e}") from e
        self._processes.append(process)

        logger.info("Notification sent", extra={"issue_iid": issue_iid, "path": str(folder)})


class NullNotifier:
    """Notifier used when notifications are disabled."""

    def notify(self, *, issue_iid: int, folder: Path) -> None:
        logger.info(
            "Notifications disabled; skipping",
            extra={"issue_iid": issue_iid, "path": str(folder)},
        )
