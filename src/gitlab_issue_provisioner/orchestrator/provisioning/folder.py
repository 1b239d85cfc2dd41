"""Materialise an issue's working folder from a template folder."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from gitlab_issue_provisioner.orchestrator.errors import FilesystemError

logger = logging.getLogger(__name__)


def issue_folder(destination_root: Path, issue_iid: int) -> Path:
    return destination_root / str(issue_iid)


def provision_folder(*, template_dir: Path, destination_root: Path, issue_iid: int) -> Path:
    """Copy the template's contents into `destination_root/<issue_iid>`.

    An existing destination is reused as-is: same-named files are overwritten and
    everything else in it is left alone. Hidden entries are copied too.

    Returns:
        The destination path.

    Raises:
        FilesystemError: if the template can't be read or the destination can't be
            written.
    """

    if not template_dir.is_dir():
        raise FilesystemError(f"Template folder not found: {template_dir}", path=template_dir)

    dest = issue_folder(destination_root, issue_iid)
    try:
        dest.mkdir(parents=True, exist_ok=True)
        entries = sorted(template_dir.iterdir(), key=lambda p: p.name)
        for entry in entries:
            target = dest / entry.name
            if entry.is_dir():
                shutil.copytree(entry, target, dirs_exist_ok=True)
            else:
                shutil.copy2(entry, target)
    except OSError as e:
        raise FilesystemError(
            f"Failed to provision {dest} from {template_dir}: {e}", path=dest
        ) from e

    logger.info(
        "Folder provisioned",
        extra={"issue_iid": issue_iid, "path": str(dest), "entries": len(entries)},
    )
    return dest


class TemplateFolderProvisioner:
    """`FolderProvisioner` backed by `provision_folder`."""

    def provision(self, *, template_dir: Path, destination_root: Path, issue_iid: int) -> Path:
        return provision_folder(
            template_dir=template_dir, destination_root=destination_root, issue_iid=issue_iid
        )
