"""Rename files in a provisioned folder so their names carry the issue id.

Rules, applied to the base name (the extension is everything from the last dot):

1. Whitespace runs collapse to one space, `" - "` style separators collapse to `-`,
   and the result is trimmed.
2. If the base name contains `issue-` (any case), every occurrence becomes
   `Issue-<iid>`, so `issue-login` turns into `Issue-42login`.
3. Otherwise, every whole word `issue` (any case) becomes `Issue-<iid>`.

The rules are not idempotent: a second pass over `Issue-42login` matches rule 2
again and yields `Issue-4242login`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
_SPACED_HYPHEN_RE = re.compile(r"\s+-\s+")
_ISSUE_PREFIX_RE = re.compile(r"issue-", re.IGNORECASE)
_ISSUE_WORD_RE = re.compile(r"\bissue\b", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class RenameResult:
    source: Path
    target: Path
    ok: bool
    message: str


def split_filename(name: str) -> tuple[str, str]:
    """Split into (base, extension); the extension keeps its leading dot."""

    dot = name.rfind(".")
    if dot == -1:
        return name, ""
    return name[:dot], name[dot:]


def normalize_base_name(base: str) -> str:
    collapsed = _WHITESPACE_RE.sub(" ", base)
    collapsed = _SPACED_HYPHEN_RE.sub("-", collapsed)
    return collapsed.strip()


def apply_issue_id(base: str, issue_iid: int) -> str:
    """Fold the issue id into a normalized base name (first matching rule wins)."""

    replacement = f"Issue-{issue_iid}"
    if _ISSUE_PREFIX_RE.search(base):
        return _ISSUE_PREFIX_RE.sub(lambda _m: replacement, base)
    if _ISSUE_WORD_RE.search(base):
        return _ISSUE_WORD_RE.sub(lambda _m: replacement, base)
    return base


def normalized_filename(name: str, issue_iid: int) -> str:
    base, ext = split_filename(name)
    return apply_issue_id(normalize_base_name(base), issue_iid) + ext


def rename_file(path: Path, new_name: str) -> RenameResult:
    """Rename `path` within its directory. Never raises; failures are reported."""

    try:
        target = path.with_name(new_name)
    except ValueError as e:
        # A whitespace-only base normalizes to an empty name.
        return RenameResult(source=path, target=path, ok=False, message=str(e))
    if target.exists():
        return RenameResult(source=path, target=target, ok=False, message="Target already exists")
    try:
        path.rename(target)
    except OSError as e:
        return RenameResult(source=path, target=target, ok=False, message=str(e))
    return RenameResult(source=path, target=target, ok=True, message="Renamed")


def normalize_filenames(folder: Path, issue_iid: int) -> list[RenameResult]:
    """Rename every file under `folder` whose normalized name differs.

    Failed renames are logged and skipped. Directories are never renamed.

    Returns:
        One result per attempted rename, in path order.
    """

    # Collect first: renaming while walking would change the listing.
    files = sorted(p for p in folder.rglob("*") if p.is_file())

    results: list[RenameResult] = []
    for path in files:
        new_name = normalized_filename(path.name, issue_iid)
        if new_name == path.name:
            continue

        result = rename_file(path, new_name)
        results.append(result)
        if result.ok:
            logger.debug(
                "File renamed",
                extra={"source": str(result.source), "target": str(result.target)},
            )
        else:
            logger.warning(
                "File rename failed; keeping original name",
                extra={
                    "source": str(result.source),
                    "target": str(result.target),
                    "reason": result.message,
                },
            )

    logger.info(
        "Filenames normalized",
        extra={
            "issue_iid": issue_iid,
            "path": str(folder),
            "renamed": sum(1 for r in results if r.ok),
            "failed": sum(1 for r in results if not r.ok),
        },
    )
    return results
