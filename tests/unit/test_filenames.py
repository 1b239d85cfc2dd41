"""Unit tests for folding the issue id into filenames."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from gitlab_issue_provisioner.orchestrator.provisioning import filenames
from gitlab_issue_provisioner.orchestrator.provisioning.filenames import (
    apply_issue_id,
    normalize_base_name,
    normalize_filenames,
    normalized_filename,
    rename_file,
    split_filename,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("readme.txt", ("readme", ".txt")),
        ("archive.tar.gz", ("archive.tar", ".gz")),
        ("Makefile", ("Makefile", "")),
        (".gitignore", ("", ".gitignore")),
    ],
)
def test_split_filename_uses_last_dot(name: str, expected: tuple[str, str]) -> None:
    assert split_filename(name) == expected


@pytest.mark.parametrize(
    ("base", "expected"),
    [
        ("a  -   b", "a-b"),
        ("  padded   name  ", "padded name"),
        ("tab\tseparated\t-\tparts", "tab separated-parts"),
        ("keep-hyphen", "keep-hyphen"),
        ("half -spaced", "half -spaced"),
    ],
)
def test_normalize_base_name(base: str, expected: str) -> None:
    assert normalize_base_name(base) == expected


@pytest.mark.parametrize(
    ("name", "issue_iid", "expected"),
    [
        ("issue-login bug.txt", 42, "Issue-42login bug.txt"),
        ("My Issue notes.md", 7, "My Issue-7 notes.md"),
        ("readme.txt", 9, "readme.txt"),
        ("a  -   b.png", 9, "a-b.png"),
        ("ISSUE-x and issue-y.md", 3, "Issue-3x and Issue-3y.md"),
        ("issue.md", 5, "Issue-5.md"),
        ("issues list.md", 5, "issues list.md"),
        ("tissue sample.md", 5, "tissue sample.md"),
        ("My  issue  -  draft.docx", 12, "My Issue-12draft.docx"),
    ],
)
def test_normalized_filename_rule_table(name: str, issue_iid: int, expected: str) -> None:
    assert normalized_filename(name, issue_iid) == expected


def test_prefix_rule_wins_over_word_rule() -> None:
    # "issue" alone would match the word rule; the prefix rule is checked first.
    assert apply_issue_id("issue issue-x", 1) == "issue Issue-1x"


def test_rerunning_on_renamed_output_inserts_id_again() -> None:
    once = normalized_filename("issue-login bug.txt", 42)
    twice = normalized_filename(once, 42)

    assert once == "Issue-42login bug.txt"
    assert twice == "Issue-4242login bug.txt"


def test_normalize_filenames_renames_recursively(tmp_path: Path) -> None:
    (tmp_path / "sub" / "issue-dir").mkdir(parents=True)
    (tmp_path / "issue-template.md").write_text("t", encoding="utf-8")
    (tmp_path / "sub" / "My Issue notes.md").write_text("n", encoding="utf-8")
    (tmp_path / "sub" / "issue-dir" / "readme.txt").write_text("r", encoding="utf-8")

    results = normalize_filenames(tmp_path, 101)

    assert all(r.ok for r in results)
    assert sorted(r.target.name for r in results) == [
        "Issue-101template.md",
        "My Issue-101 notes.md",
    ]
    assert (tmp_path / "Issue-101template.md").read_text(encoding="utf-8") == "t"
    assert (tmp_path / "sub" / "My Issue-101 notes.md").exists()
    # Directories keep their names; unchanged files produce no result.
    assert (tmp_path / "sub" / "issue-dir" / "readme.txt").exists()


def test_normalize_filenames_twice_changes_names_again(tmp_path: Path) -> None:
    (tmp_path / "issue-template.md").write_text("t", encoding="utf-8")

    normalize_filenames(tmp_path, 101)
    normalize_filenames(tmp_path, 101)

    assert [p.name for p in tmp_path.iterdir()] == ["Issue-101101template.md"]


def test_rename_file_reports_existing_target(tmp_path: Path) -> None:
    source = tmp_path / "issue-a.md"
    source.write_text("new", encoding="utf-8")
    (tmp_path / "Issue-1a.md").write_text("old", encoding="utf-8")

    result = rename_file(source, "Issue-1a.md")

    assert not result.ok
    assert result.message == "Target already exists"
    assert source.exists()
    assert (tmp_path / "Issue-1a.md").read_text(encoding="utf-8") == "old"


def test_whitespace_only_name_is_reported_not_raised(tmp_path: Path) -> None:
    (tmp_path / " ").write_text("blank", encoding="utf-8")
    (tmp_path / "issue-a.md").write_text("a", encoding="utf-8")

    results = normalize_filenames(tmp_path, 3)

    assert [(r.source.name, r.ok) for r in results] == [(" ", False), ("issue-a.md", True)]
    assert (tmp_path / " ").exists()
    assert (tmp_path / "Issue-3a.md").exists()


def test_failed_rename_is_logged_and_skipped(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    (tmp_path / "issue-a.md").write_text("a", encoding="utf-8")
    (tmp_path / "issue-b.md").write_text("b", encoding="utf-8")

    real_rename = Path.rename

    def flaky_rename(self: Path, target: Path) -> Path:
        if self.name == "issue-a.md":
            raise PermissionError("locked")
        return real_rename(self, target)

    monkeypatch.setattr(filenames.Path, "rename", flaky_rename)

    with caplog.at_level(logging.WARNING):
        results = normalize_filenames(tmp_path, 8)

    assert [(r.source.name, r.ok) for r in results] == [
        ("issue-a.md", False),
        ("issue-b.md", True),
    ]
    assert results[0].message == "locked"
    assert (tmp_path / "issue-a.md").exists()
    assert (tmp_path / "Issue-8b.md").exists()
    assert "File rename failed" in caplog.text
