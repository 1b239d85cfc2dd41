"""CLI entrypoint for the issue provisioner."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from pydantic import ValidationError

from gitlab_issue_provisioner import __version__
from gitlab_issue_provisioner.orchestrator.config import (
    IssueSpec,
    ProvisionerSettings,
    ProvisioningConfig,
    load_issue_specs,
)
from gitlab_issue_provisioner.orchestrator.gitlab.client import GitLabClient
from gitlab_issue_provisioner.orchestrator.logging import configure_logging
from gitlab_issue_provisioner.orchestrator.notify import DesktopNotifier, Notifier, NullNotifier
from gitlab_issue_provisioner.orchestrator.provisioning.filenames import normalize_filenames
from gitlab_issue_provisioner.orchestrator.runner import IssueProvisioner, RunReport, SpecOutcome

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2
EXIT_PARTIAL = 4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="provision-issues",
        description="Create GitLab issues and provision a working folder for each one",
    )
    parser.add_argument(
        "--version", action="version", version=f"gitlab-issue-provisioner {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser(
        "run",
        help="Create every configured issue, provision its folder and notify",
    )
    run.add_argument(
        "--issues-file",
        default=None,
        help="JSON list of issues to create (defaults to ISSUES_FILE)",
    )
    run.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop after the first issue that fails instead of continuing",
    )
    run.add_argument(
        "--no-notify",
        action="store_true",
        help="Do not show desktop notifications",
    )

    normalize = subparsers.add_parser(
        "normalize",
        help="Re-run the filename normalizer on an existing issue folder",
    )
    normalize.add_argument("--folder", required=True, help="Issue folder to normalize")
    normalize.add_argument(
        "--issue-iid",
        type=int,
        required=True,
        help="Issue id to fold into the filenames",
    )

    return parser


def _format_outcome(outcome: SpecOutcome) -> str:
    iid = f"#{outcome.issue_iid}" if outcome.issue_iid is not None else "-"
    if outcome.ok:
        line = f"OK     {iid} {outcome.spec.title!r} -> {outcome.folder}"
        if outcome.failed_renames:
            line += f" ({len(outcome.failed_renames)} rename(s) failed)"
        return line
    return f"FAILED {iid} {outcome.spec.title!r} at {outcome.failed_step}: {outcome.error}"


def _print_report(report: RunReport) -> None:
    for outcome in report.outcomes:
        print(_format_outcome(outcome))
    summary = f"{len(report.succeeded)} succeeded, {len(report.failed)} failed"
    if report.aborted:
        summary += f", {report.skipped} skipped (stopped after failure)"
    print(summary)


def _load_run_inputs(
    args: argparse.Namespace, settings: ProvisionerSettings
) -> tuple[list[IssueSpec], ProvisioningConfig]:
    issues_file = Path(args.issues_file) if args.issues_file else settings.issues_file
    specs = load_issue_specs(issues_file)
    config = ProvisioningConfig.from_settings(settings)
    if args.fail_fast:
        config = replace(config, fail_fast=True)
    return specs, config


def _run(
    args: argparse.Namespace,
    settings: ProvisionerSettings,
    specs: list[IssueSpec],
    config: ProvisioningConfig,
) -> int:
    notifier: Notifier
    if args.no_notify or not settings.notifications_enabled:
        notifier = NullNotifier()
    else:
        notifier = DesktopNotifier()

    client = GitLabClient(
        token=settings.gitlab_token,
        project_id=settings.gitlab_project_id,
        base_url=settings.gitlab_base_url,
        timeout_seconds=settings.request_timeout_seconds,
    )
    try:
        runner = IssueProvisioner(config=config, tracker=client, notifier=notifier)
        report = runner.run(specs)
    finally:
        client.close()

    _print_report(report)
    return EXIT_OK if report.ok else EXIT_PARTIAL


def _normalize(args: argparse.Namespace) -> int:
    folder = Path(args.folder)
    if not folder.is_dir():
        print(f"Folder not found: {folder}", file=sys.stderr)
        return EXIT_CONFIG

    results = normalize_filenames(folder, args.issue_iid)
    for r in results:
        status = "renamed" if r.ok else f"failed ({r.message})"
        print(f"{r.source.name} -> {r.target.name}: {status}")
    print(f"{sum(1 for r in results if r.ok)} renamed")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "normalize":
        configure_logging("INFO")
        return _normalize(args)

    try:
        settings = ProvisionerSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_CONFIG

    configure_logging(settings.log_level)

    if args.command != "run":
        logger.error("Unknown command", extra={"command": args.command})
        return EXIT_CONFIG

    try:
        specs, config = _load_run_inputs(args, settings)
    except (OSError, ValueError) as e:
        # Missing or malformed issues file / description; nothing was created.
        logger.error("Could not load run inputs", extra={"error": str(e)})
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    try:
        return _run(args, settings, specs, config)
    except Exception:
        logger.exception("Command failed")
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
