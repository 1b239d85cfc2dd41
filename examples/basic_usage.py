#!/usr/bin/env python3
"""Programmatic provisioning example.

This demonstrates using the components directly instead of the CLI:

* load settings from `.env`
* create one issue from command-line arguments
* provision and rename its working folder, without a desktop notification
"""

from __future__ import annotations

import argparse
from typing import Sequence

from gitlab_issue_provisioner.orchestrator.config import (
    IssueSpec,
    ProvisionerSettings,
    ProvisioningConfig,
)
from gitlab_issue_provisioner.orchestrator.gitlab.client import GitLabClient
from gitlab_issue_provisioner.orchestrator.logging import configure_logging
from gitlab_issue_provisioner.orchestrator.notify import NullNotifier
from gitlab_issue_provisioner.orchestrator.runner import IssueProvisioner


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Provision one GitLab issue (example).")
    parser.add_argument("--title", required=True, help="Issue title")
    parser.add_argument("--labels", default="", help="Comma-separated extra labels")
    parser.add_argument("--estimate-hours", type=int, default=0, help="Time estimate in hours")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = ProvisionerSettings()
    configure_logging(settings.log_level)

    spec = IssueSpec(
        title=args.title,
        labels=tuple(p.strip() for p in args.labels.split(",") if p.strip()),
        estimate_hours=args.estimate_hours,
    )

    client = GitLabClient(
        token=settings.gitlab_token,
        project_id=settings.gitlab_project_id,
        base_url=settings.gitlab_base_url,
    )
    try:
        runner = IssueProvisioner(
            config=ProvisioningConfig.from_settings(settings),
            tracker=client,
            notifier=NullNotifier(),
        )
        outcome = runner.process(spec)
    finally:
        client.close()

    if not outcome.ok:
        print(f"Failed at {outcome.failed_step}: {outcome.error}")
        return 1

    print(f"Created issue #{outcome.issue_iid}; folder: {outcome.folder}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
