"""Drive each configured issue through create -> estimate -> folder -> rename -> notify.

Issues are processed one at a time, in configuration order. A failing step ends the
work on that issue (nothing already done is rolled back) and, unless `fail_fast` is
set, the run carries on with the next issue.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from gitlab_issue_provisioner.orchestrator.config import IssueSpec, ProvisioningConfig
from gitlab_issue_provisioner.orchestrator.errors import ProvisionerError
from gitlab_issue_provisioner.orchestrator.gitlab.client import CreatedIssue
from gitlab_issue_provisioner.orchestrator.notify import Notifier
from gitlab_issue_provisioner.orchestrator.provisioning.filenames import (
    RenameResult,
    normalize_filenames,
)
from gitlab_issue_provisioner.orchestrator.provisioning.folder import TemplateFolderProvisioner
from gitlab_issue_provisioner.orchestrator.workflow.state_machine import (
    TERMINAL_STATE,
    IssueState,
    transition,
)

logger = logging.getLogger(__name__)


class IssueTracker(Protocol):
    def create_issue(
        self, *, title: str, description: str, labels: Sequence[str]
    ) -> CreatedIssue: ...

    def set_time_estimate(self, *, issue_iid: int, hours: int) -> bool: ...


class FolderProvisioner(Protocol):
    def provision(self, *, template_dir: Path, destination_root: Path, issue_iid: int) -> Path: ...


@dataclass(frozen=True, slots=True)
class SpecOutcome:
    """What happened to one issue spec."""

    spec: IssueSpec
    state: IssueState
    issue_iid: int | None = None
    folder: Path | None = None
    failed_step: str | None = None
    error: str | None = None
    renames: tuple[RenameResult, ...] = ()

    @property
    def ok(self) -> bool:
        return self.failed_step is None and self.state is TERMINAL_STATE

    @property
    def failed_renames(self) -> tuple[RenameResult, ...]:
        return tuple(r for r in self.renames if not r.ok)


@dataclass(frozen=True, slots=True)
class RunReport:
    outcomes: tuple[SpecOutcome, ...] = ()
    # Number of specs never attempted because the run stopped early.
    skipped: int = 0
    aborted: bool = False

    @property
    def succeeded(self) -> list[SpecOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[SpecOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def ok(self) -> bool:
        return not self.aborted and not self.failed


class IssueProvisioner:
    """Create issues and their working folders, one spec at a time."""

    def __init__(
        self,
        *,
        config: ProvisioningConfig,
        tracker: IssueTracker,
        notifier: Notifier,
        provisioner: FolderProvisioner | None = None,
    ) -> None:
        self._config = config
        self._tracker = tracker
        self._notifier = notifier
        self._provisioner = provisioner or TemplateFolderProvisioner()

    def process(self, spec: IssueSpec) -> SpecOutcome:
        """Run every step for one spec and report how far it got."""

        state = IssueState.PENDING
        issue_iid: int | None = None
        folder: Path | None = None
        renames: tuple[RenameResult, ...] = ()
        step = "create_issue"

        try:
            created = self._tracker.create_issue(
                title=spec.title,
                description=self._config.description,
                labels=list(spec.labels),
            )
            issue_iid = created.iid
            state = transition(current=state, to=IssueState.CREATED)

            step = "time_estimate"
            if self._tracker.set_time_estimate(issue_iid=issue_iid, hours=spec.estimate_hours):
                state = transition(current=state, to=IssueState.TIME_ESTIMATED)

            step = "provision_folder"
            folder = self._provisioner.provision(
                template_dir=self._config.template_dir,
                destination_root=self._config.destination_root,
                issue_iid=issue_iid,
            )
            state = transition(current=state, to=IssueState.FOLDER_PROVISIONED)

            step = "normalize_filenames"
            renames = tuple(normalize_filenames(folder, issue_iid))
            state = transition(current=state, to=IssueState.NORMALIZED)

            step = "notify"
            self._notifier.notify(issue_iid=issue_iid, folder=folder)
            state = transition(current=state, to=IssueState.NOTIFIED)
        except ProvisionerError as e:
            logger.error(
                "Issue processing failed",
                extra={
                    "title": spec.title,
                    "step": step,
                    "state": state.value,
                    "issue_iid": issue_iid,
                    "error": str(e),
                },
            )
            return SpecOutcome(
                spec=spec,
                state=state,
                issue_iid=issue_iid,
                folder=folder,
                failed_step=step,
                error=str(e),
                renames=renames,
            )

        logger.info(
            "Issue provisioned",
            extra={"title": spec.title, "issue_iid": issue_iid, "path": str(folder)},
        )
        return SpecOutcome(
            spec=spec, state=state, issue_iid=issue_iid, folder=folder, renames=renames
        )

    def run(self, specs: Sequence[IssueSpec]) -> RunReport:
        outcomes: list[SpecOutcome] = []
        for index, spec in enumerate(specs):
            outcome = self.process(spec)
            outcomes.append(outcome)
            if not outcome.ok and self._config.fail_fast:
                skipped = len(specs) - index - 1
                logger.warning(
                    "Stopping run after failure (fail-fast)",
                    extra={"title": spec.title, "skipped": skipped},
                )
                return RunReport(outcomes=tuple(outcomes), skipped=skipped, aborted=True)

        report = RunReport(outcomes=tuple(outcomes))
        logger.info(
            "Run complete",
            extra={"succeeded": len(report.succeeded), "failed": len(report.failed)},
        )
        return report
