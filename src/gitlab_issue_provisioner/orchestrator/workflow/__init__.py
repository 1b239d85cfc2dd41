"""Per-issue workflow states and the transitions allowed between them."""

from gitlab_issue_provisioner.orchestrator.workflow.state_machine import (
    IllegalTransitionError,
    IssueState,
    transition,
)

__all__ = ["IllegalTransitionError", "IssueState", "transition"]
