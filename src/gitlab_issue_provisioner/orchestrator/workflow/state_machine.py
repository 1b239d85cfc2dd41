"""States an issue moves through while it is being provisioned."""

from __future__ import annotations

from enum import Enum


class IssueState(str, Enum):
    PENDING = "pending"
    CREATED = "created"
    TIME_ESTIMATED = "time_estimated"
    FOLDER_PROVISIONED = "folder_provisioned"
    NORMALIZED = "normalized"
    NOTIFIED = "notified"


# The time estimate is optional, so CREATED may go straight to FOLDER_PROVISIONED.
ALLOWED_TRANSITIONS: dict[IssueState, set[IssueState]] = {
    IssueState.PENDING: {IssueState.CREATED},
    IssueState.CREATED: {IssueState.TIME_ESTIMATED, IssueState.FOLDER_PROVISIONED},
    IssueState.TIME_ESTIMATED: {IssueState.FOLDER_PROVISIONED},
    IssueState.FOLDER_PROVISIONED: {IssueState.NORMALIZED},
    IssueState.NORMALIZED: {IssueState.NOTIFIED},
    IssueState.NOTIFIED: set(),
}

TERMINAL_STATE = IssueState.NOTIFIED


class IllegalTransitionError(ValueError):
    pass


def transition(*, current: IssueState, to: IssueState) -> IssueState:
    allowed = ALLOWED_TRANSITIONS.get(current, set())
    if to not in allowed:
        raise IllegalTransitionError(f"Illegal transition: {current.value} -> {to.value}")
    return to
