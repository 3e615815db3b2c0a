"""
Trash ("recycle bin") rules for feedback records.

A record is either ACTIVE or PENDING_DELETION. Staff below superadmin can
only move an active record into the trash; a superadmin delete always
removes the row, whatever state it is in. Only a superadmin restores.
"""

import enum
from typing import Optional

from core.rbac import role_level, ROLE_HIERARCHY
from models.feedback import Feedback


class DeletionState(str, enum.Enum):
    ACTIVE = "active"
    PENDING_DELETION = "pending_deletion"


class DeleteOutcome(str, enum.Enum):
    HARD_DELETE = "hard_delete"
    REQUEST_DELETION = "request_deletion"
    ALREADY_PENDING = "already_pending"


class RestoreOutcome(str, enum.Enum):
    RESTORE = "restore"
    NOOP = "noop"


def state_of(item: Feedback) -> DeletionState:
    return DeletionState.PENDING_DELETION if item.deletion_requested else DeletionState.ACTIVE


def plan_delete(role: Optional[str], state: DeletionState) -> DeleteOutcome:
    if role_level(role) >= ROLE_HIERARCHY["superadmin"]:
        return DeleteOutcome.HARD_DELETE
    if state is DeletionState.PENDING_DELETION:
        return DeleteOutcome.ALREADY_PENDING
    return DeleteOutcome.REQUEST_DELETION


def plan_restore(state: DeletionState) -> RestoreOutcome:
    if state is DeletionState.PENDING_DELETION:
        return RestoreOutcome.RESTORE
    return RestoreOutcome.NOOP


def request_deletion(item: Feedback, requester_id: str) -> None:
    item.deletion_requested = True
    item.deletion_requested_by = requester_id


def restore(item: Feedback) -> None:
    item.deletion_requested = False
    item.deletion_requested_by = None
