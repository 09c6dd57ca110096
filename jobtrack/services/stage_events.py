"""
Audit trail for stage transitions.

The stage service reports every transition to a StageEventRecorder instead
of writing log lines inline. Production uses LoggingStageEventRecorder,
which emits one structlog event per transition; tests inject an in-memory
recorder and assert on the events.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Optional, Protocol
from uuid import UUID

import structlog


class StageAction:
    ADD_STAGE = "add_stage"
    CHANGE_STAGE = "change_stage"
    UPDATE_STAGE_STATUS = "update_stage_status"
    COMPLETE_STAGE = "complete_stage"
    DELETE_STAGE = "delete_stage"


@dataclass(frozen=True)
class StageEvent:
    action: str
    user_id: UUID
    application_id: UUID
    stage_id: Optional[UUID] = None
    stage_name: Optional[str] = None
    previous_stage_name: Optional[str] = None
    status: Optional[str] = None
    current_stage_id: Optional[UUID] = None


class StageEventRecorder(Protocol):
    def record(self, event: StageEvent) -> None:
        ...


class LoggingStageEventRecorder:
    """Writes stage events to the ``jobtrack.audit`` structlog logger."""

    def __init__(self, logger=None):
        self._logger = logger or structlog.get_logger("jobtrack.audit")

    def record(self, event: StageEvent) -> None:
        fields = {
            key: str(value)
            for key, value in asdict(event).items()
            if value is not None and key != "action"
        }
        self._logger.info("stage_event", action=event.action, **fields)
