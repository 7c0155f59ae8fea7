"""
Approval event publication.

The approval service signals downstream collaborators (disbursement,
notifications) after a transition commits.  Sinks are injected; the
default writes a structured log record.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from payroll_kernel.domain.approval import ApprovalStatus
from payroll_kernel.logging_config import get_logger

logger = get_logger("services.events")

APPROVAL_PENDING = "payroll.approval.pending"
APPROVAL_APPROVED = "payroll.approval.approved"
APPROVAL_REJECTED = "payroll.approval.rejected"

EVENT_FOR_STATUS: dict[ApprovalStatus, str] = {
    ApprovalStatus.PENDING_APPROVAL: APPROVAL_PENDING,
    ApprovalStatus.APPROVED: APPROVAL_APPROVED,
    ApprovalStatus.REJECTED: APPROVAL_REJECTED,
}


@runtime_checkable
class ApprovalEventSink(Protocol):
    """Receives one event per committed approval transition."""

    def publish(self, event_name: str, payload: Mapping[str, object]) -> None:
        ...


class LoggingEventSink:
    """Default sink: one ``approval_event_published`` log record per event."""

    def publish(self, event_name: str, payload: Mapping[str, object]) -> None:
        logger.info(
            "approval_event_published",
            extra={"event_name": event_name, "payload": dict(payload)},
        )


class InMemoryEventSink:
    """Keeps published events in order; for local runs and tests."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, object]]] = []

    def publish(self, event_name: str, payload: Mapping[str, object]) -> None:
        self.events.append((event_name, dict(payload)))

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.events]
