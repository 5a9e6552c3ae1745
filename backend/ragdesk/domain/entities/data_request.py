"""Domain entity for data-subject (privacy) requests and their lifecycle.

Lifecycle::

    pending ──approve──▶ approved ──complete──▶ completed
       │  ╲                 │
       │   ╲──complete──────┼──────────────────▶ completed
       │                    │
       ├──reject────────────┴──reject──────────▶ rejected
       └──cancel──────────── (approved too) ───▶ cancelled

``completed``, ``rejected`` and ``cancelled`` are terminal: any further
action raises ``RequestAlreadyFinalized``.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from ragdesk.domain.exceptions import InvalidStateTransition, RequestAlreadyFinalized


class RequestType(str, Enum):
    """Kinds of data-subject requests."""

    EXPORT = "export"
    DELETION = "deletion"
    RECTIFICATION = "rectification"
    PORTABILITY = "portability"


class RequestStatus(str, Enum):
    """Lifecycle states of a data-subject request."""

    PENDING = "pending"
    APPROVED = "approved"
    COMPLETED = "completed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset({
    RequestStatus.COMPLETED,
    RequestStatus.REJECTED,
    RequestStatus.CANCELLED,
})


class SLAStatus(str, Enum):
    """How close an open request is to its response deadline."""

    ON_TRACK = "on_track"
    WARNING = "warning"
    OVERDUE = "overdue"


@dataclass
class DataSubjectRequest:
    """A single privacy request (export, deletion, rectification, portability).

    Created in ``pending``. Only the transition methods below change
    ``status``; each one checks the current status first.
    """

    subject_id: str
    request_type: RequestType
    id: str = field(default_factory=lambda: str(uuid4()))
    status: RequestStatus = RequestStatus.PENDING
    request_details: dict[str, Any] = field(default_factory=dict)
    notes: str | None = None
    admin_notes: str | None = None
    result: dict[str, Any] = field(default_factory=dict)
    processed_by: str | None = None
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    approved_at: datetime | None = None
    completed_at: datetime | None = None
    expires_at: datetime | None = None
    version: int = 1

    # ── Transitions ──────────────────────────────────────────────────

    def approve(self, actor_id: str, notes: str | None = None) -> None:
        """pending → approved. Does not set a completion timestamp."""
        self._guard("approve", RequestStatus.PENDING)
        self.status = RequestStatus.APPROVED
        self.approved_at = datetime.now(timezone.utc)
        self._record_actor(actor_id, notes)

    def reject(self, actor_id: str, notes: str | None = None) -> None:
        """pending | approved → rejected."""
        self._guard("reject", RequestStatus.PENDING, RequestStatus.APPROVED)
        self.status = RequestStatus.REJECTED
        self.completed_at = datetime.now(timezone.utc)
        self._record_actor(actor_id, notes)

    def complete(
        self,
        actor_id: str,
        result: dict[str, Any] | None = None,
        notes: str | None = None,
        *,
        completed_at: datetime | None = None,
    ) -> None:
        """approved → completed; pending → completed is tolerated for immediate actions."""
        self._guard("complete", RequestStatus.APPROVED, RequestStatus.PENDING)
        self.status = RequestStatus.COMPLETED
        self.completed_at = completed_at or datetime.now(timezone.utc)
        self.result = dict(result or {})
        self._record_actor(actor_id, notes)

    def cancel(self, actor_id: str, notes: str | None = None) -> None:
        """pending | approved → cancelled."""
        self._guard("cancel", RequestStatus.PENDING, RequestStatus.APPROVED)
        self.status = RequestStatus.CANCELLED
        self.completed_at = datetime.now(timezone.utc)
        self._record_actor(actor_id, notes)

    def ensure_can(self, action: str) -> None:
        """Raise if ``action`` is not allowed right now, without changing anything."""
        allowed = _ALLOWED_FROM.get(action)
        if allowed is None:
            raise ValueError(f"Unknown action '{action}'")
        self._guard(action, *allowed)

    # ── Derived values ───────────────────────────────────────────────

    @property
    def is_finalized(self) -> bool:
        return self.status.is_terminal

    def processing_time_hours(self) -> int | None:
        """Whole hours from submission to completion, or None while open."""
        if self.completed_at is None:
            return None
        elapsed = self.completed_at - self.submitted_at
        return round(elapsed.total_seconds() / 3600)

    def sla_deadline(self, sla_days: int = 30) -> datetime:
        return self.submitted_at + timedelta(days=sla_days)

    def sla_status(
        self,
        now: datetime | None = None,
        *,
        sla_days: int = 30,
        warning_days: int = 27,
    ) -> SLAStatus | None:
        """Deadline tracking for open requests; None once finalized."""
        if self.is_finalized:
            return None
        now = now or datetime.now(timezone.utc)
        if now > self.submitted_at + timedelta(days=sla_days):
            return SLAStatus.OVERDUE
        if now > self.submitted_at + timedelta(days=warning_days):
            return SLAStatus.WARNING
        return SLAStatus.ON_TRACK

    # ── Internals ────────────────────────────────────────────────────

    def _guard(self, action: str, *allowed: RequestStatus) -> None:
        if self.status.is_terminal:
            raise RequestAlreadyFinalized(self.id, self.status.value, action)
        if self.status not in allowed:
            raise InvalidStateTransition(self.id, self.status.value, action)

    def _record_actor(self, actor_id: str, notes: str | None) -> None:
        self.processed_by = actor_id
        if notes is not None:
            self.admin_notes = notes


_ALLOWED_FROM: dict[str, tuple[RequestStatus, ...]] = {
    "approve": (RequestStatus.PENDING,),
    "reject": (RequestStatus.PENDING, RequestStatus.APPROVED),
    "complete": (RequestStatus.APPROVED, RequestStatus.PENDING),
    "cancel": (RequestStatus.PENDING, RequestStatus.APPROVED),
}


# ── Cascading deletion ───────────────────────────────────────────────


@dataclass(frozen=True)
class SubjectCollection:
    """A table holding rows owned by a data subject."""

    name: str
    subject_column: str = "user_id"


# Children and logs first, the identity-bearing profile last.
SUBJECT_DATA_COLLECTIONS: tuple[SubjectCollection, ...] = (
    SubjectCollection("messages"),
    SubjectCollection("user_health_metrics"),
    SubjectCollection("consent_records", subject_column="subject_id"),
    SubjectCollection("data_subject_requests", subject_column="subject_id"),
    SubjectCollection("subscriptions"),
    SubjectCollection("profiles"),
)


@dataclass
class CollectionDeletionOutcome:
    """Result of erasing one collection: a row count or an error, never both."""

    collection: str
    records_deleted: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class DeletionSummary:
    """Aggregate of per-collection outcomes for one cascading deletion.

    The deletion is best-effort: failed collections are listed in
    ``errors`` and the rest are still processed.
    """

    outcomes: list[CollectionDeletionOutcome] = field(default_factory=list)

    @property
    def tables_affected(self) -> list[str]:
        return [o.collection for o in self.outcomes if o.succeeded and o.records_deleted > 0]

    @property
    def records_deleted(self) -> int:
        return sum(o.records_deleted for o in self.outcomes if o.succeeded)

    @property
    def errors(self) -> list[str]:
        return [o.error for o in self.outcomes if o.error is not None]

    @property
    def is_partial(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tables_affected": self.tables_affected,
            "records_deleted": self.records_deleted,
            "errors": self.errors,
        }
