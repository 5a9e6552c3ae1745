"""Domain entity for the privacy audit trail."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class RequestOrigin:
    """Where an operator action came from."""

    ip_address: str | None = None
    user_agent: str | None = None


@dataclass
class AuditEntry:
    """Append-only record of one state-changing action.

    Written once per action and never updated.
    """

    actor_id: str
    action: str  # e.g. "approve_request", "grant_consent"
    resource_type: str  # "data_subject_request" | "consent_record"
    resource_id: str | None = None
    changes: dict[str, Any] = field(default_factory=dict)
    ip_address: str | None = None
    user_agent: str | None = None
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
