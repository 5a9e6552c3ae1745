"""Domain entity for consent records — append-only consent history."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4


class ConsentType(str, Enum):
    DATA_PROCESSING = "data_processing"
    MARKETING = "marketing"
    ANALYTICS = "analytics"
    COOKIES = "cookies"


class LegalBasis(str, Enum):
    CONSENT = "consent"
    CONTRACT = "contract"
    LEGAL_OBLIGATION = "legal_obligation"
    VITAL_INTERESTS = "vital_interests"
    PUBLIC_TASK = "public_task"
    LEGITIMATE_INTERESTS = "legitimate_interests"
    WITHDRAWAL = "withdrawal"


@dataclass
class ConsentRecord:
    """One point-in-time consent decision for a subject and consent type.

    New decisions are new records; earlier ones are never overwritten.
    """

    subject_id: str
    consent_type: ConsentType
    consent_given: bool
    legal_basis: LegalBasis
    consent_text: str
    version: str
    source: str = "admin_panel"
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def resolve_current_consents(
    history: Iterable[ConsentRecord],
) -> dict[ConsentType, ConsentRecord]:
    """Return the current record per consent type.

    The current record is the most recently created one; on equal
    timestamps the one appearing later in ``history`` wins. ``history``
    itself is left untouched.
    """
    current: dict[ConsentType, ConsentRecord] = {}
    for record in history:
        existing = current.get(record.consent_type)
        if existing is None or record.created_at >= existing.created_at:
            current[record.consent_type] = record
    return current
