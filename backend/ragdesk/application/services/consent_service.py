"""Application service for consent records."""

import logging

from ragdesk.application.interfaces import ConsentRepository
from ragdesk.application.schemas.consent import ConsentCreate
from ragdesk.application.services.audit_trail import AuditTrail
from ragdesk.domain.entities import (
    ConsentRecord,
    ConsentType,
    RequestOrigin,
    resolve_current_consents,
)

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "consent_record"


class ConsentService:
    """Appends consent decisions and answers "what is in force now"."""

    def __init__(self, repository: ConsentRepository, audit_trail: AuditTrail):
        self._repository = repository
        self._audit = audit_trail

    async def record(
        self,
        subject_id: str,
        data: ConsentCreate,
        *,
        origin: RequestOrigin | None = None,
    ) -> ConsentRecord:
        """Store a new consent decision; earlier decisions stay untouched."""
        record = await self._repository.create(
            ConsentRecord(
                subject_id=subject_id,
                consent_type=data.consent_type,
                consent_given=data.consent_given,
                legal_basis=data.legal_basis,
                consent_text=data.consent_text,
                version=data.version,
                source=data.source,
            )
        )
        logger.info(
            "Consent %s for %s: given=%s",
            record.consent_type.value,
            subject_id,
            record.consent_given,
        )

        await self._audit.record(
            actor_id=subject_id,
            action="grant_consent" if record.consent_given else "withdraw_consent",
            resource_type=RESOURCE_TYPE,
            resource_id=record.id,
            changes=data.model_dump(mode="json"),
            origin=origin,
        )
        return record

    async def current_consents(
        self,
        subject_id: str,
        *,
        consent_type: ConsentType | None = None,
    ) -> list[ConsentRecord]:
        history = await self._repository.list_for_subject(subject_id, consent_type=consent_type)
        current = resolve_current_consents(history)
        return [current[t] for t in ConsentType if t in current]

    async def history(self, subject_id: str) -> list[ConsentRecord]:
        return await self._repository.list_for_subject(subject_id)
