"""Pydantic DTOs for consent recording and lookup."""

from datetime import datetime

from pydantic import BaseModel, Field

from ragdesk.domain.entities import ConsentType, LegalBasis


class ConsentCreate(BaseModel):
    """Schema for recording a consent decision."""

    consent_type: ConsentType
    consent_given: bool
    legal_basis: LegalBasis
    consent_text: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1, max_length=50)
    source: str = Field("admin_panel", max_length=100)


class ConsentRecordedResponse(BaseModel):
    success: bool = True
    consent_id: str
    recorded_at: datetime


class ConsentResponse(BaseModel):
    consent_type: ConsentType
    consent_given: bool
    legal_basis: LegalBasis
    version: str
    source: str
    created_at: datetime

    model_config = {"from_attributes": True}


class CurrentConsentsResponse(BaseModel):
    subject_id: str
    consents: list[ConsentResponse]
