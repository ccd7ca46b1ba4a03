# arogya/api/schemas.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from arogya.intake.emergency import EMERGENCY_NUMBERS
from arogya.intake.stages import IntakeStage, Language
from arogya.intake.state import IntakeState


class KeysResponse(BaseModel):
    groq: str = ""
    perplexity: str = ""
    gemini: str = ""


class StartSessionRequest(BaseModel):
    language: Language = Language.ENGLISH


class StartSessionResponse(BaseModel):
    session_id: str
    greeting: str
    stage: IntakeStage


class MessageRequest(BaseModel):
    message: str = Field(..., min_length=1)


class PatientInfo(BaseModel):
    name: Optional[str] = None
    age: Optional[str] = None
    gender: Optional[str] = None
    location: Optional[str] = None


class SessionStatus(BaseModel):
    stage: IntakeStage
    language: Language
    assessment_complete: bool
    report_generated: bool
    emergency_detected: bool
    patient: PatientInfo
    missing_fields: List[str]
    # Only set once an emergency was flagged
    emergency_numbers: Optional[str] = None

    @classmethod
    def from_state(cls, state: IntakeState) -> "SessionStatus":
        return cls(
            stage=state.stage,
            language=state.language,
            assessment_complete=state.assessment_complete,
            report_generated=state.report_generated,
            emergency_detected=state.emergency_detected,
            patient=PatientInfo(**state.patient.snapshot()),
            missing_fields=state.patient.missing_required(),
            emergency_numbers=EMERGENCY_NUMBERS if state.emergency_detected else None,
        )


class MessageResponse(BaseModel):
    replies: List[str]
    emergency: bool
    failed: bool
    status: SessionStatus


class LanguageRequest(BaseModel):
    language: Language


class LanguageResponse(BaseModel):
    greeting: Optional[str]
    status: SessionStatus
