# arogya/intake/state.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from arogya.intake.stages import IntakeStage, Language
from arogya.intake.schema import PatientReport


REQUIRED_PATIENT_FIELDS = ("name", "age", "gender")

# How each field is worded when we ask the user for it
FIELD_LABELS: Dict[str, str] = {
    "name": "name",
    "age": "age",
    "gender": "gender/sex",
    "location": "location",
}


@dataclass
class ConversationTurn:
    role: str  # "user" or "assistant"
    content: str


@dataclass
class PatientFields:
    name: Optional[str] = None
    age: Optional[str] = None
    gender: Optional[str] = None
    location: Optional[str] = None

    def missing_required(self) -> List[str]:
        return [f for f in REQUIRED_PATIENT_FIELDS if not getattr(self, f)]

    def has_required(self) -> bool:
        return not self.missing_required()

    def snapshot(self) -> Dict[str, Optional[str]]:
        return {
            "name": self.name,
            "age": self.age,
            "gender": self.gender,
            "location": self.location,
        }

    def reset(self) -> None:
        self.name = None
        self.age = None
        self.gender = None
        self.location = None


@dataclass
class IntakeState:
    """
    In-memory state of one chat session.

    Only IntakeAgent mutates this. The phase flags the UI cares about
    (assessment complete, report generated) are derived from `stage`
    so they can never disagree with each other.
    """

    stage: IntakeStage = IntakeStage.INTAKE
    language: Language = Language.ENGLISH
    turns: List[ConversationTurn] = field(default_factory=list)
    patient: PatientFields = field(default_factory=PatientFields)

    # Once set it stays set for the rest of the session
    emergency_detected: bool = False

    report: Optional[PatientReport] = None

    @property
    def assessment_complete(self) -> bool:
        return self.stage != IntakeStage.INTAKE

    @property
    def report_generated(self) -> bool:
        return self.stage == IntakeStage.REPORT_READY and self.report is not None

    @property
    def awaiting_patient_info(self) -> bool:
        return self.stage in (
            IntakeStage.ASSESSMENT_COMPLETE,
            IntakeStage.INFO_COLLECTION,
        )

    def transcript(self) -> List[Dict[str, str]]:
        return [{"role": t.role, "content": t.content} for t in self.turns]
