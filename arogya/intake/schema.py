# arogya/intake/schema.py
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class SectionKind(str, Enum):
    SYMPTOM_SUMMARY = "symptom_summary"
    POSSIBLE_EXPLANATION = "possible_explanation"
    LIFESTYLE_GUIDANCE = "lifestyle_guidance"
    TRADITIONAL_REMEDY = "traditional_remedy"
    WHEN_TO_SEE_DOCTOR = "when_to_see_doctor"
    SAFETY_DISCLAIMER = "safety_disclaimer"

    @property
    def label(self) -> str:
        return SECTION_TITLES[self]


SECTION_TITLES = {
    SectionKind.SYMPTOM_SUMMARY: "Symptom Summary",
    SectionKind.POSSIBLE_EXPLANATION: "Possible Explanation",
    SectionKind.LIFESTYLE_GUIDANCE: "Lifestyle Guidance",
    SectionKind.TRADITIONAL_REMEDY: "Traditional Remedy",
    SectionKind.WHEN_TO_SEE_DOCTOR: "When to See a Doctor",
    SectionKind.SAFETY_DISCLAIMER: "Safety Disclaimer",
}


class ParsedSection(BaseModel):
    kind: SectionKind
    body: str = ""

    @property
    def title(self) -> str:
        return self.kind.label


class ReportBlock(BaseModel):
    """
    One renderable chunk of a report section: either a paragraph of text
    or a bullet list (one item per entry in `lines`).
    """

    type: Literal["paragraph", "list"] = "paragraph"
    lines: List[str] = Field(default_factory=list)


class ReportSection(BaseModel):
    kind: SectionKind
    heading: str
    body: str
    blocks: List[ReportBlock] = Field(default_factory=list)


class PatientHeader(BaseModel):
    name: str = "Anonymous User"
    age: str = "Not provided"
    gender: str = "Not provided"
    # Omitted from the rendered header when unknown
    location: Optional[str] = None


class PatientReport(BaseModel):
    """
    The document shown to the user after a completed assessment.

    Built from the latest qualifying assistant reply plus the patient
    details collected in chat; the disclaimer is always appended no matter
    what the model returned.
    """

    report_id: str
    generated_at: datetime
    patient: PatientHeader
    sections: List[ReportSection] = Field(default_factory=list)
    emergency_banner: Optional[str] = None
    disclaimer: str
