# arogya/intake/__init__.py
from .schema import ParsedSection, PatientReport, SectionKind
from .stages import IntakeStage, Language
from .state import IntakeState
from .agent import IntakeAgent

__all__ = [
    "ParsedSection",
    "PatientReport",
    "SectionKind",
    "IntakeStage",
    "Language",
    "IntakeState",
    "IntakeAgent",
]
