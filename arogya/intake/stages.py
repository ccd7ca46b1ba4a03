# arogya/intake/stages.py
from enum import Enum


class IntakeStage(str, Enum):
    INTAKE = "intake"
    ASSESSMENT_COMPLETE = "assessment_complete"
    INFO_COLLECTION = "info_collection"
    REPORT_READY = "report_ready"


class Language(str, Enum):
    ENGLISH = "english"
    HINDI = "hindi"
    MARATHI = "marathi"
    KANNADA = "kannada"
