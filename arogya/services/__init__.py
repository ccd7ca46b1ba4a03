# arogya/services/__init__.py
from .intake_session import (
    IntakeSessionService,
    ReportUnavailableError,
    SessionNotFoundError,
)
from .export import ExportError, ExportedDocument, export_pdf, export_text

__all__ = [
    "IntakeSessionService",
    "ReportUnavailableError",
    "SessionNotFoundError",
    "ExportError",
    "ExportedDocument",
    "export_pdf",
    "export_text",
]
