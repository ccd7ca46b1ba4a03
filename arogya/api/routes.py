# arogya/api/routes.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from arogya.config import get_settings
from arogya.intake.schema import PatientReport
from arogya.services import (
    ExportError,
    ExportedDocument,
    IntakeSessionService,
    ReportUnavailableError,
    SessionNotFoundError,
    export_pdf,
    export_text,
)
from .schemas import (
    KeysResponse,
    LanguageRequest,
    LanguageResponse,
    MessageRequest,
    MessageResponse,
    SessionStatus,
    StartSessionRequest,
    StartSessionResponse,
)

logger = logging.getLogger("arogya.api")

router = APIRouter()

_service = IntakeSessionService()


def get_session_service() -> IntakeSessionService:
    return _service


def _not_found(session_id: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=f"Session {session_id} not found. Start a new session.",
    )


def _download(document: ExportedDocument) -> Response:
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{document.filename}"',
            "X-Export-Degraded": "true" if document.degraded else "false",
        },
    )


@router.get("/keys", response_model=KeysResponse)
def get_keys() -> KeysResponse:
    """
    Provider keys for the browser. Unset keys come back as empty strings.
    """
    settings = get_settings()
    return KeysResponse(
        groq=settings.groq_api_key,
        perplexity=settings.perplexity_api_key,
        gemini=settings.gemini_api_key,
    )


@router.post("/sessions", response_model=StartSessionResponse)
def start_session(
    payload: StartSessionRequest,
    service: IntakeSessionService = Depends(get_session_service),
) -> StartSessionResponse:
    session_id, greeting, state = service.start_session(payload.language)
    return StartSessionResponse(session_id=session_id, greeting=greeting, stage=state.stage)


@router.get("/sessions/{session_id}", response_model=SessionStatus)
def get_session(
    session_id: str,
    service: IntakeSessionService = Depends(get_session_service),
) -> SessionStatus:
    try:
        with service.locked_state(session_id) as state:
            return SessionStatus.from_state(state)
    except SessionNotFoundError:
        raise _not_found(session_id)


@router.delete("/sessions/{session_id}", status_code=204)
def close_session(
    session_id: str,
    service: IntakeSessionService = Depends(get_session_service),
) -> Response:
    try:
        service.close_session(session_id)
    except SessionNotFoundError:
        raise _not_found(session_id)
    return Response(status_code=204)


@router.post("/sessions/{session_id}/messages", response_model=MessageResponse)
def send_message(
    session_id: str,
    payload: MessageRequest,
    service: IntakeSessionService = Depends(get_session_service),
) -> MessageResponse:
    try:
        turn = service.handle_turn(session_id, payload.message)
    except SessionNotFoundError:
        raise _not_found(session_id)

    return MessageResponse(
        replies=turn.replies,
        emergency=turn.emergency,
        failed=turn.failed,
        status=SessionStatus.from_state(turn.state),
    )


@router.put("/sessions/{session_id}/language", response_model=LanguageResponse)
def change_language(
    session_id: str,
    payload: LanguageRequest,
    service: IntakeSessionService = Depends(get_session_service),
) -> LanguageResponse:
    try:
        greeting, state = service.change_language(session_id, payload.language)
    except SessionNotFoundError:
        raise _not_found(session_id)
    return LanguageResponse(greeting=greeting, status=SessionStatus.from_state(state))


def _load_report(service: IntakeSessionService, session_id: str) -> PatientReport:
    try:
        return service.get_report(session_id)
    except SessionNotFoundError:
        raise _not_found(session_id)
    except ReportUnavailableError as exc:
        raise HTTPException(status_code=409, detail=str(exc))


@router.get("/sessions/{session_id}/report", response_model=PatientReport)
def get_report(
    session_id: str,
    service: IntakeSessionService = Depends(get_session_service),
) -> PatientReport:
    return _load_report(service, session_id)


@router.get("/sessions/{session_id}/report.pdf")
def download_report_pdf(
    session_id: str,
    service: IntakeSessionService = Depends(get_session_service),
) -> Response:
    report = _load_report(service, session_id)
    try:
        document = export_pdf(report, pdf_enabled=get_settings().pdf_export_enabled)
    except ExportError:
        logger.exception("Report export failed for session %s", session_id)
        raise HTTPException(
            status_code=500,
            detail="There was an error generating the PDF. Please try again.",
        )
    return _download(document)


@router.get("/sessions/{session_id}/report.txt")
def download_report_text(
    session_id: str,
    service: IntakeSessionService = Depends(get_session_service),
) -> Response:
    report = _load_report(service, session_id)
    return _download(export_text(report))
