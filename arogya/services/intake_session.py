# arogya/services/intake_session.py
from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterator, List, Optional, Tuple

from arogya.config import get_settings
from arogya.intake.agent import IntakeAgent
from arogya.intake.prompts import ERROR_REPLY
from arogya.intake.schema import PatientReport
from arogya.intake.stages import Language
from arogya.intake.state import FIELD_LABELS, IntakeState
from arogya.llm import LLMClient, get_llm_client


logger = logging.getLogger("arogya.session")


class SessionNotFoundError(KeyError):
    pass


class ReportUnavailableError(ValueError):
    """Raised when a report is requested before one can be produced."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ChatSession:
    session_id: str
    state: IntakeState
    started_at: datetime = field(default_factory=_now)
    last_active: datetime = field(default_factory=_now)
    # Held for a whole turn, LLM call included, so turns never interleave
    lock: threading.Lock = field(default_factory=threading.Lock)


@dataclass
class TurnResponse:
    replies: List[str]
    state: IntakeState
    emergency: bool = False
    failed: bool = False


class IntakeSessionService:
    """
    Service that coordinates:
      - creating and looking up in-memory chat sessions
      - dropping sessions that went idle, and the oldest ones past the cap
      - driving the IntakeAgent
      - calling the LLM when the agent asks for it
    """

    def __init__(
        self,
        agent: Optional[IntakeAgent] = None,
        llm_client: Optional[LLMClient] = None,
        session_ttl: Optional[timedelta] = None,
        max_sessions: Optional[int] = None,
    ):
        settings = get_settings()
        self.agent = agent or IntakeAgent(
            reset_fields_on_assessment=settings.reset_fields_on_assessment
        )
        self.session_ttl = session_ttl or timedelta(minutes=settings.session_ttl_minutes)
        self.max_sessions = max_sessions or settings.max_sessions
        self._llm_client = llm_client
        self._sessions: Dict[str, ChatSession] = {}
        self._sessions_lock = threading.Lock()

    def start_session(self, language: Language = Language.ENGLISH) -> Tuple[str, str, IntakeState]:
        """
        Start a new chat session.

        Returns:
          - session_id
          - greeting to show
          - intake state
        """
        state, greeting = self.agent.start(language)
        session_id = str(uuid.uuid4())
        with self._sessions_lock:
            self._evict_idle()
            while len(self._sessions) >= self.max_sessions:
                oldest = min(self._sessions.values(), key=lambda s: s.last_active)
                self._drop(oldest, "session limit reached")
            self._sessions[session_id] = ChatSession(session_id=session_id, state=state)
        logger.info("Started session %s (%s)", session_id, language.value)
        return session_id, greeting, state

    def close_session(self, session_id: str) -> None:
        with self._sessions_lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            self._drop(session, "closed")

    @property
    def session_count(self) -> int:
        with self._sessions_lock:
            return len(self._sessions)

    @contextmanager
    def locked_state(self, session_id: str) -> Iterator[IntakeState]:
        with self._sessions_lock:
            self._evict_idle()
            session = self._sessions.get(session_id)
            if session is not None:
                session.last_active = _now()
        if session is None:
            raise SessionNotFoundError(session_id)
        with session.lock:
            yield session.state

    def handle_turn(self, session_id: str, message: str) -> TurnResponse:
        """
        Handle a single user message:
          - let the agent update the state
          - call the LLM if the agent could not answer locally
          - feed the model's reply back into the agent
        """
        with self.locked_state(session_id) as state:
            result = self.agent.receive_user_message(state, message)

            if result.reply is not None:
                return TurnResponse(replies=[result.reply], state=state, emergency=result.emergency)
            if not result.needs_llm:
                return TurnResponse(replies=[], state=state, emergency=result.emergency)

            try:
                raw_reply = self._client().chat(result.messages)
            except Exception:
                logger.exception("LLM request failed for session %s", session_id)
                return TurnResponse(
                    replies=[ERROR_REPLY],
                    state=state,
                    emergency=result.emergency,
                    failed=True,
                )

            outcome = self.agent.receive_assistant_reply(state, raw_reply)
            replies = [outcome.reply]
            if outcome.follow_up:
                replies.append(outcome.follow_up)
            return TurnResponse(replies=replies, state=state, emergency=result.emergency)

    def change_language(self, session_id: str, language: Language) -> Tuple[Optional[str], IntakeState]:
        with self.locked_state(session_id) as state:
            greeting = self.agent.set_language(state, language)
            return greeting, state

    def get_report(self, session_id: str) -> PatientReport:
        """
        Return the current report, building it from the transcript if the
        patient details are complete but no report exists yet.
        """
        with self.locked_state(session_id) as state:
            if not state.assessment_complete:
                raise ReportUnavailableError(
                    "Please complete a consultation first to generate a report."
                )

            missing = state.patient.missing_required()
            if missing:
                labels = ", ".join(FIELD_LABELS[f] for f in missing)
                raise ReportUnavailableError(
                    f"Please provide your {labels} to complete the health report."
                )

            if not state.report_generated and not self.agent.refresh_report(state):
                raise ReportUnavailableError(
                    "Unable to generate report. Please complete a consultation first."
                )
            return state.report

    def _client(self) -> LLMClient:
        if self._llm_client is None:
            self._llm_client = get_llm_client()
        return self._llm_client

    def _evict_idle(self) -> None:
        # Caller holds _sessions_lock
        cutoff = _now() - self.session_ttl
        for session in [s for s in self._sessions.values() if s.last_active < cutoff]:
            self._drop(session, "idle")

    def _drop(self, session: ChatSession, reason: str) -> None:
        del self._sessions[session.session_id]
        logger.info(
            "Dropped session %s (%s, started %s)",
            session.session_id,
            reason,
            session.started_at.isoformat(timespec="seconds"),
        )
