# arogya/intake/agent.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from arogya.intake.emergency import is_emergency
from arogya.intake.extractor import extract
from arogya.intake.prompts import (
    build_messages,
    build_prompt,
    greeting_for,
    missing_fields_prompt,
)
from arogya.intake.report import assemble
from arogya.intake.sections import (
    is_complete_assessment,
    is_qualifying_message,
    parse,
    strip_emphasis,
)
from arogya.intake.stages import IntakeStage, Language
from arogya.intake.state import ConversationTurn, IntakeState


logger = logging.getLogger("arogya.agent")

# Short replies while we wait for patient details are assumed to be
# answers to our question, not a new health concern.
SHORT_MESSAGE_LIMIT = 50


@dataclass
class UserTurnResult:
    """
    What the caller has to do after a user message.

    Either `reply` is set (we answered locally and the LLM is skipped),
    or `needs_llm` is True and the caller should send `messages`.
    """

    reply: Optional[str] = None
    needs_llm: bool = False
    messages: Optional[List[Dict[str, str]]] = None
    emergency: bool = False
    report_updated: bool = False


@dataclass
class AssistantTurnResult:
    reply: str
    follow_up: Optional[str] = None
    assessment_complete: bool = False
    report_updated: bool = False


class IntakeAgent:
    """
    IntakeAgent is the only place that mutates an IntakeState.

    Stages:
      - intake: gathering symptoms, the model has not assessed yet
      - assessment complete: a reply carried all required sections
      - info collection: waiting for name / age / gender
      - report ready: a report has been assembled

    The LLM call itself happens outside; the agent tells the caller when
    one is needed and what to send.
    """

    def __init__(self, reset_fields_on_assessment: bool = True):
        self.reset_fields_on_assessment = reset_fields_on_assessment

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self, language: Language = Language.ENGLISH) -> tuple[IntakeState, str]:
        """
        Initialise a new session and return it with the greeting to show.
        """
        state = IntakeState(language=language)
        greeting = greeting_for(language)
        self._record_assistant_turn(state, greeting)
        return state, greeting

    def set_language(self, state: IntakeState, language: Language) -> Optional[str]:
        """
        Switch language. Early in a conversation the transcript is restarted
        with the translated greeting, which is returned.
        """
        state.language = language
        if len(state.turns) > 2:
            return None
        greeting = greeting_for(language)
        state.turns = [ConversationTurn(role="assistant", content=greeting)]
        return greeting

    def receive_user_message(self, state: IntakeState, message: str) -> UserTurnResult:
        message = message.strip()
        if not message:
            return UserTurnResult()

        self._record_user_turn(state, message)
        result = UserTurnResult()

        newly_flagged = False
        if is_emergency(message):
            result.emergency = True
            if not state.emergency_detected:
                logger.warning("Emergency keywords detected in user message")
                newly_flagged = True
            state.emergency_detected = True

        before = state.patient.snapshot()
        extract(message, state)
        fields_changed = state.patient.snapshot() != before

        if state.awaiting_patient_info:
            if state.patient.has_required():
                if self.refresh_report(state):
                    result.report_updated = True
                    result.reply = self._report_ready_message(state)
                    self._record_assistant_turn(state, result.reply)
                    return result
            elif len(message) < SHORT_MESSAGE_LIMIT:
                result.reply = missing_fields_prompt(state.patient.missing_required())
                self._record_assistant_turn(state, result.reply)
                return result
        elif state.stage == IntakeStage.REPORT_READY and (fields_changed or newly_flagged):
            # The stored report must pick up new details and the emergency banner
            result.report_updated = self.refresh_report(state)

        result.needs_llm = True
        result.messages = build_messages(state, build_prompt(message, state))
        return result

    def receive_assistant_reply(self, state: IntakeState, reply: str) -> AssistantTurnResult:
        sections = parse(reply)
        cleaned = strip_emphasis(reply)
        self._record_assistant_turn(state, cleaned)
        result = AssistantTurnResult(reply=cleaned)

        if not is_complete_assessment(sections):
            return result

        result.assessment_complete = True
        self._set_stage(state, IntakeStage.ASSESSMENT_COMPLETE)
        state.report = None
        if self.reset_fields_on_assessment:
            state.patient.reset()

        if state.patient.has_required():
            result.report_updated = self.refresh_report(state)
            return result

        missing = state.patient.missing_required()
        if not state.patient.location:
            missing.append("location")
        result.follow_up = missing_fields_prompt(missing)
        self._record_assistant_turn(state, result.follow_up)
        self._set_stage(state, IntakeStage.INFO_COLLECTION)
        return result

    def refresh_report(self, state: IntakeState) -> bool:
        """
        (Re)build the report from the latest assessment in the transcript.
        Returns False when there is no assessment to build from.
        """
        if not state.assessment_complete:
            return False
        assessment = self.latest_assessment(state)
        if assessment is None:
            logger.info("No assessment found in conversation history")
            return False

        state.report = assemble(parse(assessment), state)
        self._set_stage(state, IntakeStage.REPORT_READY)
        return True

    def latest_assessment(self, state: IntakeState) -> Optional[str]:
        for turn in reversed(state.turns):
            if turn.role == "assistant" and is_qualifying_message(turn.content):
                return turn.content
        return None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _record_user_turn(self, state: IntakeState, content: str) -> None:
        state.turns.append(ConversationTurn(role="user", content=content))

    def _record_assistant_turn(self, state: IntakeState, content: str) -> None:
        state.turns.append(ConversationTurn(role="assistant", content=content))

    def _set_stage(self, state: IntakeState, stage: IntakeStage) -> None:
        if state.stage != stage:
            logger.info("Intake stage %s -> %s", state.stage.value, stage.value)
        state.stage = stage

    def _report_ready_message(self, state: IntakeState) -> str:
        name = state.patient.name or "there"
        return (
            f"Thank you, {name}. Your health report is ready and can be downloaded "
            "from the report panel."
        )
