from __future__ import annotations

import threading
import time
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from arogya.config import get_settings
from arogya.intake.agent import IntakeAgent
from arogya.intake.state import IntakeState
from arogya.llm import LLMClient
from arogya.services import IntakeSessionService


ASSESSMENT_REPLY = """Thank you for sharing these details.

📅 When to See a Doctor
See a doctor if the fever lasts more than 3 days.

🧠 **Possible Non-Diagnostic Explanation**
This could be a **viral** infection.

🧾 Symptom Summary
Fever and headache for two days.

* Mild body ache
* Tiredness

🧘 Lifestyle Guidance
Rest and drink plenty of fluids.

🌿 दादी माँ का नुस्खा
Tulsi and ginger tea with honey.
"""

PARTIAL_REPLY = """🧾 Symptom Summary
Cough for a week.

🧘 Lifestyle Guidance
Avoid cold drinks.
"""

FOLLOW_UP_REPLY = "How long have you had the fever, and how high has it been?"


class FakeLLMClient(LLMClient):
    def __init__(self, replies: Optional[List[str]] = None, delay: float = 0.0):
        self.replies = list(replies or [])
        self.delay = delay
        self.calls: List[List[Dict[str, str]]] = []
        self._lock = threading.Lock()

    def chat(self, messages, temperature=None, model=None) -> str:
        with self._lock:
            self.calls.append(list(messages))
        if self.delay:
            time.sleep(self.delay)
        with self._lock:
            return self.replies.pop(0) if self.replies else FOLLOW_UP_REPLY


class FailingLLMClient(LLMClient):
    def chat(self, messages, temperature=None, model=None) -> str:
        raise RuntimeError("connection refused")


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    for name in ("GROQ_API_KEY", "PERPLEXITY_API_KEY", "GEMINI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def agent() -> IntakeAgent:
    return IntakeAgent()


@pytest.fixture
def state() -> IntakeState:
    return IntakeState()


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def service(fake_llm) -> IntakeSessionService:
    return IntakeSessionService(llm_client=fake_llm)


@pytest.fixture
def client(service):
    from arogya.main import app
    from arogya.api.routes import get_session_service

    app.dependency_overrides[get_session_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
