# arogya/intake/emergency.py
"""
Keyword based red-flag check on user messages.

This is plain substring matching. It misses anything phrased differently
from the list below and can fire on unrelated text that happens to
contain a keyword. It only decides whether to show the emergency banner;
it must never be the sole safety mechanism of a real deployment.
"""
from __future__ import annotations

from typing import Tuple


EMERGENCY_KEYWORDS: Tuple[str, ...] = (
    "chest pain",
    "heart attack",
    "stroke",
    "unconscious",
    "unconsciousness",
    "not breathing",
    "trouble breathing",
    "difficulty breathing",
    "severe bleeding",
    "uncontrolled bleeding",
    "seizure",
    "seizures",
    "suicide",
    "poisoning",
)

EMERGENCY_BANNER = (
    "⚠️ EMERGENCY WARNING: This may require immediate medical attention. "
    "Please contact emergency services or visit the nearest hospital immediately."
)

EMERGENCY_NUMBERS = "102/108/112"


def is_emergency(message: str) -> bool:
    lowered = message.lower()
    return any(keyword in lowered for keyword in EMERGENCY_KEYWORDS)
