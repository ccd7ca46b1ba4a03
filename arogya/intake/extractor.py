# arogya/intake/extractor.py
"""
Heuristic extraction of patient details (name, age, gender, location)
from free-text chat messages.

Rules live in ordered tables so each one can be tested on its own:
for every field the first rule whose candidate passes its validator wins.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from arogya.intake.state import IntakeState


_APOS = r"['’]"
_NAME = r"[A-Za-z][A-Za-z .'\-]*"
_PLACE = r"[A-Za-z][A-Za-z ,.'\-]*"

# A captured name/place ends where the sentence clearly moves on
_NAME_STOP = re.compile(r"\s+(?:and|but|with|from|here|aged?|years?)\b.*$", re.IGNORECASE)
_PLACE_STOP = re.compile(
    r"\s+(?:and|but|with|since|for|because|i|my|it|is|was|am|have|near|last)\b.*$",
    re.IGNORECASE,
)

# Leading words that mean "I am ..." / "I'm ..." is not followed by a name
_NOT_A_NAME = {
    "a", "an", "the", "from", "in", "at", "on", "not", "very", "so", "also",
    "just", "still", "really", "quite", "bit", "little", "having", "feeling",
    "suffering", "experiencing", "getting", "going", "trying", "taking",
    "living", "currently", "okay", "ok", "fine", "good", "well", "sick", "ill",
    "unwell", "worried", "scared", "afraid", "tired", "sure", "sorry", "able",
    "unable", "allergic", "pregnant", "married", "single", "male", "female",
    "here", "years", "age", "aged", "yes", "no", "hi", "hello", "hey",
    "thanks", "thank", "none", "nothing", "nope",
}

_NOT_A_PLACE = {
    "my", "the", "a", "an", "his", "her", "their", "our", "your", "this",
    "that", "these", "those", "it", "me", "pain", "bed", "morning", "evening",
    "night", "afternoon", "general", "addition", "between", "front", "back",
    "case", "fact", "total", "particular", "last", "past", "recent", "days",
    "weeks", "months", "years", "hours", "head", "chest", "stomach", "throat",
    "hospital", "touch", "time", "order", "spite", "some", "such", "which",
}

_BARE_NAME = re.compile(r"^[A-Za-z][A-Za-z .'\-]*$")


def _first_word(value: str) -> str:
    return value.split()[0].lower() if value.split() else ""


def _clean(value: str, stop: re.Pattern) -> str:
    value = stop.sub("", value)
    return value.strip(" ,.'-")


def validate_name(candidate: str) -> Optional[str]:
    name = _clean(candidate, _NAME_STOP)
    if not 2 <= len(name) <= 30:
        return None
    if any(ch.isdigit() for ch in name):
        return None
    if _first_word(name) in _NOT_A_NAME:
        return None
    return name


def validate_age(candidate: str) -> Optional[str]:
    try:
        age = int(candidate)
    except ValueError:
        return None
    if 0 < age < 120:
        return str(age)
    return None


def _validate_place(candidate: str, strict: bool) -> Optional[str]:
    place = _clean(candidate, _PLACE_STOP)
    if not 2 <= len(place) <= 50:
        return None
    if strict and _first_word(place) in _NOT_A_PLACE:
        return None
    return place


def validate_location(candidate: str) -> Optional[str]:
    return _validate_place(candidate, strict=False)


def validate_loose_location(candidate: str) -> Optional[str]:
    # "in X" matches almost anything ("pain in my chest"), so filter harder
    return _validate_place(candidate, strict=True)


@dataclass(frozen=True)
class ExtractionRule:
    field: str
    pattern: re.Pattern
    validator: Callable[[str], Optional[str]]

    def apply(self, message: str) -> Optional[str]:
        match = self.pattern.search(message)
        if not match or not match.group(1):
            return None
        return self.validator(match.group(1))


def _rule(field: str, pattern: str, validator: Callable[[str], Optional[str]]) -> ExtractionRule:
    return ExtractionRule(field, re.compile(pattern, re.IGNORECASE), validator)


NAME_RULES: List[ExtractionRule] = [
    _rule("name", rf"\bmy\s+name\s+is\s+({_NAME})", validate_name),
    _rule("name", rf"\bname\s*[:=]\s*({_NAME})", validate_name),
    _rule("name", rf"\bI\s+am\s+({_NAME})", validate_name),
    _rule("name", rf"\bI{_APOS}m\s+({_NAME})", validate_name),
]

AGE_RULES: List[ExtractionRule] = [
    _rule("age", r"\bI\s+am\s+(\d{1,3})\s*(?:years?|yrs?)\s*old\b", validate_age),
    _rule("age", rf"\bI{_APOS}m\s+(\d{{1,3}})\s*(?:years?|yrs?)\s*old\b", validate_age),
    _rule("age", rf"\bI{_APOS}m\s+(\d{{1,3}})\b", validate_age),
    _rule("age", r"\bI\s+am\s+(\d{1,3})\b", validate_age),
    _rule("age", r"\bage\s*(?:is|:|=|-)?\s*(\d{1,3})\b", validate_age),
    _rule("age", r"\b(\d{1,3})\s*(?:years?|yrs?)\s*old\b", validate_age),
    _rule("age", r"\b(\d{1,3})\s*y/?o\b", validate_age),
    _rule("age", r"^\s*(\d{1,3})\s*$", validate_age),
]

LOCATION_RULES: List[ExtractionRule] = [
    _rule("location", rf"\bI\s+am\s+from\s+({_PLACE})", validate_location),
    _rule("location", rf"\bI{_APOS}m\s+from\s+({_PLACE})", validate_location),
    _rule("location", rf"\b(?:live|living|reside|residing|based)\s+in\s+({_PLACE})", validate_location),
    _rule("location", rf"\blocation\s*(?:is|:|=)?\s*({_PLACE})", validate_location),
    _rule("location", rf"\bin\s+({_PLACE})", validate_loose_location),
]

# Phrases are matched against the message lower-cased, with punctuation
# turned into spaces and padded with a space on both sides.
GENDER_PHRASES: List[Tuple[str, Tuple[str, ...]]] = [
    ("Male", (" male ", " a man ", " boy ", " gentleman ", " gender m ", " sex m ")),
    ("Female", (" female ", " a woman ", " girl ", " lady ", " gender f ", " sex f ")),
    ("Non-binary", (" non-binary ", " non binary ", " nonbinary ", " enby ")),
    ("Transgender", (" transgender ", " trans ", " trans man ", " trans woman ")),
    (
        "Other",
        (
            " gender other ", " sex other ", " other gender ", " genderqueer ",
            " genderfluid ", " agender ", " prefer not to say ",
        ),
    ),
]


def detect_gender(message: str) -> Optional[str]:
    normalized = " " + re.sub(r"[^a-z\-]+", " ", message.lower()) + " "
    for label, phrases in GENDER_PHRASES:
        if any(phrase in normalized for phrase in phrases):
            return label
    return None


def _first_match(rules: List[ExtractionRule], message: str) -> Optional[str]:
    for rule in rules:
        value = rule.apply(message)
        if value is not None:
            return value
    return None


def _bare_name(message: str) -> Optional[str]:
    text = message.strip()
    if len(text) >= 30 or len(text.split()) > 4:
        return None
    if not _BARE_NAME.match(text):
        return None
    return validate_name(text)


def extract_fields(message: str, allow_bare_name: bool = False) -> Dict[str, str]:
    """
    Run every rule table over one message and return what was found.

    `allow_bare_name` treats a short letters-only message as the name
    itself, which only makes sense right after we asked for it.
    """
    found: Dict[str, str] = {}

    gender = detect_gender(message)
    if gender:
        found["gender"] = gender

    name = _first_match(NAME_RULES, message)
    if name is None and allow_bare_name and gender is None:
        name = _bare_name(message)
    if name:
        found["name"] = name

    age = _first_match(AGE_RULES, message)
    if age:
        found["age"] = age

    location = _first_match(LOCATION_RULES, message)
    if location:
        found["location"] = location

    return found


def extract(message: str, state: IntakeState) -> IntakeState:
    """
    Fill in any patient fields still empty in `state` from `message`.
    Fields already collected in this cycle are left alone.
    """
    found = extract_fields(message, allow_bare_name=state.awaiting_patient_info)
    for field_name, value in found.items():
        if not getattr(state.patient, field_name):
            setattr(state.patient, field_name, value)
    return state
