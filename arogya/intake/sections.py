# arogya/intake/sections.py
"""
Split a model reply into the report sections it contains.

The model is asked to head each section with an emoji marker
(see SYSTEM_PROMPT) but often decorates it with markdown emphasis or
uses a slightly different label, so every section kind accepts several
marker strings. Sections are located by document position; the model's
ordering is not trusted.
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Set, Tuple, Union

from arogya.intake.schema import ParsedSection, SectionKind


SECTION_MARKERS: Dict[SectionKind, Tuple[str, ...]] = {
    SectionKind.SYMPTOM_SUMMARY: (
        "🧾 Symptom Summary",
        "🧾 **Symptom Summary**",
        "**🧾 Symptom Summary**",
    ),
    SectionKind.POSSIBLE_EXPLANATION: (
        "🧠 Possible Non-Diagnostic Explanation",
        "🧠 **Possible Non-Diagnostic Explanation**",
        "**🧠 Possible Non-Diagnostic Explanation**",
        "🧠 Possible Explanation",
    ),
    SectionKind.LIFESTYLE_GUIDANCE: (
        "🧘 Lifestyle Guidance",
        "🧘 **Lifestyle Guidance**",
        "**🧘 Lifestyle Guidance**",
    ),
    SectionKind.TRADITIONAL_REMEDY: (
        "🌿 दादी माँ का नुस्खा",
        "🌿 **दादी माँ का नुस्खा**",
        "**🌿 दादी माँ का नुस्खा**",
        "🌿 Traditional Remedy",
        "🌿 Dadi Maa Ka Nuskha",
    ),
    SectionKind.WHEN_TO_SEE_DOCTOR: (
        "📅 When to See a Doctor",
        "📅 **When to See a Doctor**",
        "**📅 When to See a Doctor**",
        "📅 When To See A Doctor",
    ),
    SectionKind.SAFETY_DISCLAIMER: (
        "🔒 Safety Disclaimer",
        "🔒 **Safety Disclaimer**",
        "**🔒 Safety Disclaimer**",
    ),
}

REQUIRED_SECTIONS = (
    SectionKind.SYMPTOM_SUMMARY,
    SectionKind.POSSIBLE_EXPLANATION,
    SectionKind.LIFESTYLE_GUIDANCE,
)

# An assistant message holding either of these is treated as an assessment
# when we look back through the transcript for one to build a report from.
QUALIFYING_SECTIONS = (
    SectionKind.SYMPTOM_SUMMARY,
    SectionKind.POSSIBLE_EXPLANATION,
)

_BULLET_STAR = re.compile(r"^(\s*)\*\s+", re.MULTILINE)
_EMPHASIS = re.compile(r"\*+|__")


def primary_marker(kind: SectionKind) -> str:
    return SECTION_MARKERS[kind][0]


def strip_emphasis(text: str) -> str:
    text = _BULLET_STAR.sub(r"\1- ", text)
    return _EMPHASIS.sub("", text)


def _find_marker(text: str, kind: SectionKind, start: int = 0) -> Optional[Tuple[int, str]]:
    """Earliest occurrence of any marker variant of `kind` at or after `start`."""
    best: Optional[Tuple[int, str]] = None
    for marker in SECTION_MARKERS[kind]:
        idx = text.find(marker, start)
        if idx == -1:
            continue
        if best is None or idx < best[0] or (idx == best[0] and len(marker) > len(best[1])):
            best = (idx, marker)
    return best


def parse(raw_reply: str) -> List[ParsedSection]:
    """
    Slice `raw_reply` into ParsedSections, returned in document order.

    Each kind is taken at most once. A section runs until the next marker
    of a different kind found after it, or to the end of the text.
    """
    hits: List[Tuple[int, SectionKind, str]] = []
    for kind in SECTION_MARKERS:
        found = _find_marker(raw_reply, kind)
        if found is not None:
            hits.append((found[0], kind, found[1]))

    sections: List[ParsedSection] = []
    for start, kind, marker in sorted(hits, key=lambda h: h[0]):
        body_start = start + len(marker)
        end = len(raw_reply)
        for other in SECTION_MARKERS:
            if other == kind:
                continue
            nxt = _find_marker(raw_reply, other, body_start)
            if nxt is not None and start < nxt[0] < end:
                end = nxt[0]

        body = strip_emphasis(raw_reply[body_start:end])
        body = body.strip().lstrip(":").strip()
        sections.append(ParsedSection(kind=kind, body=body))

    return sections


def section_kinds(sections: List[ParsedSection]) -> Set[SectionKind]:
    return {s.kind for s in sections}


def is_complete_assessment(reply_or_sections: Union[str, List[ParsedSection]]) -> bool:
    if isinstance(reply_or_sections, str):
        reply_or_sections = parse(reply_or_sections)
    kinds = section_kinds(reply_or_sections)
    return all(kind in kinds for kind in REQUIRED_SECTIONS)


def is_qualifying_message(text: str) -> bool:
    return any(_find_marker(text, kind) is not None for kind in QUALIFYING_SECTIONS)
