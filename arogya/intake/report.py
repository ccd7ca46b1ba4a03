# arogya/intake/report.py
from __future__ import annotations

import re
import secrets
import string
from datetime import datetime
from typing import Dict, List, Tuple

from arogya.intake.emergency import EMERGENCY_BANNER
from arogya.intake.schema import (
    ParsedSection,
    PatientHeader,
    PatientReport,
    ReportBlock,
    ReportSection,
    SectionKind,
)
from arogya.intake.sections import primary_marker
from arogya.intake.state import IntakeState


REPORT_TITLE = "Arogya AI Health Report"

DISCLAIMER = (
    "🔒 Safety Disclaimer: This is not a replacement for a licensed medical opinion. "
    "Always consult a real doctor for serious or persistent conditions."
)

# (kind, heading, split into paragraphs/lists)
REPORT_LAYOUT: List[Tuple[SectionKind, str, bool]] = [
    (SectionKind.SYMPTOM_SUMMARY, "Symptom Summary", True),
    (SectionKind.POSSIBLE_EXPLANATION, "Clinical Assessment", True),
    (SectionKind.LIFESTYLE_GUIDANCE, "Lifestyle Guidance", False),
    (SectionKind.TRADITIONAL_REMEDY, "Supportive Care", False),
    (SectionKind.WHEN_TO_SEE_DOCTOR, "Medical Recommendations", False),
]

_BULLET = re.compile(r"^\s*[-*•]\s*")
_BLANK_LINE = re.compile(r"\n\s*\n")

_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_report_id() -> str:
    return "AR-" + "".join(secrets.choice(_ID_ALPHABET) for _ in range(8))


def split_blocks(body: str) -> List[ReportBlock]:
    """
    Break a section body into paragraphs on blank lines. Runs of lines
    starting with a bullet marker become list blocks.
    """
    blocks: List[ReportBlock] = []
    for chunk in _BLANK_LINE.split(body.strip()):
        current: ReportBlock | None = None
        for raw_line in chunk.splitlines():
            line = raw_line.strip()
            if not line:
                continue
            is_item = bool(_BULLET.match(line))
            block_type = "list" if is_item else "paragraph"
            text = _BULLET.sub("", line) if is_item else line
            if current is None or current.type != block_type:
                current = ReportBlock(type=block_type, lines=[])
                blocks.append(current)
            current.lines.append(text)
    return blocks


def build_header(state: IntakeState) -> PatientHeader:
    patient = state.patient
    return PatientHeader(
        name=patient.name or "Anonymous User",
        age=patient.age or "Not provided",
        gender=patient.gender or "Not provided",
        location=patient.location or None,
    )


def assemble(sections: List[ParsedSection], state: IntakeState) -> PatientReport:
    """
    Build the patient report from parsed sections and the collected details.

    Sections are laid out in a fixed order regardless of how the model
    ordered them. Every call draws a new report id and timestamp.
    """
    by_kind: Dict[SectionKind, ParsedSection] = {}
    for section in sections:
        by_kind.setdefault(section.kind, section)

    report_sections: List[ReportSection] = []
    for kind, heading, split in REPORT_LAYOUT:
        section = by_kind.get(kind)
        if section is None:
            continue
        if split:
            blocks = split_blocks(section.body)
        else:
            blocks = [ReportBlock(type="paragraph", lines=[section.body])]
        report_sections.append(
            ReportSection(kind=kind, heading=heading, body=section.body, blocks=blocks)
        )

    return PatientReport(
        report_id=generate_report_id(),
        generated_at=datetime.now(),
        patient=build_header(state),
        sections=report_sections,
        emergency_banner=EMERGENCY_BANNER if state.emergency_detected else None,
        disclaimer=DISCLAIMER,
    )


def header_lines(report: PatientReport) -> List[str]:
    patient = report.patient
    lines = [
        f"Name: {patient.name}",
        f"Date: {report.generated_at:%Y-%m-%d}",
        f"Time: {report.generated_at:%H:%M:%S}",
        f"Report ID: {report.report_id}",
        f"Age: {patient.age}",
        f"Gender: {patient.gender}",
    ]
    if patient.location:
        lines.append(f"Location: {patient.location}")
    return lines


def render_text(report: PatientReport) -> str:
    """
    Plain-text rendering used for the .txt export. Section headings use the
    same markers the model is asked to emit, so the body can be parsed again.
    """
    out: List[str] = [REPORT_TITLE, "=" * len(REPORT_TITLE), "", "Patient Information"]
    out.extend(header_lines(report))
    out.append("")

    # Above the first marker, otherwise it would read as part of the last section
    if report.emergency_banner:
        out.append(report.emergency_banner)
        out.append("")

    for section in report.sections:
        out.append(primary_marker(section.kind))
        out.append(section.body)
        out.append("")

    out.append(report.disclaimer)
    return "\n".join(out) + "\n"


def export_filename(report: PatientReport, extension: str) -> str:
    date_part = f"{report.generated_at:%Y-%m-%d}"
    if report.patient.name and report.patient.name != "Anonymous User":
        name_part = re.sub(r"\s+", "_", report.patient.name.strip())
        return f"Arogya_Health_Report_{name_part}_{date_part}.{extension}"
    return f"Arogya_Health_Report_{date_part}.{extension}"
