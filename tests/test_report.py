import re

from arogya.intake.emergency import EMERGENCY_BANNER
from arogya.intake.report import (
    DISCLAIMER,
    assemble,
    export_filename,
    render_text,
    split_blocks,
)
from arogya.intake.schema import SectionKind
from arogya.intake.sections import parse
from arogya.intake.state import IntakeState

from conftest import ASSESSMENT_REPLY


def _state(**fields) -> IntakeState:
    state = IntakeState()
    for key, value in fields.items():
        setattr(state.patient, key, value)
    return state


def test_header_fallbacks():
    report = assemble(parse(ASSESSMENT_REPLY), IntakeState())
    assert report.patient.name == "Anonymous User"
    assert report.patient.age == "Not provided"
    assert report.patient.gender == "Not provided"
    assert report.patient.location is None
    assert re.fullmatch(r"AR-[A-Z0-9]{8}", report.report_id)


def test_sections_follow_canonical_order():
    report = assemble(parse(ASSESSMENT_REPLY), _state(name="Priya Singh", age="29", gender="Female"))
    assert [s.heading for s in report.sections] == [
        "Symptom Summary",
        "Clinical Assessment",
        "Lifestyle Guidance",
        "Supportive Care",
        "Medical Recommendations",
    ]
    assert report.patient.name == "Priya Singh"
    assert report.disclaimer == DISCLAIMER
    assert report.emergency_banner is None


def test_model_disclaimer_is_not_copied_into_body():
    reply = ASSESSMENT_REPLY + "\n🔒 Safety Disclaimer\nI am an AI.\n"
    report = assemble(parse(reply), IntakeState())
    assert SectionKind.SAFETY_DISCLAIMER not in [s.kind for s in report.sections]
    assert report.disclaimer == DISCLAIMER


def test_emergency_banner():
    state = IntakeState(emergency_detected=True)
    report = assemble(parse(ASSESSMENT_REPLY), state)
    assert report.emergency_banner == EMERGENCY_BANNER
    assert render_text(report).index(EMERGENCY_BANNER) < render_text(report).index(DISCLAIMER)


def test_symptom_summary_is_split_into_blocks():
    report = assemble(parse(ASSESSMENT_REPLY), IntakeState())
    summary = report.sections[0]
    assert [b.type for b in summary.blocks] == ["paragraph", "list"]
    assert summary.blocks[1].lines == ["Mild body ache", "Tiredness"]

    lifestyle = report.sections[2]
    assert len(lifestyle.blocks) == 1
    assert lifestyle.blocks[0].lines == [lifestyle.body]


def test_split_blocks_mixed_paragraph():
    blocks = split_blocks("Main points:\n- one\n• two\n\nClosing line.")
    assert [(b.type, b.lines) for b in blocks] == [
        ("paragraph", ["Main points:"]),
        ("list", ["one", "two"]),
        ("paragraph", ["Closing line."]),
    ]


def test_assemble_is_idempotent_apart_from_id_and_time():
    sections = parse(ASSESSMENT_REPLY)
    state = _state(name="Priya Singh", age="29", gender="Female", location="Pune")
    first = assemble(sections, state)
    second = assemble(sections, state)
    ignore = {"report_id", "generated_at"}
    assert first.model_dump(exclude=ignore) == second.model_dump(exclude=ignore)


def test_text_round_trip_recovers_sections():
    report = assemble(parse(ASSESSMENT_REPLY), _state(name="Priya Singh", age="29", gender="Female"))
    reparsed = [
        s for s in parse(render_text(report)) if s.kind != SectionKind.SAFETY_DISCLAIMER
    ]
    assert [s.kind for s in reparsed] == [s.kind for s in report.sections]
    assert [s.body.strip() for s in reparsed] == [s.body.strip() for s in report.sections]


def test_render_text_header():
    report = assemble(parse(ASSESSMENT_REPLY), _state(name="Priya Singh", age="29", gender="Female"))
    text = render_text(report)
    assert "Name: Priya Singh" in text
    assert f"Report ID: {report.report_id}" in text
    assert "Age: 29" in text
    assert "Gender: Female" in text
    assert "Location:" not in text
    assert text.rstrip().endswith(DISCLAIMER)


def test_export_filename():
    report = assemble(parse(ASSESSMENT_REPLY), _state(name="Priya  Singh"))
    date = f"{report.generated_at:%Y-%m-%d}"
    assert export_filename(report, "pdf") == f"Arogya_Health_Report_Priya_Singh_{date}.pdf"

    anonymous = assemble(parse(ASSESSMENT_REPLY), IntakeState())
    assert export_filename(anonymous, "txt") == f"Arogya_Health_Report_{date}.txt"


def test_text_round_trip_with_emergency_banner():
    state = _state(name="Priya Singh", age="29", gender="Female")
    state.emergency_detected = True
    report = assemble(parse(ASSESSMENT_REPLY), state)
    text = render_text(report)

    assert text.index(EMERGENCY_BANNER) < text.index("🧾 Symptom Summary")
    reparsed = [
        s for s in parse(text) if s.kind != SectionKind.SAFETY_DISCLAIMER
    ]
    assert [s.kind for s in reparsed] == [s.kind for s in report.sections]
    assert [s.body.strip() for s in reparsed] == [s.body.strip() for s in report.sections]
