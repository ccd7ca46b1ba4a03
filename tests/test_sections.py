from arogya.intake.schema import SectionKind
from arogya.intake.sections import (
    is_complete_assessment,
    is_qualifying_message,
    parse,
    primary_marker,
    strip_emphasis,
)

from conftest import ASSESSMENT_REPLY, PARTIAL_REPLY


def test_scrambled_reply_yields_five_sections():
    sections = parse(ASSESSMENT_REPLY)

    assert [s.kind for s in sections] == [
        SectionKind.WHEN_TO_SEE_DOCTOR,
        SectionKind.POSSIBLE_EXPLANATION,
        SectionKind.SYMPTOM_SUMMARY,
        SectionKind.LIFESTYLE_GUIDANCE,
        SectionKind.TRADITIONAL_REMEDY,
    ]
    for section in sections:
        assert "*" not in section.body
        assert "__" not in section.body
        for kind in SectionKind:
            assert primary_marker(kind) not in section.body
    assert is_complete_assessment(sections)


def test_section_bodies():
    bodies = {s.kind: s.body for s in parse(ASSESSMENT_REPLY)}

    assert bodies[SectionKind.POSSIBLE_EXPLANATION] == "This could be a viral infection."
    assert bodies[SectionKind.SYMPTOM_SUMMARY] == (
        "Fever and headache for two days.\n\n- Mild body ache\n- Tiredness"
    )
    assert bodies[SectionKind.TRADITIONAL_REMEDY] == "Tulsi and ginger tea with honey."
    assert bodies[SectionKind.WHEN_TO_SEE_DOCTOR].startswith("See a doctor")


def test_two_required_markers_is_not_complete():
    sections = parse(PARTIAL_REPLY)
    assert {s.kind for s in sections} == {
        SectionKind.SYMPTOM_SUMMARY,
        SectionKind.LIFESTYLE_GUIDANCE,
    }
    assert not is_complete_assessment(sections)
    assert not is_complete_assessment(PARTIAL_REPLY)


def test_earliest_marker_variant_wins():
    reply = (
        "**🧾 Symptom Summary** dry cough\n"
        "🧠 Possible Explanation irritation\n"
        "🧘 Lifestyle Guidance steam inhalation"
    )
    bodies = {s.kind: s.body for s in parse(reply)}
    assert bodies[SectionKind.SYMPTOM_SUMMARY] == "dry cough"
    assert bodies[SectionKind.POSSIBLE_EXPLANATION] == "irritation"
    assert is_complete_assessment(reply)


def test_repeated_marker_before_start_is_ignored():
    reply = (
        "🧘 Lifestyle Guidance rest well\n"
        "🧾 Symptom Summary cough\n"
        "🧘 Lifestyle Guidance repeated later"
    )
    bodies = {s.kind: s.body for s in parse(reply)}
    assert bodies[SectionKind.LIFESTYLE_GUIDANCE] == "rest well"
    assert bodies[SectionKind.SYMPTOM_SUMMARY] == "cough"


def test_missing_sections_are_omitted():
    assert parse("Could you tell me how long you have had the cough?") == []

    sections = parse("🔒 Safety Disclaimer: I am not a doctor.")
    assert len(sections) == 1
    assert sections[0].kind == SectionKind.SAFETY_DISCLAIMER
    assert sections[0].body == "I am not a doctor."
    assert sections[0].title == "Safety Disclaimer"


def test_qualifying_message():
    assert is_qualifying_message("🧾 Symptom Summary\nfever")
    assert is_qualifying_message("🧠 Possible Non-Diagnostic Explanation\nflu")
    assert not is_qualifying_message("🧘 Lifestyle Guidance\nsleep")


def test_strip_emphasis_keeps_star_bullets_as_dashes():
    assert strip_emphasis("**Note**\n* one\n  * two") == "Note\n- one\n  - two"
