# arogya/intake/prompts.py
from __future__ import annotations

from typing import Dict, List, Optional

from arogya.intake.stages import Language
from arogya.intake.state import FIELD_LABELS, IntakeState


SYSTEM_PROMPT = """You are Dr. Arogya – a compassionate, culturally-aware AI medical assistant designed for Indian users. Your role is to guide users through structured, human-friendly conversations to understand symptoms, give preliminary suggestions, and generate an early diagnostic-style medical report. You are not a real doctor, but simulate a helpful, trustworthy advisor based on health guidelines (WHO, CDC, ICMR, MoHFW). Use regional empathy, multilingual tone (if applicable), and prioritize safety.

Work in two phases:
1. Symptom understanding: ask short follow-up questions until you understand the concern.
2. Recommendation: once you have enough information, reply with a complete assessment.

IMPORTANT: Do not use asterisk (*) symbols in your responses. Format your responses with clear section headers using emojis instead of asterisks for emphasis. Follow this template for complete assessments:

🧾 Symptom Summary
[Summarize the symptoms reported by the user]

🧠 Possible Non-Diagnostic Explanation
[Provide possible explanations without making a diagnosis]

🧘 Lifestyle Guidance
[Offer lifestyle recommendations]

🌿 दादी माँ का नुस्खा
[Suggest traditional home remedies if appropriate]

📅 When to See a Doctor
[Advise when professional medical help should be sought]

🔒 Safety Disclaimer
[Include a safety disclaimer]"""

GREETINGS: Dict[Language, str] = {
    Language.ENGLISH: "Hi, I'm Dr. Arogya, your health companion. Tell me what's bothering you today?",
    Language.HINDI: "नमस्ते, मैं डॉ. आरोग्य हूँ, आपका स्वास्थ्य साथी। आज आपको क्या परेशानी है?",
    Language.MARATHI: "नमस्कार, मी डॉ. आरोग्य आहे, तुमचा आरोग्य साथीदार. आज तुम्हाला काय त्रास होत आहे?",
    Language.KANNADA: "ನಮಸ್ಕಾರ, ನಾನು ಡಾ. ಆರೋಗ್ಯ, ನಿಮ್ಮ ಆರೋಗ್ಯ ಸಂಗಾತಿ. ಇಂದು ನಿಮ್ಮನ್ನು ಏನು ಕಾಡುತ್ತಿದೆ?",
}

ERROR_REPLY = "I'm sorry, I encountered an error. Please try again."

_NO_ASTERISKS = "Remember to NEVER use asterisk (*) symbols in your responses."


def greeting_for(language: Language) -> str:
    return GREETINGS.get(language, GREETINGS[Language.ENGLISH])


def build_intake_prompt(message: str, state: IntakeState) -> str:
    needs_user_info = not state.patient.has_required()
    info_request = (
        "It is important to ask for the user's name, age, and gender/sex if not "
        "already provided, as this information is essential for the health report.\n"
        if needs_user_info
        else ""
    )
    return (
        f'The user has shared the following health concern: "{message}".\n'
        "Please engage in the symptom understanding phase as described in your instructions.\n"
        "Ask relevant follow-up questions about duration, severity, frequency, and related factors, "
        "any existing conditions, allergies or medications, and lifestyle.\n"
        f"{info_request}"
        "If you have enough information, provide a complete recommendation following the template "
        "in your instructions with symptom summary, possible explanation, lifestyle guidance, "
        "traditional remedy, and when to see a doctor.\n\n"
        f"{_NO_ASTERISKS} Use the emoji section headers as specified in your instructions."
    )


def build_follow_up_prompt(message: str, state: IntakeState) -> str:
    return (
        f'The user has responded with: "{message}".\n'
        "Continue the conversation based on this response. You may keep gathering information, "
        "give the full structured assessment using the template in your instructions, "
        "or answer a request for clarification.\n"
        "If they have new symptoms, provide appropriate guidance. "
        "If they're asking about a specific treatment or medication, remind them that you cannot "
        "prescribe medications and they should consult a real doctor.\n\n"
        f"{_NO_ASTERISKS} If you have enough information to provide a complete assessment, "
        "use the emoji section headers as specified in your instructions."
    )


def build_prompt(message: str, state: IntakeState) -> str:
    if not state.assessment_complete:
        return build_intake_prompt(message, state)
    return build_follow_up_prompt(message, state)


def build_messages(state: IntakeState, prompt: Optional[str] = None) -> List[Dict[str, str]]:
    """
    Provider payload: persona first, then the transcript. When `prompt` is
    given it stands in for the latest user turn.
    """
    transcript = state.transcript()
    if prompt is not None and transcript and transcript[-1]["role"] == "user":
        transcript[-1] = {"role": "user", "content": prompt}
    return [{"role": "system", "content": SYSTEM_PROMPT}, *transcript]


def missing_fields_prompt(fields: List[str]) -> str:
    labels = ", ".join(FIELD_LABELS[f] for f in fields)
    return (
        "To generate your health report, I need a few more details. "
        f"Could you please provide your {labels}?"
    )
