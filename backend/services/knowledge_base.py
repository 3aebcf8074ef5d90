"""Canned answers for common shipping questions."""

from services.payloads import kb_payload

# Checked in order; the first phrase found in the question wins.
KNOWLEDGE_BASE = {
    "shipping time": "UPS standard shipping time varies by country, typically 2–7 business days.",
    "service alerts": "Check https://www.ups.com/service-alerts for the latest service updates.",
    "packaging info": "UPS provides packaging guidelines at https://www.ups.com/packaging",
    "returns": "You can initiate a return at https://www.ups.com/returns",
    "international shipping": (
        "For international shipments, check customs and documentation requirements on UPS.com"
    ),
}

NO_ANSWER = "Sorry, I don't have an answer for that."


def answer(question: str) -> dict:
    lowered = question.lower()
    for phrase, reply in KNOWLEDGE_BASE.items():
        if phrase in lowered:
            return kb_payload(question, reply)
    return kb_payload(question, NO_ANSWER)
