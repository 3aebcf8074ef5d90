"""Response payload shapes returned to HTTP clients and stored in the cache."""

from enum import Enum


class Category(str, Enum):
    TRACKING = "tracking"
    TARIFF = "tariff"
    DISCOUNTS = "discounts"
    KB = "kb"


def tracking_payload(tracking_number: str, status: str) -> dict:
    return {"type": Category.TRACKING.value, "trackingNumber": tracking_number, "status": status}


def tariff_payload(country: str, info: str) -> dict:
    return {"type": Category.TARIFF.value, "country": country, "info": info}


def discounts_payload(offers: list[str]) -> dict:
    return {"type": Category.DISCOUNTS.value, "offers": list(offers)}


def kb_payload(question: str, answer: str) -> dict:
    return {"type": Category.KB.value, "question": question, "answer": answer}


def error_payload(message: str) -> dict:
    return {"error": message}
