"""Shipping query routes: tracking, tariffs, discounts and the knowledge base."""

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from errors import MissingFieldError
from services.shipping import ShippingService

logger = logging.getLogger(__name__)

router = APIRouter()


class TrackRequest(BaseModel):
    # Some clients send tracking numbers as JSON numbers.
    tracking_number: str | int | None = Field(None, alias="trackingNumber")


class QuestionRequest(BaseModel):
    question: str | None = None


def get_shipping(request: Request) -> ShippingService:
    return request.app.state.shipping


@router.post("/track")
async def track(
    body: TrackRequest | None = None,
    shipping: ShippingService = Depends(get_shipping),
) -> dict:
    """Current status for a tracking number (cached for 5 minutes)."""
    if body is None or not body.tracking_number:
        raise MissingFieldError("No tracking number provided.")
    return await shipping.track(str(body.tracking_number))


@router.get("/tariff/{country}")
async def tariff(country: str, shipping: ShippingService = Depends(get_shipping)) -> dict:
    """First zones-and-rates row mentioning the country (cached for an hour)."""
    return await shipping.tariff(country)


@router.get("/discounts")
async def discounts(shipping: ShippingService = Depends(get_shipping)) -> dict:
    return await shipping.discounts()


@router.post("/kb")
async def kb(
    body: QuestionRequest | None = None,
    shipping: ShippingService = Depends(get_shipping),
) -> dict:
    if body is None or not body.question:
        raise MissingFieldError("No question provided.")
    return shipping.ask(body.question)
