"""Scrape carrier pages into response payloads.

Every fetch opens its own page from the pool, waits for the network to go
idle, extracts text with DOM selectors and closes the page. Nothing raises
out of ``Fetcher.fetch``: a selector that matches nothing yields a
placeholder payload, and any failure while navigating or extracting yields
a category fallback marked ``degraded`` so callers know not to cache it.
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

from services.browser import PagePool
from services.payloads import (
    Category,
    discounts_payload,
    error_payload,
    tariff_payload,
    tracking_payload,
)

logger = logging.getLogger(__name__)

TRACKING_URL = "https://www.ups.com/track"
TARIFF_URL = "https://www.ups.com/hk/en/shipping/zones-and-rates.page"
DISCOUNTS_URL = "https://www.ups.com/hk/en/shipping/special-offers.page"

TRACKING_SELECTOR = ".tracking-summary"
TARIFF_ROW_SELECTOR = "table tr"
OFFER_SELECTOR = ".ups-offer"

TRACKING_UNAVAILABLE = "Could not fetch tracking info"
NO_DISCOUNTS = ["No current discounts found."]
# Served when the offers page cannot be scraped at all.
FALLBACK_OFFERS = ["US: 10%", "CA: 8%", "IL: 12%"]

TRACKING_ERROR = "Error fetching tracking info."
TARIFF_ERROR = "Failed to fetch tariffs."


@dataclass
class FetchResult:
    payload: dict
    degraded: bool = False


def tracking_url(tracking_number: str) -> str:
    return f"{TRACKING_URL}?{urlencode({'tracknum': tracking_number})}"


def match_tariff_row(rows: list[str], country: str) -> str:
    """First row mentioning the country (case-insensitive), else a not-found message."""
    needle = country.lower()
    for row in rows:
        if needle in row.lower():
            return row
    return f"No tariff info found for {country}"


def normalize_offers(offers: list[str]) -> list[str]:
    """Trim each offer; only an empty list means there are no discounts."""
    cleaned = [offer.strip() for offer in offers]
    return cleaned or list(NO_DISCOUNTS)


class Fetcher:
    def __init__(self, pool: PagePool, navigation_timeout_ms: int = 30000):
        self._pool = pool
        self._timeout = navigation_timeout_ms

    async def fetch(self, category: Category, **params) -> FetchResult:
        category = Category(category)
        if category is Category.TRACKING:
            return await self.fetch_tracking(params["tracking_number"])
        if category is Category.TARIFF:
            return await self.fetch_tariff(params["country"])
        if category is Category.DISCOUNTS:
            return await self.fetch_discounts()
        raise ValueError(f"Category {category.value} is not fetched from the web")

    async def _open(self, page, url: str) -> None:
        await page.goto(url, wait_until="networkidle", timeout=self._timeout)

    async def fetch_tracking(self, tracking_number: str) -> FetchResult:
        url = tracking_url(tracking_number)
        logger.info("Fetching tracking status for %s", tracking_number)
        try:
            async with self._pool.page() as page:
                await self._open(page, url)
                element = await page.query_selector(TRACKING_SELECTOR)
                status = await element.inner_text() if element is not None else None
        except Exception:
            logger.exception("Tracking fetch failed for %s", tracking_number)
            return FetchResult(error_payload(TRACKING_ERROR), degraded=True)

        return FetchResult(tracking_payload(tracking_number, status or TRACKING_UNAVAILABLE))

    async def fetch_tariff(self, country: str) -> FetchResult:
        logger.info("Fetching tariff rows for %s", country)
        try:
            async with self._pool.page() as page:
                await self._open(page, TARIFF_URL)
                rows = await page.eval_on_selector_all(
                    TARIFF_ROW_SELECTOR, "rows => rows.map(r => r.innerText)"
                )
        except Exception:
            logger.exception("Tariff fetch failed for %s", country)
            return FetchResult(error_payload(TARIFF_ERROR), degraded=True)

        return FetchResult(tariff_payload(country, match_tariff_row(rows, country)))

    async def fetch_discounts(self) -> FetchResult:
        logger.info("Fetching discount offers")
        try:
            async with self._pool.page() as page:
                await self._open(page, DISCOUNTS_URL)
                offers = await page.eval_on_selector_all(
                    OFFER_SELECTOR, "els => els.map(e => e.innerText.trim())"
                )
        except Exception:
            logger.exception("Discounts fetch failed, serving static offers")
            return FetchResult(discounts_payload(FALLBACK_OFFERS), degraded=True)

        return FetchResult(discounts_payload(normalize_offers(offers)))
