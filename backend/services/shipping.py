"""Cache-then-fetch orchestration for each query category."""

import logging

from services import knowledge_base
from services.cache import DISCOUNTS_KEY, CacheStore
from services.fetcher import Fetcher
from services.payloads import Category

logger = logging.getLogger(__name__)


class ShippingService:
    """Serve fresh cache entries, otherwise scrape and remember the result.

    Concurrent misses on the same key both scrape; the later write wins.
    """

    def __init__(self, store: CacheStore, fetcher: Fetcher):
        self.store = store
        self._fetcher = fetcher

    async def _cached(self, category: Category, key: str, **params) -> dict:
        entry = self.store.fresh(category, key)
        if entry is not None:
            logger.debug("Cache hit %s:%s", category.value, key)
            return entry.data

        result = await self._fetcher.fetch(category, **params)
        if not result.degraded:
            self.store.put(category, key, result.payload)
        return result.payload

    async def track(self, tracking_number: str) -> dict:
        return await self._cached(Category.TRACKING, tracking_number, tracking_number=tracking_number)

    async def tariff(self, country: str) -> dict:
        country = country.lower()
        return await self._cached(Category.TARIFF, country, country=country)

    async def discounts(self) -> dict:
        return await self._cached(Category.DISCOUNTS, DISCOUNTS_KEY)

    def ask(self, question: str) -> dict:
        return knowledge_base.answer(question)
