"""Shared fakes standing in for Playwright browser objects."""

import pytest


class FakeElement:
    def __init__(self, text: str):
        self._text = text

    async def inner_text(self) -> str:
        return self._text


class FakePage:
    """Serves canned selector results; raises ``error`` from goto when set."""

    def __init__(self, selectors: dict | None = None, error: Exception | None = None):
        self.selectors = selectors or {}
        self.error = error
        self.visited: list[tuple[str, dict]] = []

    async def goto(self, url: str, **kwargs):
        self.visited.append((url, kwargs))
        if self.error is not None:
            raise self.error

    async def query_selector(self, selector: str):
        texts = self.selectors.get(selector) or []
        return FakeElement(texts[0]) if texts else None

    async def eval_on_selector_all(self, selector: str, _expression: str):
        return list(self.selectors.get(selector, []))


class FakeContext:
    def __init__(self, page: FakePage):
        self.page = page
        self.closed = False

    async def new_page(self) -> FakePage:
        return self.page

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, page: FakePage | None = None):
        self.page = page or FakePage()
        self.contexts: list[FakeContext] = []
        self.closed = False

    async def new_context(self, **kwargs) -> FakeContext:
        context = FakeContext(self.page)
        self.contexts.append(context)
        return context

    def is_connected(self) -> bool:
        return not self.closed

    async def close(self):
        self.closed = True


class FakePool:
    """Drop-in for PagePool that never launches Chromium."""

    def __init__(self):
        self.started = False
        self.closed = False

    @property
    def is_connected(self) -> bool:
        return self.started and not self.closed

    async def start(self):
        self.started = True

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_browser():
    return FakeBrowser()
