"""
Shared fakes for the audit pipeline tests.
"""
import json
from unittest.mock import AsyncMock, MagicMock

import httpx

from brand_auditor.schemas.audit_result import ComplianceReport
from brand_auditor.services.errors import AnalysisFailed
from brand_auditor.services.page_fetcher import PageFetcher


def page(body: str, head: str = "<title>Test</title>") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


def report_payload(score=80, issues=None, rewrites=None, recommendations=None) -> dict:
    return {
        "complianceScore": score,
        "flaggedIssues": issues if issues is not None else [{"text": "Too formal", "selector": "#hero h1"}],
        "suggestedRewrites": rewrites if rewrites is not None else [{"text": "Say hello plainly"}],
        "recommendations": recommendations if recommendations is not None else ["Lead with the brand promise"],
    }


def make_report(score=80, **kwargs) -> ComplianceReport:
    return ComplianceReport.model_validate(report_payload(score, **kwargs))


def mock_fetcher(pages: dict) -> PageFetcher:
    """PageFetcher served by httpx.MockTransport.

    pages maps URL -> html string or -> (status_code, body).
    Unknown URLs return 404.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        entry = pages.get(str(request.url))
        if entry is None:
            return httpx.Response(404, text="not found")
        if isinstance(entry, tuple):
            status, body = entry
            return httpx.Response(status, text=body)
        return httpx.Response(200, text=entry, headers={"content-type": "text/html"})

    return PageFetcher(ssrf_protection=False, transport=httpx.MockTransport(handler))


class FakeAnalyzer:
    """Stands in for ComplianceAnalyzer; scores by URL."""

    def __init__(self, scores: dict = None, failures: dict = None, default_score: int = 75):
        self.scores = scores or {}
        self.failures = failures or {}
        self.default_score = default_score
        self.calls = []

    async def analyze(self, guideline_text: str, page_text: str, url: str) -> ComplianceReport:
        self.calls.append((guideline_text, page_text, url))
        if url in self.failures:
            raise AnalysisFailed(self.failures[url])
        return make_report(self.scores.get(url, self.default_score))


class FakeClock:
    """Settable monotonic clock for circuit breaker timing."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class FakeCapturer:
    def __init__(self, screenshots=None, error=None):
        self.screenshots = screenshots or []
        self.error = error
        self.calls = []

    async def capture(self, url, selectors):
        self.calls.append((url, list(selectors)))
        if self.error:
            raise self.error
        return self.screenshots


def fake_genai_client(text: str = None, error: Exception = None) -> MagicMock:
    """Mimics google.genai.Client for client.aio.models.generate_content."""
    client = MagicMock()
    if error is not None:
        client.aio.models.generate_content = AsyncMock(side_effect=error)
    else:
        response = MagicMock()
        response.text = text
        client.aio.models.generate_content = AsyncMock(return_value=response)
    return client


def fake_playwright(elements: dict, goto_error: Exception = None, broken: tuple = ()):
    """Build an async_playwright() replacement.

    elements maps selector -> number of matching elements.
    Selectors in `broken` raise when screenshotted.

    Returns:
        (manager, browser, page) so tests can assert on calls
    """
    page = MagicMock()
    page.goto = AsyncMock(side_effect=goto_error)

    def locator(selector):
        loc = MagicMock()
        loc.count = AsyncMock(return_value=elements.get(selector, 0))
        if selector in broken:
            loc.first.screenshot = AsyncMock(side_effect=RuntimeError("element is not visible"))
        else:
            loc.first.screenshot = AsyncMock(return_value=f"png:{selector}".encode())
        return loc

    page.locator = MagicMock(side_effect=locator)

    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)

    manager = MagicMock()
    manager.__aenter__ = AsyncMock(return_value=playwright)
    manager.__aexit__ = AsyncMock(return_value=False)
    return manager, browser, page


def dumps(payload) -> str:
    return json.dumps(payload)
