"""
Element Snapshot Capturer - Screenshot individual page elements with Playwright.

One browser per call, always closed on exit. Selectors come from a separate
analysis pass and often do not resolve against the live page, so a selector
that matches nothing or fails to render is skipped and logged.
"""

import asyncio
from typing import Iterable, Optional

from playwright.async_api import async_playwright

from brand_auditor.config import settings
from brand_auditor.logger import logger
from brand_auditor.schemas.audit_result import Screenshot
from brand_auditor.services.errors import CaptureFailed
from brand_auditor.services.page_fetcher import BROWSER_HEADERS
from brand_auditor.services.ssrf_protection import SSRFProtection


class SnapshotCapturer:
    """Captures element screenshots for a page."""

    def __init__(
        self,
        navigation_timeout: Optional[float] = None,
        element_timeout: Optional[float] = None,
        ssrf_protection: Optional[bool] = None,
    ):
        self.navigation_timeout = navigation_timeout or settings.CAPTURE_NAVIGATION_TIMEOUT
        self.element_timeout = element_timeout or settings.CAPTURE_ELEMENT_TIMEOUT
        self.ssrf_protection = settings.SSRF_PROTECTION_ENABLED if ssrf_protection is None else ssrf_protection

    async def capture(self, url: str, selectors: Iterable[str]) -> list[Screenshot]:
        """
        Capture one screenshot per resolvable selector.

        Args:
            url: Page to render
            selectors: CSS selectors; blanks and duplicates are ignored

        Returns:
            Screenshots for the selectors that resolved, in request order.
            An empty list is a valid result.

        Raises:
            CaptureFailed: blocked target, browser unavailable, or the page
                itself could not be loaded
        """
        wanted = list(dict.fromkeys(s.strip() for s in selectors if s and s.strip()))
        if not wanted:
            return []

        if self.ssrf_protection:
            is_safe, reason = await asyncio.to_thread(SSRFProtection.check, url)
            if not is_safe:
                logger.warning(f"SSRF protection blocked capture of {url}: {reason}")
                raise CaptureFailed(f"Could not load {url} for capture: URL blocked ({reason})")

        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(
                    headless=True,
                    args=["--disable-gpu", "--no-sandbox", "--disable-dev-shm-usage"],
                )
                try:
                    return await self._capture_page(browser, url, wanted)
                finally:
                    await browser.close()
        except CaptureFailed:
            raise
        except Exception as e:
            logger.error(f"Browser error while capturing {url}: {e}")
            raise CaptureFailed(f"Could not capture {url}: {e}") from e

    async def _capture_page(self, browser, url: str, wanted: list[str]) -> list[Screenshot]:
        context = await browser.new_context(user_agent=BROWSER_HEADERS["User-Agent"])
        page = await context.new_page()

        try:
            await page.goto(url, wait_until="networkidle", timeout=self.navigation_timeout * 1000)
        except Exception as e:
            raise CaptureFailed(f"Could not load {url} for capture: {e}") from e

        screenshots = []
        for selector in wanted:
            shot = await self._capture_element(page, url, selector)
            if shot is not None:
                screenshots.append(shot)

        logger.info(f"Captured {len(screenshots)}/{len(wanted)} element(s) on {url}")
        return screenshots

    async def _capture_element(self, page, url: str, selector: str) -> Optional[Screenshot]:
        try:
            locator = page.locator(selector)
            count = await locator.count()
            if count == 0:
                logger.info(f"Capture skipped on {url}: {selector!r} matched nothing")
                return None
            if count > 1:
                logger.info(f"{selector!r} matched {count} elements on {url}, using the first")

            image = await locator.first.screenshot(timeout=self.element_timeout * 1000)
            return Screenshot(selector=selector, image_bytes=image)
        except Exception as e:
            logger.warning(f"Capture skipped on {url}: {selector!r} failed ({e})")
            return None
