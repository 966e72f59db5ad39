"""
Page Fetcher - Retrieve raw page markup over HTTP.

Architecture:
1. SSRF protection check
2. Single HTTP GET with a desktop browser identity
3. Non-2xx and transport errors collapse to FetchFailed

No retries: a failed fetch fails that URL's audit, never the batch.
"""

import asyncio
from datetime import datetime
from typing import Optional
from dataclasses import dataclass, field

import httpx

from brand_auditor.config import settings
from brand_auditor.logger import logger
from brand_auditor.services.errors import FetchFailed
from brand_auditor.services.ssrf_protection import SSRFProtection

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
}


@dataclass
class PageData:
    """Fetched page data container."""
    url: str
    final_url: str
    status_code: int
    html: str
    content_type: Optional[str] = None
    redirect_chain: list[str] = field(default_factory=list)
    fetched_at: datetime = field(default_factory=datetime.now)


class PageFetcher:
    """Fetches pages with a browser-like identity."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        ssrf_protection: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT
        self.max_redirects = settings.HTTP_MAX_REDIRECTS
        self.ssrf_protection = settings.SSRF_PROTECTION_ENABLED if ssrf_protection is None else ssrf_protection
        self.transport = transport

    async def fetch(self, url: str) -> PageData:
        """Fetch a page.

        Args:
            url: Normalized absolute URL

        Returns:
            PageData with the response body as text

        Raises:
            FetchFailed: blocked target, transport error or non-2xx status
        """
        if self.ssrf_protection:
            is_safe, reason = await asyncio.to_thread(SSRFProtection.check, url)
            if not is_safe:
                logger.warning(f"SSRF protection blocked {url}: {reason}")
                raise FetchFailed(url, f"URL blocked ({reason})")

        logger.info(f"Fetching {url}")

        try:
            async with httpx.AsyncClient(
                follow_redirects=True,
                max_redirects=self.max_redirects,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.get(url, headers=BROWSER_HEADERS)
        except httpx.TimeoutException as e:
            raise FetchFailed(url, f"timed out after {self.timeout}s") from e
        except httpx.TooManyRedirects as e:
            raise FetchFailed(url, "too many redirects") from e
        except httpx.HTTPError as e:
            raise FetchFailed(url, f"{type(e).__name__}: {e}" if str(e) else type(e).__name__) from e

        if not response.is_success:
            raise FetchFailed(
                url,
                f"{response.status_code} {response.reason_phrase}".strip(),
                status_code=response.status_code,
            )

        return PageData(
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            html=response.text,
            content_type=response.headers.get("content-type"),
            redirect_chain=[str(r.url) for r in response.history],
        )
