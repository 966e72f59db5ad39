"""
Link Discoverer - Same-domain hyperlink extraction for crawl expansion.

Same-domain means the resolved link has exactly the crawl's origin
(scheme, host and port). Subdomains are treated as foreign.
"""
from typing import Optional
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup

from brand_auditor.logger import logger
from brand_auditor.services.errors import AuditError
from brand_auditor.services.page_fetcher import PageFetcher
from brand_auditor.services.url_normalizer import base_origin, discovery_key


class LinkDiscoverer:
    """Finds same-domain links on a page."""

    def __init__(self, page_fetcher: Optional[PageFetcher] = None):
        self.page_fetcher = page_fetcher or PageFetcher()

    def extract_links(self, html: str, page_url: str, origin: str) -> set[str]:
        """Extract same-origin links from markup.

        Args:
            html: Raw page markup
            page_url: URL the markup was fetched from (relative links resolve against it)
            origin: Crawl origin, e.g. "https://example.com"

        Returns:
            Set of discovery keys (query and fragment stripped)
        """
        origin = origin.rstrip("/").lower()
        soup = BeautifulSoup(html or "", "html.parser")
        links = set()

        for anchor in soup.find_all("a", href=True):
            href = anchor["href"].strip()
            if not href:
                continue
            try:
                resolved = urljoin(page_url, href)
                parts = urlsplit(resolved)
            except ValueError:
                logger.debug(f"Skipping malformed href {href!r} on {page_url}")
                continue

            if parts.scheme not in ("http", "https") or not parts.netloc:
                continue
            if base_origin(resolved) != origin:
                continue

            links.add(discovery_key(resolved))

        return links

    async def discover(self, start_url: str) -> list[str]:
        """Fetch a page and list its same-domain links.

        A failed fetch degrades to an empty list; discovery never raises
        for network problems.
        """
        try:
            page = await self.page_fetcher.fetch(start_url)
        except AuditError as e:
            logger.warning(f"Link discovery skipped for {start_url}: {e}")
            return []

        links = self.extract_links(page.html, page.final_url, base_origin(start_url))
        logger.info(f"Discovered {len(links)} same-domain link(s) on {start_url}")
        return sorted(links)
