"""
Audit Runner - Main orchestrator for brand compliance audits.

Turns one batch request into an ordered list of AuditResult:
validate → normalize → (discover) → fetch → extract → analyze per URL.
Per-URL failures are recorded as error results and never abort the batch.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from brand_auditor.config import settings
from brand_auditor.logger import logger
from brand_auditor.schemas.audit_request import BatchAuditRequest
from brand_auditor.schemas.audit_result import AuditResult, Screenshot
from brand_auditor.services.circuit_breaker import AnalysisCircuitBreaker
from brand_auditor.services.compliance_analyzer import ComplianceAnalyzer
from brand_auditor.services.errors import AuditError, InvalidRequest, InvalidUrl, NoContent
from brand_auditor.services.link_discoverer import LinkDiscoverer
from brand_auditor.services.page_fetcher import PageFetcher
from brand_auditor.services.snapshot_capturer import SnapshotCapturer
from brand_auditor.services.text_extractor import extract_text
from brand_auditor.services.url_normalizer import discovery_key, normalize_url, split_url_input


class ProgressLog:
    """Ordered, human-readable progress narrative for one batch."""

    def __init__(self, on_log: Optional[Callable[[str], None]] = None):
        self.lines: list[str] = []
        self._on_log = on_log

    def __call__(self, line: str):
        self.lines.append(line)
        logger.info(line)
        if self._on_log:
            self._on_log(line)


@dataclass
class BatchOutcome:
    """Completed batch: results in scheduling order plus the progress log."""
    results: list[AuditResult]
    logs: list[str] = field(default_factory=list)


class AuditRunner:
    """Orchestrates the complete audit process."""

    def __init__(
        self,
        page_fetcher: Optional[PageFetcher] = None,
        analyzer: Optional[ComplianceAnalyzer] = None,
        link_discoverer: Optional[LinkDiscoverer] = None,
        snapshot_capturer: Optional[SnapshotCapturer] = None,
        concurrency: Optional[int] = None,
        url_timeout: Optional[float] = None,
    ):
        self.page_fetcher = page_fetcher or PageFetcher()
        self._analyzer = analyzer
        self.link_discoverer = link_discoverer or LinkDiscoverer(self.page_fetcher)
        self.snapshot_capturer = snapshot_capturer or SnapshotCapturer()
        self.concurrency = max(1, concurrency or settings.AUDIT_CONCURRENCY)
        self.url_timeout = url_timeout or settings.AUDIT_URL_TIMEOUT

    def _analyzer_for(self, api_key: Optional[str]) -> ComplianceAnalyzer:
        if api_key:
            # Caller-supplied keys get a private breaker; the shared one guards the server key only
            return ComplianceAnalyzer(api_key=api_key, circuit_breaker=AnalysisCircuitBreaker())
        if self._analyzer is None:
            self._analyzer = ComplianceAnalyzer()
        return self._analyzer

    async def run_batch(
        self,
        request: BatchAuditRequest,
        on_log: Optional[Callable[[str], None]] = None,
    ) -> BatchOutcome:
        """
        Run a batch audit.

        Args:
            request: Guidelines, URL text and discovery flag
            on_log: Called with each progress line as it is produced

        Returns:
            BatchOutcome with one result per scheduled URL

        Raises:
            InvalidRequest: before any network activity, if the request is unusable
        """
        log = ProgressLog(on_log)

        guideline_text = (request.guideline_text or "").strip()
        if not guideline_text:
            log("Validation error: Brand guidelines are required.")
            raise InvalidRequest("Brand guidelines are required.")

        tokens = split_url_input(request.urls)
        if not tokens:
            log("Validation error: At least one URL is required.")
            raise InvalidRequest("At least one URL is required.")

        urls = self._resolve_urls(tokens, log)
        if not urls:
            log("URL error: Please provide at least one valid URL.")
            raise InvalidRequest("Please provide at least one valid URL.")

        if request.auto_discover:
            urls = await self._expand_with_discovered(urls, log)

        analyzer = self._analyzer_for(request.api_key)
        log(f"Starting audit for {len(urls)} URL(s)...")

        results = [AuditResult.pending(url) for url in urls]
        semaphore = asyncio.Semaphore(self.concurrency)

        async def worker(index: int, url: str):
            async with semaphore:
                results[index] = await self._audit_url(guideline_text, url, analyzer, log)

        await asyncio.gather(*(worker(i, url) for i, url in enumerate(urls)))

        succeeded = sum(1 for r in results if r.status == "success")
        log(f"Audit finished: {succeeded} succeeded, {len(results) - succeeded} failed.")
        return BatchOutcome(results=results, logs=log.lines)

    async def run_single(self, guideline_text: str, url: str, api_key: Optional[str] = None) -> AuditResult:
        """Audit one URL. Pipeline failures come back as an error result."""
        guideline_text = (guideline_text or "").strip()
        if not guideline_text:
            raise InvalidRequest("Brand guidelines are required.")
        normalized = self._normalize_or_reject(url)
        return await self._audit_url(guideline_text, normalized, self._analyzer_for(api_key), ProgressLog())

    async def discover(self, start_url: str) -> list[str]:
        """Same-domain links of one page."""
        return await self.link_discoverer.discover(self._normalize_or_reject(start_url))

    async def capture(self, url: str, selectors: Iterable[str]) -> list[Screenshot]:
        """Element screenshots for selectors surfaced by a previous analysis."""
        return await self.snapshot_capturer.capture(self._normalize_or_reject(url), selectors)

    async def capture_result(self, result: AuditResult) -> AuditResult:
        """Attach screenshots of the elements a successful result references."""
        if result.status != "success":
            raise InvalidRequest(f"No compliance report to capture for {result.url}")
        screenshots = await self.snapshot_capturer.capture(result.url, result.report.selectors())
        return result.model_copy(update={"screenshots": screenshots})

    def _normalize_or_reject(self, url: str) -> str:
        try:
            return normalize_url(url)
        except InvalidUrl as e:
            raise InvalidRequest(str(e)) from e

    def _resolve_urls(self, tokens: list[str], log: ProgressLog) -> list[str]:
        urls = []
        for token in tokens:
            try:
                url = normalize_url(token)
            except InvalidUrl as e:
                log(f"Skipping {e}")
                continue
            if url not in urls:
                urls.append(url)
        return urls

    async def _expand_with_discovered(self, urls: list[str], log: ProgressLog) -> list[str]:
        start_url = urls[0]
        log(f"[{start_url}]: Discovering same-domain links...")
        discovered = await self.link_discoverer.discover(start_url)

        scheduled = list(urls)
        seen_keys = {discovery_key(url) for url in urls}
        for link in discovered:
            try:
                link = normalize_url(link)
            except InvalidUrl:
                continue
            key = discovery_key(link)
            if key in seen_keys:
                continue
            seen_keys.add(key)
            scheduled.append(link)

        log(f"[{start_url}]: Added {len(scheduled) - len(urls)} discovered link(s).")
        return scheduled

    async def _audit_url(
        self,
        guideline_text: str,
        url: str,
        analyzer: ComplianceAnalyzer,
        log: ProgressLog,
    ) -> AuditResult:
        try:
            return await asyncio.wait_for(
                self._pipeline(guideline_text, url, analyzer, log),
                timeout=self.url_timeout,
            )
        except asyncio.TimeoutError:
            message = f"Audit timed out after {self.url_timeout}s"
        except AuditError as e:
            message = str(e)
        except Exception as e:
            logger.exception(f"Audit failed for {url}: {e}")
            message = str(e) or "An unknown error occurred"

        log(f"[{url}]: Error - {message}")
        return AuditResult.failed(url, message)

    async def _pipeline(
        self,
        guideline_text: str,
        url: str,
        analyzer: ComplianceAnalyzer,
        log: ProgressLog,
    ) -> AuditResult:
        log(f"[{url}]: Fetching content...")
        page = await self.page_fetcher.fetch(url)

        text = extract_text(page.html)
        if not text:
            raise NoContent(url)
        log(f"[{url}]: Content fetched successfully ({len(text)} chars). Analyzing...")

        report = await analyzer.analyze(guideline_text, text, url)
        log(f"[{url}]: Analysis complete. Score: {report.compliance_score}%")
        return AuditResult.succeeded(url, report)
