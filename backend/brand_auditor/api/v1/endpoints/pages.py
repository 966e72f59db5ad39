"""
Page-level endpoints: link discovery and element screenshots.
"""
from fastapi import APIRouter, Depends

from brand_auditor.api.v1.endpoints.audit import get_runner
from brand_auditor.logger import logger
from brand_auditor.schemas.audit_request import DiscoverRequest, ScreenshotRequest
from brand_auditor.schemas.audit_result import DiscoverResponse, ScreenshotResponse
from brand_auditor.services.audit_runner import AuditRunner
from brand_auditor.services.errors import AuditError

router = APIRouter(tags=["Pages"])


@router.post("/discover", response_model=DiscoverResponse, response_model_exclude_none=True)
async def discover_links(request: DiscoverRequest, runner: AuditRunner = Depends(get_runner)):
    """List same-domain links found on a page."""
    try:
        links = await runner.discover(request.start_url)
    except AuditError as e:
        return DiscoverResponse(success=False, error=str(e))
    return DiscoverResponse(success=True, links=links)


@router.post("/screenshots", response_model=ScreenshotResponse, response_model_exclude_none=True)
async def capture_screenshots(request: ScreenshotRequest, runner: AuditRunner = Depends(get_runner)):
    """Capture page elements for the given selectors."""
    try:
        screenshots = await runner.capture(request.url, request.selectors)
    except AuditError as e:
        logger.warning(f"Screenshot capture failed for {request.url}: {e}")
        return ScreenshotResponse(success=False, error=str(e))
    return ScreenshotResponse(success=True, screenshots=screenshots)
