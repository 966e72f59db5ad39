"""
Audit API endpoints.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional
import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.responses import Response

from brand_auditor.config import settings
from brand_auditor.logger import logger
from brand_auditor.schemas.audit_request import BatchAuditRequest, ResultScreenshotRequest, SingleAuditRequest
from brand_auditor.schemas.audit_result import (
    AuditJobResponse,
    AuditResult,
    BatchAuditResponse,
    SingleAuditResponse,
)
from brand_auditor.services.audit_runner import AuditRunner
from brand_auditor.services.errors import AuditError, InvalidRequest
from brand_auditor.services.exporters import EXPORT_FORMATS, export_results

router = APIRouter(tags=["Audit"])


@dataclass
class AuditJob:
    """In-memory state of a background batch."""
    job_id: str
    status: str = "pending"
    logs: list[str] = field(default_factory=list)
    results: Optional[list[AuditResult]] = None
    error: Optional[str] = None


# In-memory job storage, oldest first
_jobs: Dict[str, AuditJob] = {}


def _store_job(job: AuditJob):
    """Keep the job and drop the oldest finished ones beyond MAX_STORED_JOBS."""
    _jobs[job.job_id] = job
    finished = [job_id for job_id, j in _jobs.items() if j.status in ("completed", "failed")]
    while len(_jobs) > settings.MAX_STORED_JOBS and finished:
        del _jobs[finished.pop(0)]


def get_runner() -> AuditRunner:
    return AuditRunner()


@router.post("", response_model=BatchAuditResponse, response_model_exclude_none=True)
async def run_batch(request: BatchAuditRequest, runner: AuditRunner = Depends(get_runner)):
    """Audit a batch of URLs and return all results at once."""
    logs: list[str] = []
    try:
        outcome = await runner.run_batch(request, on_log=logs.append)
    except InvalidRequest as e:
        return BatchAuditResponse(success=False, error=str(e), logs=logs)
    return BatchAuditResponse(success=True, results=outcome.results, logs=outcome.logs)


@router.post("/single", response_model=SingleAuditResponse, response_model_exclude_none=True)
async def run_single(request: SingleAuditRequest, runner: AuditRunner = Depends(get_runner)):
    """Audit one URL."""
    try:
        result = await runner.run_single(request.guideline_text, request.url, api_key=request.api_key)
    except InvalidRequest as e:
        return SingleAuditResponse(success=False, error=str(e))
    return SingleAuditResponse(success=result.status == "success", result=result, error=result.error_message)


@router.post("/jobs", response_model=AuditJobResponse, response_model_exclude_none=True)
async def start_job(
    request: BatchAuditRequest,
    background_tasks: BackgroundTasks,
    runner: AuditRunner = Depends(get_runner),
):
    """Start a batch audit in the background; poll for logs and results."""
    job = AuditJob(job_id=str(uuid.uuid4()))
    _store_job(job)

    background_tasks.add_task(_run_job, job, request, runner)

    logger.info(f"Started audit job {job.job_id}")
    return AuditJobResponse(job_id=job.job_id, status=job.status)


async def _run_job(job: AuditJob, request: BatchAuditRequest, runner: AuditRunner):
    """Background task to run the batch."""
    job.status = "running"
    try:
        outcome = await runner.run_batch(request, on_log=job.logs.append)
    except InvalidRequest as e:
        job.status = "failed"
        job.error = str(e)
        return
    except Exception as e:
        logger.exception(f"Audit job {job.job_id} failed: {e}")
        job.status = "failed"
        job.error = str(e) or "An unknown error occurred"
        return

    job.results = outcome.results
    job.status = "completed"
    logger.info(f"Completed audit job {job.job_id}")


def _get_job(job_id: str) -> AuditJob:
    if job_id not in _jobs:
        raise HTTPException(status_code=404, detail="Audit job not found")
    return _jobs[job_id]


@router.get("/jobs/{job_id}", response_model=AuditJobResponse, response_model_exclude_none=True)
async def get_job(job_id: str):
    """Get job status, progress log and results."""
    job = _get_job(job_id)
    return AuditJobResponse(
        job_id=job.job_id,
        status=job.status,
        logs=list(job.logs),
        results=job.results,
        error=job.error,
    )


@router.get("/jobs/{job_id}/export")
async def export_job(job_id: str, format: str = "json"):
    """Download the successful results of a completed job."""
    job = _get_job(job_id)
    if job.status != "completed":
        raise HTTPException(status_code=400, detail="Audit not completed yet")
    if format not in EXPORT_FORMATS:
        raise HTTPException(status_code=400, detail=f"Unsupported export format: {format}")

    content, media_type, extension = export_results(job.results or [], format)
    return Response(
        content=content,
        media_type=media_type,
        headers={
            "Content-Disposition": f"attachment; filename=content-audit-results_{job_id[:8]}.{extension}"
        }
    )


@router.post("/jobs/{job_id}/screenshots", response_model=SingleAuditResponse, response_model_exclude_none=True)
async def capture_job_result(
    job_id: str,
    request: ResultScreenshotRequest,
    runner: AuditRunner = Depends(get_runner),
):
    """Capture the elements a stored result flagged and attach them to it."""
    job = _get_job(job_id)
    if job.status != "completed":
        raise HTTPException(status_code=400, detail="Audit not completed yet")

    results = job.results or []
    index = next((i for i, r in enumerate(results) if r.url == request.url), None)
    if index is None:
        raise HTTPException(status_code=404, detail="URL is not part of this audit")

    try:
        result = await runner.capture_result(results[index])
    except AuditError as e:
        logger.warning(f"Screenshot capture failed for {request.url}: {e}")
        return SingleAuditResponse(success=False, error=str(e))

    results[index] = result
    return SingleAuditResponse(success=True, result=result)
