"""
Health check endpoint.
"""

from fastapi import APIRouter
from brand_auditor.services.circuit_breaker import get_circuit_breaker

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """Basic health check."""
    return {"status": "ok"}


@router.get("/health/detailed")
async def detailed_health():
    """Health check including the analysis service circuit breaker."""
    return {
        "status": "ok",
        "analysis_circuit_breaker": get_circuit_breaker().get_status()
    }
