"""
Brand Compliance Auditor - FastAPI Application Entry Point
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from brand_auditor.config import settings
from brand_auditor.api.v1.endpoints import audit, health, pages
from brand_auditor.logger import logger

app = FastAPI(
    title=settings.APP_NAME,
    description="Audit web pages against brand guidelines with AI-generated compliance reports",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/api/v1")
app.include_router(audit.router, prefix="/api/v1/audit")
app.include_router(pages.router, prefix="/api/v1")


@app.on_event("startup")
async def startup():
    logger.info(f"Starting {settings.APP_NAME}...")
    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set; requests must supply apiKey")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs"
    }
