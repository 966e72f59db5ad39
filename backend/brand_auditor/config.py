"""
Application configuration using environment variables.
"""
import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

# Load .env file
load_dotenv()


@dataclass
class Settings:
    """Application settings."""
    APP_NAME: str = "Brand Compliance Auditor"

    # Analysis service (Gemini)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    GEMINI_TEMPERATURE: float = float(os.getenv("GEMINI_TEMPERATURE", "0.2"))

    # Analysis circuit breaker
    ANALYSIS_FAILURE_THRESHOLD: int = int(os.getenv("ANALYSIS_FAILURE_THRESHOLD", "5"))
    ANALYSIS_COOLDOWN_SECONDS: int = int(os.getenv("ANALYSIS_COOLDOWN_SECONDS", "60"))

    # HTTP client settings
    HTTP_TIMEOUT: int = int(os.getenv("HTTP_TIMEOUT", "15"))
    HTTP_MAX_REDIRECTS: int = int(os.getenv("HTTP_MAX_REDIRECTS", "5"))
    SSRF_PROTECTION_ENABLED: bool = os.getenv("SSRF_PROTECTION_ENABLED", "true").lower() == "true"

    # Extraction
    MAX_CONTENT_CHARS: int = int(os.getenv("MAX_CONTENT_CHARS", "15000"))

    # Orchestration
    AUDIT_CONCURRENCY: int = int(os.getenv("AUDIT_CONCURRENCY", "1"))
    AUDIT_URL_TIMEOUT: int = int(os.getenv("AUDIT_URL_TIMEOUT", "120"))
    MAX_STORED_JOBS: int = int(os.getenv("MAX_STORED_JOBS", "100"))

    # Element capture (seconds)
    CAPTURE_NAVIGATION_TIMEOUT: int = int(os.getenv("CAPTURE_NAVIGATION_TIMEOUT", "30"))
    CAPTURE_ELEMENT_TIMEOUT: int = int(os.getenv("CAPTURE_ELEMENT_TIMEOUT", "10"))

    # CORS
    CORS_ORIGINS: List[str] = field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"])

settings = Settings()
