"""
Pydantic schemas for audit responses.
"""

import base64
from typing import Optional, Literal
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuditItem(CamelModel):
    """One flagged issue, rewrite suggestion or recommendation."""
    model_config = ConfigDict(frozen=True)

    text: str
    selector: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _from_plain_string(cls, data):
        # The analysis service sometimes returns bare strings instead of objects
        if isinstance(data, str):
            return {"text": data}
        return data

    @field_validator("selector")
    @classmethod
    def _blank_selector_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class ComplianceReport(CamelModel):
    """Validated analysis of one page against the guidelines."""
    model_config = ConfigDict(frozen=True)

    compliance_score: int = Field(..., ge=0, le=100)
    flagged_issues: list[AuditItem]
    suggested_rewrites: list[AuditItem]
    recommendations: list[AuditItem]

    @field_validator("compliance_score", mode="before")
    @classmethod
    def _round_fractional_score(cls, value):
        if isinstance(value, float):
            return round(value)
        return value

    def selectors(self) -> list[str]:
        """Distinct selectors referenced by any item, in first-seen order."""
        seen = {}
        for item in (*self.flagged_issues, *self.suggested_rewrites, *self.recommendations):
            if item.selector:
                seen.setdefault(item.selector, None)
        return list(seen)


class Screenshot(CamelModel):
    """Captured image of a single page element."""
    selector: str
    image_bytes: bytes

    @field_serializer("image_bytes", when_used="json")
    def _encode_image(self, value: bytes) -> str:
        return base64.b64encode(value).decode("ascii")


class AuditResult(CamelModel):
    """Outcome of auditing one URL."""
    url: str
    status: Literal["pending", "success", "error"]
    report: Optional[ComplianceReport] = None
    screenshots: Optional[list[Screenshot]] = None
    error_message: Optional[str] = None

    @model_validator(mode="after")
    def _check_status_fields(self):
        if self.status == "success" and (self.report is None or self.error_message is not None):
            raise ValueError("success results carry a report and no error message")
        if self.status == "error" and (self.error_message is None or self.report is not None):
            raise ValueError("error results carry an error message and no report")
        if self.status == "pending" and (self.report is not None or self.error_message is not None):
            raise ValueError("pending results carry neither report nor error message")
        return self

    @classmethod
    def pending(cls, url: str) -> "AuditResult":
        return cls(url=url, status="pending")

    @classmethod
    def succeeded(cls, url: str, report: ComplianceReport) -> "AuditResult":
        return cls(url=url, status="success", report=report)

    @classmethod
    def failed(cls, url: str, message: str) -> "AuditResult":
        return cls(url=url, status="error", error_message=message)


class BatchAuditResponse(CamelModel):
    """Response for a batch submission."""
    success: bool
    results: Optional[list[AuditResult]] = None
    error: Optional[str] = None
    logs: list[str] = []


class SingleAuditResponse(CamelModel):
    """Response for a single-URL audit."""
    success: bool
    result: Optional[AuditResult] = None
    error: Optional[str] = None


class DiscoverResponse(CamelModel):
    """Response for link discovery."""
    success: bool
    links: list[str] = []
    error: Optional[str] = None


class ScreenshotResponse(CamelModel):
    """Response for element capture."""
    success: bool
    screenshots: list[Screenshot] = []
    error: Optional[str] = None


class AuditJobResponse(CamelModel):
    """Status of a background audit job."""
    job_id: str
    status: Literal["pending", "running", "completed", "failed"]
    logs: list[str] = []
    results: Optional[list[AuditResult]] = None
    error: Optional[str] = None
