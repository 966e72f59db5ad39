"""
Pydantic schemas for audit requests.
"""

from typing import Optional, Union
from pydantic import ConfigDict, Field, field_validator

from brand_auditor.schemas.audit_result import CamelModel


class BatchAuditRequest(CamelModel):
    """Request to audit a set of URLs against brand guidelines."""
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "guidelineText": "Voice is warm and direct. Never use jargon.",
                "urls": "example.com, https://example.com/about",
                "autoDiscover": False,
            }
        },
    )

    guideline_text: str = Field("", description="Brand guidelines as plain text")
    urls: Union[str, list[str]] = Field("", description="URLs separated by newlines or commas")
    auto_discover: bool = Field(False, description="Expand the set with links found on the first URL")
    api_key: Optional[str] = Field(None, description="Overrides the configured Gemini API key")

    @field_validator("urls", mode="after")
    @classmethod
    def _join_url_list(cls, value):
        if isinstance(value, list):
            return "\n".join(value)
        return value


class SingleAuditRequest(CamelModel):
    """Request to audit one URL."""
    guideline_text: str = ""
    url: str = ""
    api_key: Optional[str] = None


class DiscoverRequest(CamelModel):
    """Request to list same-domain links of a page."""
    start_url: str


class ScreenshotRequest(CamelModel):
    """Request to capture page elements."""
    url: str
    selectors: list[str] = []


class ResultScreenshotRequest(CamelModel):
    """Request to capture the elements flagged in a stored result."""
    url: str
