"""
Compliance Analyzer - Boundary to the external text-analysis service (Gemini).

Handles:
- Prompt rendering
- Structured JSON response parsing
- Report validation (score range, required item lists)
- Fail-fast when the service keeps failing (circuit breaker)

No retries; callers decide whether to retry a failed URL.
"""

import asyncio
import json
import os
import re
from typing import Optional

from google import genai
from google.genai import types
from jinja2 import Environment, FileSystemLoader
from pydantic import ValidationError

from brand_auditor.config import settings
from brand_auditor.logger import logger
from brand_auditor.schemas.audit_result import ComplianceReport
from brand_auditor.services.circuit_breaker import AnalysisCircuitBreaker, get_circuit_breaker
from brand_auditor.services.errors import AnalysisFailed

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class ComplianceAnalyzer:
    """Analyzes page text against brand guidelines."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        client=None,
        circuit_breaker: Optional[AnalysisCircuitBreaker] = None,
    ):
        self.api_key = api_key or settings.GEMINI_API_KEY
        self.model = settings.GEMINI_MODEL
        self.temperature = settings.GEMINI_TEMPERATURE
        self.circuit_breaker = circuit_breaker or get_circuit_breaker()
        self._client = client
        self.env = Environment(loader=FileSystemLoader(TEMPLATE_DIR))

    def build_prompt(self, guideline_text: str, page_text: str, url: str) -> str:
        template = self.env.get_template("compliance_prompt.j2")
        return template.render(guideline_text=guideline_text, page_text=page_text, url=url)

    def _get_client(self):
        if self._client is None:
            if not self.api_key:
                raise AnalysisFailed("Gemini API key is not set")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def analyze(self, guideline_text: str, page_text: str, url: str) -> ComplianceReport:
        """Run one compliance analysis.

        Returns:
            Validated ComplianceReport

        Raises:
            AnalysisFailed: service error, open circuit, or invalid response
        """
        client = self._get_client()
        prompt = self.build_prompt(guideline_text, page_text, url)

        can_call, reason = self.circuit_breaker.can_call()
        if not can_call:
            raise AnalysisFailed(f"analysis service temporarily unavailable ({reason})")

        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    temperature=self.temperature,
                ),
            )
        except asyncio.CancelledError:
            # Cancelled calls count as failures so a half-open trial slot is always released
            self.circuit_breaker.record_failure()
            raise
        except Exception as e:
            self.circuit_breaker.record_failure()
            logger.error(f"Analysis service error for {url}: {e}")
            raise AnalysisFailed(str(e) or type(e).__name__) from e

        self.circuit_breaker.record_success()
        return self.parse_report(getattr(response, "text", None))

    @staticmethod
    def parse_report(raw: Optional[str]) -> ComplianceReport:
        """Parse and validate the service's JSON reply."""
        if not raw or not raw.strip():
            raise AnalysisFailed("empty response from analysis service")

        payload = raw.strip()
        fenced = _FENCE_RE.match(payload)
        if fenced:
            payload = fenced.group(1)

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise AnalysisFailed(f"malformed response: {e.msg}") from e

        if not isinstance(data, dict):
            raise AnalysisFailed("malformed response: expected a JSON object")

        try:
            return ComplianceReport.model_validate(data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise AnalysisFailed(f"invalid report ({problems})") from e
