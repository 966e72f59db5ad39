"""
Export completed audit results as CSV, JSON or Markdown.

Only successful results are exported.
"""

import csv
import io
import json
import os

from jinja2 import Environment, FileSystemLoader

from brand_auditor.logger import logger
from brand_auditor.schemas.audit_result import AuditItem, AuditResult

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")

CSV_COLUMNS = ["URL", "Status", "Score", "Recommendations", "FlaggedIssues", "SuggestedRewrites"]

EXPORT_FORMATS = {
    "csv": ("text/csv; charset=utf-8", "csv"),
    "json": ("application/json", "json"),
    "markdown": ("text/markdown; charset=utf-8", "md"),
}


def _successful(results: list[AuditResult]) -> list[AuditResult]:
    return [r for r in results if r.status == "success" and r.report is not None]


def _join(items: list[AuditItem]) -> str:
    return "; ".join(item.text for item in items)


def export_csv(results: list[AuditResult]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for result in _successful(results):
        report = result.report
        writer.writerow([
            result.url,
            result.status,
            report.compliance_score,
            _join(report.recommendations),
            _join(report.flagged_issues),
            _join(report.suggested_rewrites),
        ])
    return buffer.getvalue()


def export_json(results: list[AuditResult]) -> str:
    payload = [r.model_dump(mode="json", by_alias=True, exclude_none=True) for r in _successful(results)]
    return json.dumps(payload, indent=2)


def export_markdown(results: list[AuditResult]) -> str:
    env = Environment(loader=FileSystemLoader(TEMPLATE_DIR), trim_blocks=True, lstrip_blocks=True)
    template = env.get_template("audit_report.md.j2")
    return template.render(results=_successful(results))


def export_results(results: list[AuditResult], fmt: str) -> tuple[str, str, str]:
    """Render results in the given format.

    Returns:
        Tuple of (content, media_type, file_extension)

    Raises:
        ValueError: unknown format
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt}")

    renderers = {"csv": export_csv, "json": export_json, "markdown": export_markdown}
    content = renderers[fmt](results)
    media_type, extension = EXPORT_FORMATS[fmt]
    logger.info(f"Exported {len(_successful(results))} result(s) as {fmt}")
    return content, media_type, extension
