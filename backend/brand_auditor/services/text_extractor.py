"""
Text Extractor - Reduce page markup to plain analyzable text.
"""
import re
from typing import Optional

from bs4 import BeautifulSoup

from brand_auditor.config import settings

BOILERPLATE_TAGS = ["style", "script", "nav", "footer"]

_WHITESPACE_RE = re.compile(r"\s+")


def extract_text(html: str, max_chars: Optional[int] = None) -> str:
    """Extract body text without scripts, styles, navigation and footer.

    Output is whitespace-collapsed and silently truncated to max_chars.
    Returns "" when the markup has no <body>.
    """
    limit = settings.MAX_CONTENT_CHARS if max_chars is None else max_chars

    soup = BeautifulSoup(html or "", "html.parser")
    body = soup.find("body")
    if body is None:
        return ""

    for tag in body.find_all(BOILERPLATE_TAGS):
        tag.decompose()

    text = body.get_text(separator=" ")
    text = _WHITESPACE_RE.sub(" ", text).strip()
    return text[:limit]
