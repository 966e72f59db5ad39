"""
URL normalization for audit identity and crawl deduplication.
"""
import re
from urllib.parse import urlsplit, urlunsplit

from pydantic import HttpUrl, TypeAdapter, ValidationError

from brand_auditor.services.errors import InvalidUrl

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
_SEPARATORS_RE = re.compile(r"[\s,]+")

_http_url = TypeAdapter(HttpUrl)


def split_url_input(raw: str) -> list[str]:
    """Split submitted URL text on commas and whitespace."""
    return [token for token in _SEPARATORS_RE.split(raw or "") if token]


def normalize_url(raw: str) -> str:
    """Canonicalize a raw URL into an absolute http(s) URL.

    - Adds https:// when no scheme is given
    - Lowercases scheme and host
    - Empty path becomes "/"
    - Query and fragment are preserved

    Raises:
        InvalidUrl: if the result is not a well-formed absolute http(s) URL
    """
    candidate = (raw or "").strip()
    if not candidate:
        raise InvalidUrl(raw, "empty")

    if not _SCHEME_RE.match(candidate):
        candidate = "https://" + candidate

    try:
        parsed = _http_url.validate_python(candidate)
    except ValidationError as e:
        raise InvalidUrl(raw, e.errors()[0].get("msg", "malformed")) from e

    if not parsed.host:
        raise InvalidUrl(raw, "missing host")

    return str(parsed)


def discovery_key(url: str) -> str:
    """Crawl dedup key: the URL without query and fragment."""
    parts = urlsplit(url)
    path = parts.path or "/"
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, "", ""))


def base_origin(url: str) -> str:
    """Extract origin (scheme + host[:port])."""
    parts = urlsplit(url)
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}"
