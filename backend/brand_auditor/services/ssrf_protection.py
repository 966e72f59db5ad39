"""
SSRF Protection - Refuse to fetch URLs that point into private networks.
"""
import ipaddress
import socket
from urllib.parse import urlsplit

from brand_auditor.logger import logger


class SSRFProtection:
    """Validates fetch targets before the audit pipeline connects to them."""

    BLOCKED_HOSTS = {
        "localhost",
        "metadata.google.internal",
    }

    @classmethod
    def check(cls, url: str) -> tuple[bool, str]:
        """
        Check whether a URL is safe to fetch.

        Returns:
            tuple: (is_safe, reason)
        """
        parsed = urlsplit(url)

        if parsed.scheme not in ("http", "https"):
            return False, f"unsupported scheme {parsed.scheme!r}"

        hostname = parsed.hostname
        if not hostname:
            return False, "missing hostname"

        if hostname.lower() in cls.BLOCKED_HOSTS:
            return False, f"blocked hostname {hostname}"

        try:
            addresses = {info[4][0] for info in socket.getaddrinfo(hostname, None)}
        except socket.gaierror:
            # Let the HTTP client report the DNS failure itself
            logger.warning(f"DNS resolution failed for {hostname}")
            return True, ""

        for address in addresses:
            ip = ipaddress.ip_address(address.split("%", 1)[0])
            if ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_reserved or ip.is_unspecified:
                return False, f"{hostname} resolves to non-public address {ip}"

        return True, ""
