"""Network classification for bitrate ceilings and endpoint trust.

Turns the environment's best-effort connection hint into a quality score and
bitrate ceiling, and decides whether the stream endpoint is a trusted/local
address that warrants the generous bypass profile.
"""

import fnmatch
import ipaddress
import logging
import math
import re
from typing import Iterable, Optional
from urllib.parse import urlsplit

from quality.config import MAX_BITRATE
from quality.telemetry import NetworkInfo

logger = logging.getLogger(__name__)

# Effective link type → quality score
NETWORK_TYPE_SCORES = {
    "4g": 1.0,
    "3g": 0.7,
    "2g": 0.4,
    "slow-2g": 0.2,
}

DEFAULT_EFFECTIVE_TYPE = "4g"
DEFAULT_DOWNLINK_MBPS = 10.0

_IPV4_PATTERN = re.compile(r"^([0-9]{1,3}\.){3}[0-9]{1,3}$")


def network_type_score(effective_type: Optional[str]) -> float:
    """Score an effective link type; unknown types score optimistically."""
    if not effective_type:
        return 1.0
    return NETWORK_TYPE_SCORES.get(effective_type.lower(), 1.0)


def is_ipv4_literal(hostname: str) -> bool:
    """Check for a dotted-quad IPv4 literal with every octet in 0-255."""
    if not _IPV4_PATTERN.match(hostname):
        return False
    return all(0 <= int(part) <= 255 for part in hostname.split("."))


def is_ipv6_literal(hostname: str) -> bool:
    """Check for an IPv6 literal, with or without surrounding brackets."""
    address = hostname.strip("[]")
    if ":" not in address:
        return False
    try:
        ipaddress.IPv6Address(address)
    except ValueError:
        return False
    return True


class NetworkClassifier:
    """Classifies network conditions and endpoint trust."""

    def __init__(
        self,
        max_bitrate: int = MAX_BITRATE,
        internal_domain_patterns: Iterable[str] = (),
    ):
        """Initialize network classifier.

        Args:
            max_bitrate: Absolute bitrate ceiling in bits per second
            internal_domain_patterns: Glob patterns of trusted internal hosts
                (e.g. "*.local")
        """
        self.max_bitrate = max_bitrate
        self.internal_domain_patterns = [p.lower() for p in internal_domain_patterns]

    def classify(
        self,
        effective_type: Optional[str] = None,
        downlink_mbps: Optional[float] = None,
        ws_quality_score: float = 1.0,
        latency_ms: float = 0.0,
    ) -> NetworkInfo:
        """Combine the environment hint and the latency score.

        Args:
            effective_type: Effective link type ("4g", "3g", ...), None if unknown
            downlink_mbps: Downlink estimate in Mbps, None if unknown
            ws_quality_score: Control-channel latency/jitter score in [0, 1]
            latency_ms: Current mean round-trip latency

        Returns:
            NetworkInfo with combined quality and bitrate ceiling
        """
        if downlink_mbps is None or not math.isfinite(downlink_mbps) or downlink_mbps <= 0:
            downlink_mbps = DEFAULT_DOWNLINK_MBPS

        max_bitrate = int(min(self.max_bitrate, downlink_mbps * 1_000_000))
        quality = (network_type_score(effective_type) + ws_quality_score) / 2

        return NetworkInfo(
            effective_type=effective_type or DEFAULT_EFFECTIVE_TYPE,
            downlink_mbps=downlink_mbps,
            quality=quality,
            max_bitrate=max_bitrate,
            latency_ms=latency_ms,
            ws_quality_score=ws_quality_score,
        )

    def is_trusted_endpoint(self, url: Optional[str]) -> bool:
        """Check whether the stream endpoint is a trusted/local address.

        Args:
            url: Endpoint URL

        Returns:
            True for localhost, internal domains and literal IP addresses;
            False otherwise, including for malformed URLs
        """
        if not url:
            return False

        try:
            parts = urlsplit(url)
            hostname = parts.hostname
        except ValueError:
            logger.debug(f"Malformed endpoint URL treated as untrusted: {url!r}")
            return False

        if parts.scheme not in ("http", "https") or not hostname:
            return False

        if hostname == "localhost":
            return True

        if any(fnmatch.fnmatchcase(hostname, p) for p in self.internal_domain_patterns):
            return True

        return is_ipv4_literal(hostname) or is_ipv6_literal(hostname)
