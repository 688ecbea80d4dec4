"""Exception hierarchy for ipprobe."""

from __future__ import annotations

from typing import Sequence


class IPProbeError(Exception):
    """Base class for errors surfaced to the user."""


class NetworkError(IPProbeError):
    """Transport-level failure of an outbound request."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Request to {url} failed: {reason}")
        self.url = url
        self.reason = reason


class ParseError(IPProbeError):
    """Response body is not JSON, or not the shape we expect."""


class NoRecordsFound(IPProbeError):
    """DNS lookup returned no answer records."""

    def __init__(self, domain: str, detail: str = "no answer records") -> None:
        super().__init__(f"No DNS records found for {domain!r}: {detail}")
        self.domain = domain
        self.detail = detail


class UnknownProvider(IPProbeError, ValueError):
    """Selector key does not name a registered provider."""

    def __init__(self, key: object, available: Sequence[str]) -> None:
        super().__init__(f"Unknown provider: {key!r}. Available: {list(available)}")
        self.key = key
        self.available = list(available)
