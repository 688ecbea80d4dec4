"""Data models for ipprobe."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

import dns.rdatatype


class AddressFamily(str, enum.Enum):
    """Address family hint for public IP lookups."""

    V4 = "v4"
    V6 = "v6"


class LatencyTier(str, enum.Enum):
    """Presentation tier for a settled probe."""

    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"
    FAILED = "failed"


@dataclass(frozen=True)
class Target:
    """A fixed latency probe target. Identity is ``name``."""

    name: str
    url: str

    @property
    def key(self) -> str:
        return self.name.lower()


@dataclass
class ProbeResult:
    """Outcome of a single settled probe."""

    name: str
    duration_ms: float
    success: bool
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def key(self) -> str:
        return self.name.lower()


@dataclass
class DnsAnswer:
    """One record from a DNS-over-HTTPS JSON answer."""

    name: str
    type: int
    ttl: int
    data: str

    @property
    def type_name(self) -> str:
        try:
            return dns.rdatatype.to_text(self.type)
        except ValueError:
            return str(self.type)


@dataclass
class Resolution:
    """Result of resolving a domain."""

    domain: str
    answers: list[DnsAnswer] = field(default_factory=list)

    @property
    def address(self) -> str:
        """Data of the first answer record."""
        return self.answers[0].data

    @property
    def ip_address(self) -> Optional[str]:
        """First A/AAAA record, skipping CNAME links in the chain."""
        for answer in self.answers:
            if answer.type_name in ("A", "AAAA"):
                return answer.data
        return None


@dataclass
class GeoRecord:
    """Geolocation data exactly as the provider returned it."""

    ip: str
    source: str
    data: dict[str, Any] = field(default_factory=dict)

    def rows(self) -> Iterator[tuple[str, Any]]:
        yield from self.data.items()
