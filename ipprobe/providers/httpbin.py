"""httpbin public IP provider."""

from __future__ import annotations

from ipprobe.config import HTTPBIN_IP_URL
from ipprobe.models import AddressFamily
from ipprobe.providers.base import IPLookupProvider


class HttpbinProvider(IPLookupProvider):
    """httpbin ``/ip`` endpoint. Has a single host, so the family hint is ignored."""

    @property
    def name(self) -> str:
        return "httpbin"

    @property
    def slug(self) -> str:
        return "httpbin"

    @property
    def ip_field(self) -> str:
        return "origin"

    def lookup_url(self, family: AddressFamily) -> str:
        return HTTPBIN_IP_URL
