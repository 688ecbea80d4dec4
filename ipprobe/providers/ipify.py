"""ipify public IP provider."""

from __future__ import annotations

from ipprobe.config import IPIFY_V4_URL, IPIFY_V6_URL
from ipprobe.models import AddressFamily
from ipprobe.providers.base import IPLookupProvider


class IpifyProvider(IPLookupProvider):
    """ipify echo service.

    ``api.ipify.org`` only answers over IPv4. ``api64.ipify.org`` is
    dual-stack and reports the IPv6 address when one is routable.
    """

    @property
    def name(self) -> str:
        return "ipify"

    @property
    def slug(self) -> str:
        return "ipify"

    @property
    def ip_field(self) -> str:
        return "ip"

    def lookup_url(self, family: AddressFamily) -> str:
        return IPIFY_V6_URL if family is AddressFamily.V6 else IPIFY_V4_URL
