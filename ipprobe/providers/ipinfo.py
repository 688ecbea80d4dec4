"""ipinfo.io geolocation provider."""

from __future__ import annotations

from typing import Any

from ipprobe.config import IPINFO_URL_TEMPLATE
from ipprobe.providers.base import GeoProvider


class IpinfoProvider(GeoProvider):
    """ipinfo.io per-IP lookup.

    Errors come back as ``{"status": 404, "error": {"title": ..., "message": ...}}``.
    """

    @property
    def name(self) -> str:
        return "ipinfo.io"

    @property
    def slug(self) -> str:
        return "ipinfo"

    def geolocate_url(self, ip: str) -> str:
        return IPINFO_URL_TEMPLATE.format(ip=ip)

    def error_message(self, data: dict[str, Any]) -> str | None:
        error = data.get("error")
        if isinstance(error, dict):
            return str(error.get("message") or error.get("title") or "ipinfo.io error")
        if error:
            return str(error)
        return None
