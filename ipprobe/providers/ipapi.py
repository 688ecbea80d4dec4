"""ipapi.co geolocation provider."""

from __future__ import annotations

from typing import Any

from ipprobe.config import IPAPI_URL_TEMPLATE
from ipprobe.providers.base import GeoProvider


class IpapiProvider(GeoProvider):
    """ipapi.co per-IP lookup.

    Errors come back as ``{"ip": ..., "error": true, "reason": ...}``,
    usually with a 4xx status.
    """

    @property
    def name(self) -> str:
        return "ipapi.co"

    @property
    def slug(self) -> str:
        return "ipapi"

    def geolocate_url(self, ip: str) -> str:
        return IPAPI_URL_TEMPLATE.format(ip=ip)

    def error_message(self, data: dict[str, Any]) -> str | None:
        if data.get("error"):
            return str(data.get("reason", "ipapi.co error"))
        return None
