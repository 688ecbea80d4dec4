"""Abstract base classes for IP lookup and geolocation providers."""

from __future__ import annotations

import abc
import logging
from typing import Any

import httpx

from ipprobe.client import fetch_json
from ipprobe.errors import ParseError
from ipprobe.models import AddressFamily, GeoRecord

logger = logging.getLogger(__name__)


class IPLookupProvider(abc.ABC):
    """Base class for "what is my IP" echo services."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Human-readable provider name (e.g. 'ipify')."""

    @property
    @abc.abstractmethod
    def slug(self) -> str:
        """Selector key (e.g. 'ipify')."""

    @property
    @abc.abstractmethod
    def ip_field(self) -> str:
        """JSON field holding the echoed address."""

    @abc.abstractmethod
    def lookup_url(self, family: AddressFamily) -> str:
        """URL to query for the given address family hint."""

    async def lookup(
        self,
        client: httpx.AsyncClient,
        family: AddressFamily = AddressFamily.V4,
    ) -> str:
        """Return the caller's public IP as reported by this service."""
        data = await fetch_json(client, self.lookup_url(family))
        if not isinstance(data, dict) or not data.get(self.ip_field):
            raise ParseError(f"{self.name} response has no {self.ip_field!r} field: {data!r}")
        return str(data[self.ip_field])


class GeoProvider(abc.ABC):
    """Base class for IP geolocation services."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Human-readable provider name (e.g. 'ipinfo.io')."""

    @property
    @abc.abstractmethod
    def slug(self) -> str:
        """Selector key (e.g. 'ipinfo')."""

    @abc.abstractmethod
    def geolocate_url(self, ip: str) -> str:
        """URL to query for *ip*."""

    def error_message(self, data: dict[str, Any]) -> str | None:
        """Return the provider's error message if *data* is an error body."""
        return None

    async def geolocate(self, client: httpx.AsyncClient, ip: str) -> GeoRecord:
        """Geolocate *ip*. The provider's JSON object is kept verbatim."""
        data = await fetch_json(client, self.geolocate_url(ip))
        if not isinstance(data, dict):
            raise ParseError(f"{self.name} returned a non-object body: {data!r}")

        message = self.error_message(data)
        if message:
            logger.warning("%s reported an error for %s: %s", self.name, ip, message)

        return GeoRecord(ip=ip, source=self.slug, data=data)
