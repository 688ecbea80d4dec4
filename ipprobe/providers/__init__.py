"""Provider registries for public IP lookup and geolocation.

Both registries are closed enumerations: every selector key is a member of
:class:`IPSource` or :class:`GeoSource`, and anything else is rejected with
:class:`~ipprobe.errors.UnknownProvider` before any request is made.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Union

from ipprobe.errors import UnknownProvider
from ipprobe.models import AddressFamily

if TYPE_CHECKING:
    import httpx

    from ipprobe.models import GeoRecord
    from ipprobe.providers.base import GeoProvider, IPLookupProvider


class IPSource(str, enum.Enum):
    IPIFY = "ipify"
    HTTPBIN = "httpbin"


class GeoSource(str, enum.Enum):
    IPAPI = "ipapi"
    IPINFO = "ipinfo"


_IP_PROVIDER_MAP: dict[IPSource, type[IPLookupProvider]] | None = None
_GEO_PROVIDER_MAP: dict[GeoSource, type[GeoProvider]] | None = None


def _load_providers() -> None:
    global _IP_PROVIDER_MAP, _GEO_PROVIDER_MAP
    from ipprobe.providers.httpbin import HttpbinProvider
    from ipprobe.providers.ipapi import IpapiProvider
    from ipprobe.providers.ipify import IpifyProvider
    from ipprobe.providers.ipinfo import IpinfoProvider

    _IP_PROVIDER_MAP = {
        IPSource.IPIFY: IpifyProvider,
        IPSource.HTTPBIN: HttpbinProvider,
    }
    _GEO_PROVIDER_MAP = {
        GeoSource.IPAPI: IpapiProvider,
        GeoSource.IPINFO: IpinfoProvider,
    }


def get_ip_provider_map() -> dict[IPSource, type[IPLookupProvider]]:
    """Return the mapping of IPSource → provider class, loading lazily."""
    if _IP_PROVIDER_MAP is None:
        _load_providers()
    return _IP_PROVIDER_MAP  # type: ignore[return-value]


def get_geo_provider_map() -> dict[GeoSource, type[GeoProvider]]:
    """Return the mapping of GeoSource → provider class, loading lazily."""
    if _GEO_PROVIDER_MAP is None:
        _load_providers()
    return _GEO_PROVIDER_MAP  # type: ignore[return-value]


def _parse_key(enum_cls: type[enum.Enum], key: object) -> enum.Enum:
    if isinstance(key, enum_cls):
        return key
    if isinstance(key, str):
        try:
            return enum_cls(key.strip().lower())
        except ValueError:
            pass
    raise UnknownProvider(key, sorted(m.value for m in enum_cls))


def get_ip_provider(key: Union[IPSource, str]) -> IPLookupProvider:
    """Instantiate the IP lookup provider for *key*."""
    source = _parse_key(IPSource, key)
    return get_ip_provider_map()[source]()


def get_geo_provider(key: Union[GeoSource, str]) -> GeoProvider:
    """Instantiate the geolocation provider for *key*."""
    source = _parse_key(GeoSource, key)
    return get_geo_provider_map()[source]()


def list_ip_sources() -> list[str]:
    return sorted(s.value for s in IPSource)


def list_geo_sources() -> list[str]:
    return sorted(s.value for s in GeoSource)


async def check_ip(
    client: httpx.AsyncClient,
    source: Union[IPSource, str],
    family: AddressFamily = AddressFamily.V4,
) -> str:
    """Return the caller's public IP according to *source*."""
    return await get_ip_provider(source).lookup(client, family)


async def geolocate_ip(
    client: httpx.AsyncClient,
    ip: str,
    source: Union[GeoSource, str],
) -> GeoRecord:
    """Geolocate *ip* with the provider named by *source*."""
    return await get_geo_provider(source).geolocate(client, ip)
