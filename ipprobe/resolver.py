"""Domain resolution over the DNS-over-HTTPS JSON API."""

from __future__ import annotations

import logging

import dns.rcode
import dns.rdatatype
import httpx

from ipprobe.client import fetch_json
from ipprobe.config import DEFAULT_RECORD_TYPE, DNS_API
from ipprobe.errors import NoRecordsFound, ParseError
from ipprobe.models import DnsAnswer, Resolution

logger = logging.getLogger(__name__)


async def query_domain(
    client: httpx.AsyncClient,
    domain: str,
    rdtype: str = DEFAULT_RECORD_TYPE,
) -> Resolution:
    """Query *domain* and return every answer record.

    Raises
    ------
    ValueError
        If *rdtype* is not a known DNS record type.
    NoRecordsFound
        If the resolver reports an error rcode or the answer list is empty.
    ParseError
        If an answer record lacks its ``data`` field.
    """
    try:
        rdtype_text = dns.rdatatype.to_text(dns.rdatatype.from_text(rdtype))
    except (dns.rdatatype.UnknownRdatatype, ValueError) as exc:
        raise ValueError(f"Unknown DNS record type: {rdtype!r}") from exc

    payload = await fetch_json(client, DNS_API, params={"name": domain, "type": rdtype_text})
    if not isinstance(payload, dict):
        raise ParseError(f"Unexpected DNS response for {domain!r}: {payload!r}")

    status = payload.get("Status", 0)
    if status:
        try:
            rcode = dns.rcode.to_text(status)
        except ValueError:
            rcode = f"rcode {status}"
        raise NoRecordsFound(domain, rcode)

    raw_answers = payload.get("Answer") or []
    if not raw_answers:
        raise NoRecordsFound(domain)

    answers = []
    for entry in raw_answers:
        if not isinstance(entry, dict) or "data" not in entry:
            raise ParseError(f"Malformed DNS answer for {domain!r}: {entry!r}")
        answers.append(
            DnsAnswer(
                name=entry.get("name", domain),
                type=int(entry.get("type", 0)),
                ttl=int(entry.get("TTL", 0)),
                data=str(entry["data"]),
            )
        )

    logger.debug("Resolved %s -> %s", domain, [a.data for a in answers])
    return Resolution(domain=domain, answers=answers)


async def resolve_domain(client: httpx.AsyncClient, domain: str) -> str:
    """Resolve *domain* and return the data of the first answer record."""
    resolution = await query_domain(client, domain)
    return resolution.address
