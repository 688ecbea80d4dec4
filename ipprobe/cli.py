"""CLI entry point and orchestration for ipprobe."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import Any, Coroutine, Optional

import click
import dns.rdatatype

from ipprobe import __version__
from ipprobe.config import DEFAULT_GEO_SOURCE, DEFAULT_IP_SOURCE, DEFAULT_RECORD_TYPE, DEFAULT_TIMEOUT
from ipprobe.errors import IPProbeError
from ipprobe.models import AddressFamily, GeoRecord


def _configure_logging(verbose: bool) -> None:
    from rich.logging import RichHandler

    from ipprobe.display import err_console

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )
    # httpx/httpcore are chatty at DEBUG.
    for name in ("httpx", "httpcore", "hpack"):
        logging.getLogger(name).setLevel(logging.INFO if verbose else logging.WARNING)


def _validate_rdtype(ctx: click.Context, param: click.Parameter, value: str) -> str:
    try:
        return dns.rdatatype.to_text(dns.rdatatype.from_text(value))
    except (dns.rdatatype.UnknownRdatatype, ValueError):
        raise click.BadParameter(f"unknown DNS record type {value!r}")


def _from_group(ctx: click.Context, key: str, value: Optional[str]) -> str:
    """Subcommand option if given, else the group-level option of the same name."""
    return ctx.obj[key] if value is None else value


def _run(coro: Coroutine[Any, Any, int]) -> None:
    """Run *coro* and exit with its status, handling Ctrl-C."""
    try:
        status = asyncio.run(coro)
    except KeyboardInterrupt:
        from ipprobe.display import console
        console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(130)
    if status:
        sys.exit(status)


def _warn_on_proxy() -> None:
    for var in ("HTTP_PROXY", "HTTPS_PROXY", "http_proxy", "https_proxy"):
        if os.environ.get(var):
            from ipprobe.display import render_warning
            render_warning(f"Proxy detected ({var}={os.environ[var]}); latency reflects the proxy, not the target")
            break


@click.group(invoke_without_command=True)
@click.option("-t", "--timeout", default=DEFAULT_TIMEOUT, help="Request timeout in seconds", show_default=True)
@click.option("--source", default=DEFAULT_IP_SOURCE, help="Public IP source (ipify, httpbin)", show_default=True)
@click.option("--geo-source", default=DEFAULT_GEO_SOURCE, help="Geolocation source (ipapi, ipinfo)", show_default=True)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, timeout: float, source: str, geo_source: str, verbose: bool) -> None:
    """ipprobe — resolve domains, find your public IP, geolocate it, probe latency.

    Without a subcommand, runs the speed test while looking up and
    geolocating your public IPv4 address.
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["timeout"] = timeout
    ctx.obj["verbose"] = verbose
    ctx.obj["source"] = source
    ctx.obj["geo_source"] = geo_source

    if ctx.invoked_subcommand is None:
        _warn_on_proxy()
        _run(_overview(timeout, source, geo_source))


@main.command()
@click.argument("domain")
@click.option("--type", "rdtype", default=DEFAULT_RECORD_TYPE, callback=_validate_rdtype,
              help="DNS record type to query", show_default=True)
@click.option("--geo-source", default=None, help="Geolocation source (ipapi, ipinfo) [default: group --geo-source]")
@click.option("--no-geo", is_flag=True, help="Skip geolocation of the resolved IP")
@click.option("--json", "json_output", is_flag=True, help="Output JSON to stdout")
@click.pass_context
def resolve(ctx: click.Context, domain: str, rdtype: str, geo_source: Optional[str], no_geo: bool, json_output: bool) -> None:
    """Resolve DOMAIN over DNS-over-HTTPS, then geolocate the address."""
    geo_source = _from_group(ctx, "geo_source", geo_source)
    _run(_resolve(ctx.obj["timeout"], domain, rdtype, geo_source, no_geo, json_output, ctx.obj["verbose"]))


@main.command()
@click.option("-6", "--ipv6", is_flag=True, help="Ask for the IPv6 address (ipify only)")
@click.option("--source", default=None, help="Public IP source (ipify, httpbin) [default: group --source]")
@click.option("--geo-source", default=None, help="Geolocation source (ipapi, ipinfo) [default: group --geo-source]")
@click.option("--no-geo", is_flag=True, help="Skip geolocation")
@click.option("--json", "json_output", is_flag=True, help="Output JSON to stdout")
@click.pass_context
def myip(ctx: click.Context, ipv6: bool, source: Optional[str], geo_source: Optional[str], no_geo: bool, json_output: bool) -> None:
    """Show your public IP address, then geolocate it."""
    family = AddressFamily.V6 if ipv6 else AddressFamily.V4
    source = _from_group(ctx, "source", source)
    geo_source = _from_group(ctx, "geo_source", geo_source)
    _run(_myip(ctx.obj["timeout"], family, source, geo_source, no_geo, json_output))


@main.command()
@click.argument("ip")
@click.option("--source", default=None, help="Geolocation source (ipapi, ipinfo) [default: group --geo-source]")
@click.option("--json", "json_output", is_flag=True, help="Output JSON to stdout")
@click.pass_context
def geo(ctx: click.Context, ip: str, source: Optional[str], json_output: bool) -> None:
    """Geolocate IP."""
    source = _from_group(ctx, "geo_source", source)
    _run(_geo(ctx.obj["timeout"], ip, source, json_output))


@main.command()
@click.option("--json", "json_output", is_flag=True, help="Output JSON to stdout")
@click.option("--csv", "csv_output", is_flag=True, help="Output CSV to stdout")
@click.option("-o", "--output", default=None, help="Write results to file")
@click.pass_context
def speedtest(ctx: click.Context, json_output: bool, csv_output: bool, output: Optional[str]) -> None:
    """Probe latency to a fixed set of popular sites."""
    if not json_output and not csv_output:
        _warn_on_proxy()
    _run(_speedtest(ctx.obj["timeout"], json_output, csv_output, output))


# ── Async flows ───────────────────────────────────────────────────────


async def _resolve(
    timeout: float,
    domain: str,
    rdtype: str,
    geo_source: str,
    no_geo: bool,
    json_output: bool,
    verbose: bool,
) -> int:
    from ipprobe.client import create_client
    from ipprobe.display import render_error, render_geo, render_resolution, render_warning
    from ipprobe.providers import geolocate_ip
    from ipprobe.resolver import query_domain

    try:
        async with create_client(timeout) as client:
            resolution = await query_domain(client, domain, rdtype)
            if not json_output:
                render_resolution(resolution, verbose=verbose)

            record: Optional[GeoRecord] = None
            ip = resolution.ip_address
            if not no_geo:
                if ip is None:
                    render_warning(f"No A/AAAA record for {domain}; skipping geolocation")
                else:
                    record = await geolocate_ip(client, ip, geo_source)
    except IPProbeError as exc:
        render_error(str(exc))
        return 1

    if json_output:
        _emit_json({"resolution": resolution, "geo": record})
    elif record is not None:
        render_geo(record)
    return 0


async def _myip(
    timeout: float,
    family: AddressFamily,
    source: str,
    geo_source: str,
    no_geo: bool,
    json_output: bool,
) -> int:
    from ipprobe.client import create_client
    from ipprobe.display import render_error, render_geo, render_ip
    from ipprobe.providers import check_ip, geolocate_ip

    try:
        async with create_client(timeout) as client:
            ip = await check_ip(client, source, family)
            record = None if no_geo else await geolocate_ip(client, ip, geo_source)
    except IPProbeError as exc:
        render_error(str(exc))
        return 1

    if json_output:
        _emit_json({"ip": ip, "source": source, "geo": record})
        return 0

    render_ip(ip, source)
    if record is not None:
        render_geo(record)
    return 0


async def _geo(timeout: float, ip: str, source: str, json_output: bool) -> int:
    from ipprobe.client import create_client
    from ipprobe.display import render_error, render_geo
    from ipprobe.providers import geolocate_ip

    try:
        async with create_client(timeout) as client:
            record = await geolocate_ip(client, ip, source)
    except IPProbeError as exc:
        render_error(str(exc))
        return 1

    if json_output:
        _emit_json(record)
    else:
        render_geo(record)
    return 0


async def _speedtest(timeout: float, json_output: bool, csv_output: bool, output: Optional[str]) -> int:
    from ipprobe.client import create_client
    from ipprobe.config import SPEED_TEST_TARGETS
    from ipprobe.display import SpeedTestTracker, console
    from ipprobe.export import export_csv, export_json, write_to_file
    from ipprobe.probe import launch_probes

    machine = json_output or csv_output
    tracker = SpeedTestTracker(SPEED_TEST_TARGETS, live=not machine and console.is_terminal)

    if not machine:
        tracker.start()
    try:
        async with create_client(timeout) as client:
            run = launch_probes(client, tracker.update, SPEED_TEST_TARGETS)
            await run.wait()
    finally:
        if not machine:
            tracker.finish()

    results = tracker.settled
    if machine:
        content = export_json(results) if json_output else export_csv(results)
        if output:
            write_to_file(content, output)
            console.print(f"[dim]Results written to {output}[/dim]")
        else:
            click.echo(content)
    elif output:
        write_to_file(export_json(results), output)
        console.print(f"\n[dim]Results written to {output}[/dim]")
    return 0


async def _overview(timeout: float, source: str, geo_source: str) -> int:
    """Speed test and public IP lookup side by side."""
    from ipprobe.client import create_client
    from ipprobe.config import SPEED_TEST_TARGETS
    from ipprobe.display import SpeedTestTracker, console, render_error, render_geo, render_ip
    from ipprobe.probe import launch_probes
    from ipprobe.providers import check_ip, geolocate_ip

    async def lookup(client) -> tuple[str, GeoRecord]:
        ip = await check_ip(client, source, AddressFamily.V4)
        return ip, await geolocate_ip(client, ip, geo_source)

    tracker = SpeedTestTracker(SPEED_TEST_TARGETS, live=console.is_terminal)
    tracker.start()
    try:
        try:
            async with create_client(timeout) as client:
                run = launch_probes(client, tracker.update, SPEED_TEST_TARGETS)
                lookup_task = asyncio.create_task(lookup(client))
                try:
                    await run.wait()
                    ip, record = await lookup_task
                finally:
                    run.cancel()
        finally:
            tracker.finish()
    except IPProbeError as exc:
        render_error(str(exc))
        return 1

    console.print()
    render_ip(ip, source)
    render_geo(record)
    return 0


def _emit_json(obj: Any) -> None:
    from ipprobe.export import export_json
    click.echo(export_json(obj))


if __name__ == "__main__":
    main()
