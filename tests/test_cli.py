import json

import httpx
import pytest
from click.testing import CliRunner

from conftest import json_response
from ipprobe import __version__
from ipprobe.cli import main

GEO_BODY = {"ip": "93.184.216.34", "city": "Norwell", "country": "US", "org": "EDGECAST"}


def _handler(request: httpx.Request) -> httpx.Response:
    host = request.url.host
    if host == "dns.google":
        name = request.url.params["name"]
        if name == "nothing.example":
            return json_response({"Status": 0})
        return json_response({
            "Status": 0,
            "Answer": [{"name": f"{name}.", "type": 1, "TTL": 60, "data": "93.184.216.34"}],
        })
    if host in ("api.ipify.org", "api64.ipify.org"):
        return json_response({"ip": "203.0.113.9"})
    if host == "httpbin.org":
        return json_response({"origin": "198.51.100.9"})
    if host in ("ipapi.co", "ipinfo.io"):
        if request.url.path.startswith("/192.0.2.66/"):
            return httpx.Response(302, headers={"location": str(request.url)})
        return json_response(dict(GEO_BODY, ip=request.url.path.split("/")[1]))
    if host == "www.baidu.com":
        raise httpx.ConnectError("unreachable", request=request)
    return httpx.Response(200, content=b"\x00")


@pytest.fixture
def requests(monkeypatch):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _handler(request)

    def fake_create_client(timeout: float = 10.0) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)

    monkeypatch.setattr("ipprobe.client.create_client", fake_create_client)
    return seen


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_version(runner) -> None:
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_resolve_then_geolocate(runner, requests) -> None:
    result = runner.invoke(main, ["resolve", "example.com"])

    assert result.exit_code == 0, result.output
    assert "Domain example.com resolved successfully" in result.output
    assert "93.184.216.34" in result.output
    assert "Norwell" in result.output
    assert [r.url.host for r in requests] == ["dns.google", "ipapi.co"]


def test_resolve_json_no_geo(runner, requests) -> None:
    result = runner.invoke(main, ["resolve", "example.com", "--no-geo", "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["resolution"]["address"] == "93.184.216.34"
    assert data["geo"] is None
    assert [r.url.host for r in requests] == ["dns.google"]


def test_resolve_without_records_is_a_user_error(runner, requests) -> None:
    result = runner.invoke(main, ["resolve", "nothing.example"])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "No DNS records found" in result.output


def test_resolve_rejects_unknown_record_type(runner, requests) -> None:
    result = runner.invoke(main, ["resolve", "example.com", "--type", "NOPE"])

    assert result.exit_code == 2
    assert requests == []


def test_resolve_rejects_out_of_range_record_type(runner, requests) -> None:
    result = runner.invoke(main, ["resolve", "example.com", "--type", "TYPE70000"])

    assert result.exit_code == 2
    assert "unknown DNS record type" in result.output
    assert requests == []


def test_myip_uses_selected_sources(runner, requests) -> None:
    result = runner.invoke(main, ["myip", "--source", "httpbin", "--geo-source", "ipinfo"])

    assert result.exit_code == 0, result.output
    assert "198.51.100.9" in result.output
    assert [r.url.host for r in requests] == ["httpbin.org", "ipinfo.io"]


def test_myip_ipv6_json(runner, requests) -> None:
    result = runner.invoke(main, ["myip", "-6", "--no-geo", "--json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"ip": "203.0.113.9", "source": "ipify", "geo": None}
    assert requests[0].url.host == "api64.ipify.org"


def test_unknown_source_is_a_user_error(runner, requests) -> None:
    result = runner.invoke(main, ["myip", "--source", "whatismyip"])

    assert result.exit_code == 1
    assert "Unknown provider" in result.output
    assert requests == []


def test_geo_json(runner, requests) -> None:
    result = runner.invoke(main, ["geo", "1.1.1.1", "--source", "ipinfo", "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["source"] == "ipinfo"
    assert data["data"]["ip"] == "1.1.1.1"


def test_speedtest_table(runner, requests) -> None:
    result = runner.invoke(main, ["speedtest"])

    assert result.exit_code == 0, result.output
    for name in ("Google", "Baidu", "Facebook", "Twitter", "Amazon", "Microsoft"):
        assert name in result.output
    assert "Access failed" in result.output
    assert "reference only" in result.output
    assert "Testing..." not in result.output


def test_speedtest_csv_to_file(runner, requests, tmp_path) -> None:
    out = tmp_path / "speed.csv"
    result = runner.invoke(main, ["speedtest", "--csv", "-o", str(out)])

    assert result.exit_code == 0, result.output
    lines = out.read_text().strip().splitlines()
    assert lines[0].startswith("name,duration_ms,success,tier")
    assert len(lines) == 7
    assert any(line.startswith("Baidu,") and ",failed," in line for line in lines)


def test_speedtest_cache_busts_every_target(runner, requests) -> None:
    result = runner.invoke(main, ["speedtest", "--json"])

    assert result.exit_code == 0, result.output
    assert len(json.loads(result.output)) == 6
    assert len(requests) == 6
    assert all("t" in r.url.params for r in requests)


def test_default_runs_speedtest_and_ip_lookup(runner, requests) -> None:
    result = runner.invoke(main, [])

    assert result.exit_code == 0, result.output
    assert "Microsoft" in result.output
    assert "203.0.113.9" in result.output
    hosts = {r.url.host for r in requests}
    assert {"api.ipify.org", "ipapi.co", "www.google.com"} <= hosts


def test_group_source_applies_to_myip(runner, requests) -> None:
    result = runner.invoke(main, ["--source", "httpbin", "myip", "--no-geo"])

    assert result.exit_code == 0, result.output
    assert "198.51.100.9" in result.output
    assert [r.url.host for r in requests] == ["httpbin.org"]


def test_group_geo_source_applies_to_subcommands(runner, requests) -> None:
    result = runner.invoke(main, ["--geo-source", "ipinfo", "resolve", "example.com"])
    assert result.exit_code == 0, result.output
    assert [r.url.host for r in requests] == ["dns.google", "ipinfo.io"]

    requests.clear()
    result = runner.invoke(main, ["--geo-source", "ipinfo", "geo", "1.1.1.1"])
    assert result.exit_code == 0, result.output
    assert [r.url.host for r in requests] == ["ipinfo.io"]


def test_subcommand_source_overrides_group(runner, requests) -> None:
    result = runner.invoke(main, ["--source", "httpbin", "--geo-source", "ipinfo",
                                  "myip", "--source", "ipify", "--geo-source", "ipapi"])

    assert result.exit_code == 0, result.output
    assert [r.url.host for r in requests] == ["api.ipify.org", "ipapi.co"]


def test_geo_redirect_loop_is_a_user_error(runner, requests) -> None:
    result = runner.invoke(main, ["geo", "192.0.2.66"])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "Traceback" not in result.output


def test_default_lookup_failure_still_shows_table(runner, requests) -> None:
    result = runner.invoke(main, ["--source", "whatismyip"])

    assert result.exit_code == 1
    assert "Microsoft" in result.output
    assert "reference only" in result.output
    assert "Unknown provider" in result.output
