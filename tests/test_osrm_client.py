import asyncio

import httpx
import pytest

from flexroute.services.routing import osrm_client
from flexroute.services.routing.errors import OracleFailure
from flexroute.services.routing.osrm_client import OSRMClient

ORIGIN = (21.5, 39.2)
DESTINATION = (21.55, 39.25)


def _lookup(handler, origin=ORIGIN, destination=DESTINATION):
    async def run():
        transport = httpx.MockTransport(handler)
        async with httpx.AsyncClient(transport=transport) as http_client:
            client = OSRMClient(base_url="http://osrm.test/", profile="driving", client=http_client)
            return await client.lookup(origin, destination)

    return asyncio.run(run())


def test_lookup_reads_first_leg():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        return httpx.Response(
            200,
            json={
                "code": "Ok",
                "routes": [{"legs": [{"distance": 1234.5, "duration": 321.0}]}],
            },
        )

    leg = _lookup(handler)

    assert leg.distance == 1234.5
    assert leg.duration == 321.0
    assert seen["url"].path == "/route/v1/driving/39.2,21.5;39.25,21.55"
    assert seen["url"].params["alternatives"] == "false"


def test_lookup_makes_one_request_per_call():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url)
        return httpx.Response(200, json={"code": "Ok", "routes": [{"legs": [{"distance": 1, "duration": 1}]}]})

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            client = OSRMClient(base_url="http://osrm.test", client=http_client)
            await client.lookup(ORIGIN, DESTINATION)
            await client.lookup(ORIGIN, DESTINATION)

    asyncio.run(run())
    assert len(calls) == 2


def test_no_route_becomes_oracle_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"code": "NoRoute", "message": "Impossible route between points"})

    with pytest.raises(OracleFailure) as excinfo:
        _lookup(handler)

    assert excinfo.value.reason == "NoRoute: Impossible route between points"
    assert excinfo.value.origin == ORIGIN
    assert excinfo.value.destination == DESTINATION


def test_non_ok_code_in_success_body_becomes_oracle_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": "NoSegment", "message": "Could not find a matching segment"})

    with pytest.raises(OracleFailure) as excinfo:
        _lookup(handler)
    assert "matching segment" in excinfo.value.reason


def test_server_error_is_not_retried():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503, text="unavailable")

    with pytest.raises(OracleFailure) as excinfo:
        _lookup(handler)
    assert excinfo.value.reason == "HTTP 503"
    assert len(calls) == 1


def test_network_error_becomes_oracle_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(OracleFailure) as excinfo:
        _lookup(handler)
    assert "Failed to connect" in excinfo.value.reason


def test_timeout_becomes_oracle_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(OracleFailure) as excinfo:
        _lookup(handler)
    assert excinfo.value.reason == "OSRM request timed out"


def test_missing_legs_becomes_oracle_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": "Ok", "routes": []})

    with pytest.raises(OracleFailure):
        _lookup(handler)


def test_invalid_json_becomes_oracle_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>proxy error</html>")

    with pytest.raises(OracleFailure):
        _lookup(handler)


def test_missing_base_url_is_rejected(monkeypatch):
    monkeypatch.setattr(osrm_client.settings, "osrm_base_url", None)
    with pytest.raises(ValueError):
        OSRMClient()


def test_check_health_false_without_base_url(monkeypatch):
    monkeypatch.setattr(osrm_client.settings, "osrm_base_url", None)
    assert asyncio.run(osrm_client.check_health()) is False


def test_check_health_reports_failures(monkeypatch):
    class FailingClient:
        def __init__(self, **kwargs):
            pass

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info):
            return None

        async def lookup(self, origin, destination):
            raise OracleFailure("unreachable")

    monkeypatch.setattr(osrm_client, "OSRMClient", FailingClient)
    assert asyncio.run(osrm_client.check_health("http://osrm.test")) is False


@pytest.mark.parametrize(
    "leg_body",
    [
        '{"distance": NaN, "duration": -5}',
        '{"distance": 120.0, "duration": -5}',
        '{"distance": Infinity, "duration": 30.0}',
    ],
)
def test_invalid_leg_values_become_oracle_failure(leg_body):
    def handler(request: httpx.Request) -> httpx.Response:
        body = '{"code": "Ok", "routes": [{"legs": [' + leg_body + "]}]}"
        return httpx.Response(200, content=body, headers={"content-type": "application/json"})

    with pytest.raises(OracleFailure) as excinfo:
        _lookup(handler)
    assert excinfo.value.reason == "OSRM returned an invalid leg metric"
