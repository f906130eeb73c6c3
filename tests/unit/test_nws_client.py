"""
Unit tests for the NWS weather client
"""

import pytest
import httpx
from ingestion.extractors.nws_client import NWSClient
from ingestion.result import FetchStatus
from core.exceptions import MalformedUpstreamResponse, UpstreamUnavailable
from conftest import (
    NWS_BASE_URL,
    json_response,
    nws_observation_payload,
    nws_point_payload,
    nws_stations_payload,
)


def make_client(handler) -> NWSClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NWSClient(base_url=NWS_BASE_URL, user_agent="(test, test@example.com)", timeout=5.0, http_client=http_client)


class TestFetchLatestByCoordinate:
    """Test the point -> stations -> observation chain"""

    @pytest.mark.asyncio
    async def test_success(self, mock_nws_handler):
        client = make_client(mock_nws_handler)

        result = await client.fetch_latest_by_coordinate(33.4342, -112.0116)

        assert result.status == FetchStatus.OK
        assert result.value.temperature == pytest.approx(104.0)
        assert result.value.heat_index == pytest.approx(107.6)
        assert result.value.provider_station_id == "KPHX"
        assert result.value.observed_at.isoformat() == "2024-06-01T15:51:00+00:00"

    @pytest.mark.asyncio
    async def test_coordinates_rounded_and_headers_sent(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.url.path.startswith("/points/"):
                return json_response(nws_point_payload("33.4484", "-111.9400"))
            if request.url.path.endswith("/stations"):
                return json_response(nws_stations_payload("KPHX"))
            return json_response(nws_observation_payload())

        client = make_client(handler)
        await client.fetch_latest_by_coordinate(33.44842, -111.93997)

        assert seen[0].url.path == "/points/33.4484,-111.9400"
        assert len(seen) == 3
        for request in seen:
            assert request.headers["User-Agent"] == "(test, test@example.com)"
            assert request.headers["Accept"] == "application/geo+json"

    @pytest.mark.asyncio
    async def test_uses_first_station_only(self):
        observed = []

        def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            if path.startswith("/points/"):
                return json_response(nws_point_payload("33.4342", "-112.0116"))
            if path.endswith("/stations"):
                return json_response(nws_stations_payload("KPHX", "KCHD", "KSDL"))
            observed.append(path)
            # Nearest station has no temperature; no fallback expected
            return json_response(nws_observation_payload(temperature_c=None, heat_index_c=None))

        client = make_client(handler)
        result = await client.fetch_latest_by_coordinate(33.4342, -112.0116)

        assert observed == ["/stations/KPHX/observations/latest"]
        assert result.is_ok
        assert result.value.temperature is None
        assert result.value.heat_index is None

    @pytest.mark.asyncio
    async def test_empty_station_list_is_no_data(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.startswith("/points/"):
                return json_response(nws_point_payload("33.4342", "-112.0116"))
            return json_response({"features": []})

        client = make_client(handler)
        result = await client.fetch_latest_by_coordinate(33.4342, -112.0116)

        assert result.status == FetchStatus.NO_DATA
        assert result.value is None
        assert result.error is None

    @pytest.mark.asyncio
    async def test_missing_heat_index_keeps_temperature(self):
        def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            if path.startswith("/points/"):
                return json_response(nws_point_payload("33.4342", "-112.0116"))
            if path.endswith("/stations"):
                return json_response(nws_stations_payload("KPHX"))
            return json_response({"properties": {
                "timestamp": "2024-06-01T15:51:00+00:00",
                "temperature": {"unitCode": "wmoUnit:degC", "value": 0},
            }})

        client = make_client(handler)
        result = await client.fetch_latest_by_coordinate(33.4342, -112.0116)

        assert result.value.temperature == 32.0
        assert result.value.heat_index is None

    @pytest.mark.asyncio
    async def test_missing_timestamp_falls_back_to_fetch_time(self):
        def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            if path.startswith("/points/"):
                return json_response(nws_point_payload("33.4342", "-112.0116"))
            if path.endswith("/stations"):
                return json_response(nws_stations_payload("KPHX"))
            return json_response(nws_observation_payload(timestamp=None))

        client = make_client(handler)
        result = await client.fetch_latest_by_coordinate(33.4342, -112.0116)

        assert result.is_ok
        assert result.value.observed_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_connection_error_is_failed_result(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        client = make_client(handler)
        result = await client.fetch_latest_by_coordinate(33.4342, -112.0116)

        assert result.status == FetchStatus.FAILED
        assert isinstance(result.error, UpstreamUnavailable)

    @pytest.mark.asyncio
    async def test_timeout_is_failed_result(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(handler)
        result = await client.fetch_latest_by_coordinate(33.4342, -112.0116)

        assert result.is_failed
        assert isinstance(result.error, UpstreamUnavailable)
        assert result.error.context["timeout"] == 5.0

    @pytest.mark.asyncio
    async def test_server_error_is_failed_result(self):
        client = make_client(lambda request: httpx.Response(503, text="Service Unavailable"))

        result = await client.fetch_latest_by_coordinate(33.4342, -112.0116)

        assert result.is_failed
        assert result.error.context["status_code"] == 503

    @pytest.mark.asyncio
    async def test_point_redirect_to_canonical_url_is_followed(self, mock_nws_handler):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            if request.url.path == "/points/33.4255,-111.9400":
                return httpx.Response(301, headers={"Location": f"{NWS_BASE_URL}/points/33.4255,-111.94"})
            return mock_nws_handler(request)

        client = make_client(handler)
        result = await client.fetch_latest_by_coordinate(33.4255, -111.94)

        assert result.status == FetchStatus.OK
        assert result.value.temperature == pytest.approx(104.0)
        assert seen[:2] == ["/points/33.4255,-111.9400", "/points/33.4255,-111.94"]

    @pytest.mark.asyncio
    async def test_redirect_without_location_is_failed_result(self):
        client = make_client(lambda request: httpx.Response(302))

        result = await client.fetch_latest_by_coordinate(33.4342, -112.0116)

        assert result.is_failed
        assert isinstance(result.error, UpstreamUnavailable)
        assert result.error.context["status_code"] == 302

    @pytest.mark.asyncio
    async def test_non_json_body_is_malformed(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))

        result = await client.fetch_latest_by_coordinate(33.4342, -112.0116)

        assert result.is_failed
        assert isinstance(result.error, MalformedUpstreamResponse)

    @pytest.mark.asyncio
    async def test_point_without_properties_is_malformed(self):
        client = make_client(lambda request: json_response({"title": "weird"}))

        result = await client.fetch_latest_by_coordinate(33.4342, -112.0116)

        assert result.is_failed
        assert isinstance(result.error, MalformedUpstreamResponse)


class TestStationLookups:
    """Test station-oriented helpers"""

    @pytest.mark.asyncio
    async def test_fetch_latest_by_station(self, mock_nws_handler):
        client = make_client(mock_nws_handler)

        result = await client.fetch_latest_by_station("KPHX")

        assert result.is_ok
        assert result.value.provider_station_id == "KPHX"
        assert result.value.temperature == pytest.approx(104.0)

    @pytest.mark.asyncio
    async def test_get_observation_stations(self, mock_nws_handler):
        client = make_client(mock_nws_handler)

        stations = await client.get_observation_stations(33.4342, -112.0116)

        assert [s["properties"]["stationIdentifier"] for s in stations] == ["KPHX", "KCHD"]

    @pytest.mark.asyncio
    async def test_get_observation_stations_raises(self):
        client = make_client(lambda request: httpx.Response(500))

        with pytest.raises(UpstreamUnavailable):
            await client.get_observation_stations(33.4342, -112.0116)
