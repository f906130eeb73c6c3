"""
National Weather Service (api.weather.gov) client.

Resolves a coordinate to its nearest observation station and returns the
latest temperature / heat index in °F:

    /points/{lat},{lon}  ->  observationStations URL
    observationStations  ->  candidate stations, nearest first
    {station}/observations/latest
"""

from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import httpx
import logging

from ingestion.base import ProviderClient
from ingestion.result import FetchResult
from ingestion.transformers.normalizer import (
    format_point,
    measurement_value,
    parse_timestamp,
    to_fahrenheit,
)
from schemas.provider import Observation
from core.config import settings
from core.exceptions import MalformedUpstreamResponse

logger = logging.getLogger(__name__)


class NWSClient(ProviderClient):
    """
    Weather provider client.

    Only the first (nearest) candidate station is used. If it has stale or
    missing data there is no fallback to the next candidate.
    """

    provider_name = "nws"

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        super().__init__(
            base_url=base_url or settings.NWS_BASE_URL,
            timeout=timeout or settings.HTTP_TIMEOUT_SECONDS,
            headers={
                "User-Agent": user_agent or settings.NWS_USER_AGENT,
                "Accept": "application/geo+json"
            },
            http_client=http_client
        )

    async def fetch_latest_by_coordinate(self, latitude: float, longitude: float) -> FetchResult[Observation]:
        """
        Latest observation from the station nearest to a coordinate.

        Returns:
            FetchResult.ok(Observation), FetchResult.no_data when the point
            has no nearby stations, or FetchResult.failed on any provider
            error. Never raises.
        """
        point = format_point(latitude, longitude)

        async def lookup() -> FetchResult[Observation]:
            async with self._client() as client:
                stations = await self._observation_stations(client, point)
                if not stations:
                    logger.info(f"No NWS observation stations near {point}")
                    return FetchResult.no_data(f"No observation stations near {point}")

                nearest = stations[0]
                station_url = nearest.get("id")
                if not station_url:
                    raise MalformedUpstreamResponse(
                        "Observation station feature has no id",
                        context={"provider": self.provider_name, "point": point}
                    )

                station_identifier = (nearest.get("properties") or {}).get("stationIdentifier")
                data = await self._get_json(client, f"{station_url}/observations/latest")
                return FetchResult.ok(self._parse_observation(data, station_identifier or station_url))

        return await self._guarded(lookup, point)

    async def fetch_latest_by_station(self, station_id: str) -> FetchResult[Observation]:
        """Latest observation for a known NWS station identifier (e.g. KPHX)"""

        async def lookup() -> FetchResult[Observation]:
            async with self._client() as client:
                data = await self._get_json(
                    client, f"{self.base_url}/stations/{station_id}/observations/latest"
                )
                return FetchResult.ok(self._parse_observation(data, station_id))

        return await self._guarded(lookup, station_id)

    async def get_observation_stations(self, latitude: float, longitude: float) -> List[Dict[str, Any]]:
        """
        Candidate observation stations for a coordinate, nearest first.

        Unlike the fetch methods this raises the typed upstream errors.
        """
        async with self._client() as client:
            return await self._observation_stations(client, format_point(latitude, longitude))

    async def _observation_stations(self, client: httpx.AsyncClient, point: str) -> List[Dict[str, Any]]:
        data = await self._get_json(client, f"{self.base_url}/points/{point}")

        properties = data.get("properties") if isinstance(data, dict) else None
        if not isinstance(properties, dict):
            raise MalformedUpstreamResponse(
                "Point response has no properties",
                context={"provider": self.provider_name, "point": point}
            )

        stations_url = properties.get("observationStations")
        if not stations_url:
            return []

        stations = await self._get_json(client, stations_url)
        features = stations.get("features") if isinstance(stations, dict) else None
        if features is None:
            return []
        if not isinstance(features, list):
            raise MalformedUpstreamResponse(
                "Station list features is not a list",
                context={"provider": self.provider_name, "url": stations_url}
            )
        return features

    def _parse_observation(self, data: Any, station_id: Optional[str]) -> Observation:
        properties = data.get("properties") if isinstance(data, dict) else None
        if not isinstance(properties, dict):
            raise MalformedUpstreamResponse(
                "Observation response has no properties",
                context={"provider": self.provider_name, "station": station_id}
            )

        observed_at = parse_timestamp(properties.get("timestamp"))
        if observed_at is None:
            # Provider omitted the timestamp: fall back to fetch time
            observed_at = datetime.now(timezone.utc)

        temperature, temperature_unit = measurement_value(properties, "temperature")
        heat_index, heat_index_unit = measurement_value(properties, "heatIndex")

        return Observation(
            observed_at=observed_at,
            temperature=to_fahrenheit(temperature, temperature_unit),
            heat_index=to_fahrenheit(heat_index, heat_index_unit),
            provider_station_id=station_id
        )
