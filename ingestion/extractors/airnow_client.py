"""
AirNow current observation client.

One request per lookup, by ZIP code or by coordinate. AirNow returns one
entry per pollutant; the worst (highest AQI) entry represents the area.
"""

from typing import Any, Dict, List, Optional
import httpx
import logging

from ingestion.base import ProviderClient
from ingestion.result import FetchResult
from ingestion.transformers.normalizer import (
    compose_observed_at,
    format_coordinate,
    is_area_code,
)
from schemas.provider import AQIReading
from core.config import settings
from core.exceptions import MalformedUpstreamResponse

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "your_airnow_api_key_here"


def select_worst_entry(entries: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Entry with the highest AQI. On ties the first one encountered wins.

    Entries without a usable AQI (AirNow sends -1 when unavailable) are
    ignored.
    """
    worst = None
    for entry in entries:
        aqi = entry.get("AQI") if isinstance(entry, dict) else None
        if not isinstance(aqi, (int, float)) or isinstance(aqi, bool) or aqi < 0:
            continue
        if worst is None or aqi > worst["AQI"]:
            worst = entry
    return worst


class AirNowClient(ProviderClient):
    """Air quality provider client"""

    provider_name = "airnow"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        distance_miles: Optional[int] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        super().__init__(
            base_url=base_url or settings.AIRNOW_BASE_URL,
            timeout=timeout or settings.HTTP_TIMEOUT_SECONDS,
            http_client=http_client
        )
        self.api_key = api_key if api_key is not None else settings.AIRNOW_API_KEY
        self.distance_miles = distance_miles or settings.AIRNOW_DISTANCE_MILES

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and self.api_key != PLACEHOLDER_API_KEY

    async def fetch_current_by_area_code(self, area_code: str) -> FetchResult[AQIReading]:
        """
        Current AQI for a 5-digit ZIP code.

        Returns:
            FetchResult.ok(AQIReading), FetchResult.no_data when the key is
            missing, the code is invalid or AirNow has no entries, or
            FetchResult.failed on any provider error. Never raises.
        """
        if not self.is_configured:
            logger.warning("AirNow API key not configured, skipping AQI fetch")
            return FetchResult.no_data("AirNow API key not configured")

        if not is_area_code(area_code):
            logger.warning(f"Invalid AirNow area code {area_code!r}, skipping AQI fetch")
            return FetchResult.no_data(f"Invalid area code {area_code!r}")

        params = {
            "format": "application/json",
            "zipCode": area_code,
            "distance": self.distance_miles,
            "API_KEY": self.api_key
        }
        return await self._fetch(
            f"{self.base_url}/observation/zipCode/current/", params, f"zip {area_code}"
        )

    async def fetch_current_by_coordinate(self, latitude: float, longitude: float) -> FetchResult[AQIReading]:
        """Current AQI for the reporting area around a coordinate"""
        if not self.is_configured:
            logger.warning("AirNow API key not configured, skipping AQI fetch")
            return FetchResult.no_data("AirNow API key not configured")

        params = {
            "format": "application/json",
            "latitude": format_coordinate(latitude),
            "longitude": format_coordinate(longitude),
            "distance": self.distance_miles,
            "API_KEY": self.api_key
        }
        return await self._fetch(
            f"{self.base_url}/observation/latLong/current/",
            params,
            f"{params['latitude']},{params['longitude']}"
        )

    async def _fetch(self, url: str, params: Dict[str, Any], description: str) -> FetchResult[AQIReading]:

        async def lookup() -> FetchResult[AQIReading]:
            async with self._client() as client:
                data = await self._get_json(client, url, params=params)

            if not isinstance(data, list):
                raise MalformedUpstreamResponse(
                    "AirNow response is not a list",
                    context={"provider": self.provider_name, "lookup": description}
                )
            if not data:
                logger.info(f"No AirNow observations for {description}")
                return FetchResult.no_data(f"No AirNow observations for {description}")

            worst = select_worst_entry(data)
            if worst is None:
                return FetchResult.no_data(f"No AirNow entry with an AQI value for {description}")

            return FetchResult.ok(self._parse_entry(worst))

        return await self._guarded(lookup, description)

    @staticmethod
    def _parse_entry(entry: Dict[str, Any]) -> AQIReading:
        category = entry.get("Category") or {}
        return AQIReading(
            aqi=int(entry["AQI"]),
            category=category.get("Name") if isinstance(category, dict) else None,
            parameter_name=entry.get("ParameterName"),
            observed_at=compose_observed_at(entry.get("DateObserved"), entry.get("HourObserved")),
            reporting_area=entry.get("ReportingArea")
        )
