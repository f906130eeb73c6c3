"""
Normalized provider payloads
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class Observation(BaseModel):
    """
    Latest weather observation from the nearest NWS station.

    temperature and heat_index are in °F; None means the provider reported
    no value for that field.
    """

    observed_at: datetime
    temperature: Optional[float] = None
    heat_index: Optional[float] = None
    provider_station_id: Optional[str] = None

    @property
    def has_values(self) -> bool:
        return self.temperature is not None or self.heat_index is not None


class AQIReading(BaseModel):
    """Representative (worst pollutant) AirNow reading for an area"""

    aqi: int = Field(..., ge=0)
    category: Optional[str] = None
    parameter_name: Optional[str] = None
    observed_at: datetime
    reporting_area: Optional[str] = None
