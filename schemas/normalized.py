"""
Pydantic schemas for catalog records and normalized readings
"""

from pydantic import BaseModel, Field, model_validator, validator
from typing import Optional
from datetime import datetime, timezone


class StationRecord(BaseModel):
    """
    Read-only view of a catalog station.

    Built from the ORM row so the orchestrator never touches lazy attributes
    after a rollback.
    """

    id: int
    external_id: Optional[str] = None
    name: str
    latitude: float
    longitude: float
    source_name: Optional[str] = None

    @validator("external_id", pre=True)
    def clean_external_id(cls, v):
        """Strip whitespace; empty ids become None"""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    def has_valid_coordinates(self) -> bool:
        return -90.0 <= self.latitude <= 90.0 and -180.0 <= self.longitude <= 180.0

    class Config:
        from_attributes = True


class VariableRecord(BaseModel):
    """Read-only view of a variable"""

    id: int
    code: str
    unit: str
    name: Optional[str] = None

    class Config:
        from_attributes = True


class ReadingCreate(BaseModel):
    """
    Schema for one upsert into the reading table.

    Ensures:
    - The conflict key is complete
    - observed_at is timezone-aware (naive values are taken as UTC)
    - At least one of value_num / value_text is present
    """

    station_id: int = Field(..., ge=1)
    variable_id: int = Field(..., ge=1)
    observed_at: datetime
    value_num: Optional[float] = None
    value_text: Optional[str] = Field(None, max_length=500)

    @validator("observed_at")
    def ensure_utc(cls, v):
        """Treat naive timestamps as UTC"""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @model_validator(mode="after")
    def require_value(self):
        if self.value_num is None and self.value_text is None:
            raise ValueError("A reading needs a numeric or a text value")
        return self
