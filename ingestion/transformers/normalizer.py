"""
Unit and geo normalization for provider payloads.

Pure functions only: no I/O, no logging side effects.
"""

from typing import Any, Dict, Optional, Tuple
from datetime import datetime, timezone
import re

from core.exceptions import DataFormatError

# Lookup coordinates are sent to providers at this precision
COORDINATE_PRECISION = 4

AREA_CODE_PATTERN = re.compile(r"[0-9]{5}")


def celsius_to_fahrenheit(celsius: float) -> float:
    """F = C * 9/5 + 32"""
    return celsius * 9 / 5 + 32


def to_fahrenheit(value: Optional[float], unit_code: Optional[str] = None) -> Optional[float]:
    """
    Convert a provider temperature to °F.

    NWS reports `wmoUnit:degC`; values already in degF pass through and
    Kelvin is converted. A missing unit is taken as Celsius.
    """
    if value is None:
        return None

    unit = (unit_code or "").strip().lower()
    if "degf" in unit:
        return float(value)
    if unit.endswith(":k") or unit.endswith("kelvin"):
        return celsius_to_fahrenheit(float(value) - 273.15)
    return celsius_to_fahrenheit(float(value))


def format_coordinate(value: float) -> str:
    """Format a coordinate to the fixed lookup precision (33.44842 -> '33.4484')"""
    return f"{float(value):.{COORDINATE_PRECISION}f}"


def format_point(latitude: float, longitude: float) -> str:
    return f"{format_coordinate(latitude)},{format_coordinate(longitude)}"


def measurement_value(properties: Dict[str, Any], field: str) -> Tuple[Optional[float], Optional[str]]:
    """
    Read a `{"value": ..., "unitCode": ...}` measurement from an NWS payload.

    Returns (value, unit_code). An absent field or a null value gives a None
    value, never 0.
    """
    raw = properties.get(field)
    if raw is None:
        return None, None

    if isinstance(raw, dict):
        unit_code = raw.get("unitCode")
        raw_value = raw.get("value")
    else:
        unit_code = None
        raw_value = raw

    return _parse_float(raw_value), unit_code


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp to an aware UTC datetime, or None"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def compose_observed_at(date_observed: Any, hour_observed: Any) -> datetime:
    """
    Build the observation instant from AirNow's DateObserved / HourObserved.

    AirNow sends the date with a trailing space ("2024-06-01 ") and the hour
    as an integer, so both are cleaned before composing
    `YYYY-MM-DDTHH:00:00Z`.
    """
    try:
        date_part = str(date_observed).strip()
        hour = int(str(hour_observed).strip())
        composed = f"{date_part}T{hour:02d}:00:00Z"
        return datetime.strptime(composed, "%Y-%m-%dT%H:%M:%SZ").replace(tzinfo=timezone.utc)
    except (TypeError, ValueError) as e:
        raise DataFormatError(
            "Unparseable AirNow observation time",
            context={"date_observed": date_observed, "hour_observed": hour_observed},
            original_exception=e
        )


def is_area_code(value: Optional[str]) -> bool:
    """True for exactly five ASCII digits (US ZIP code)"""
    if not value:
        return False
    return AREA_CODE_PATTERN.fullmatch(value) is not None


def _parse_float(value: Any) -> Optional[float]:
    """Safely parse float value"""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None
