"""
Pytest configuration and fixtures
"""

import json
import pytest
import pytest_asyncio
import httpx
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from typing import AsyncGenerator

from models.base import Base
from models.station import Source, Station
from models.variable import Variable
from models.reading import Reading
from ingestion.catalog import seed_variables

# In-memory database shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

NWS_BASE_URL = "https://api.weather.test"
AIRNOW_BASE_URL = "https://airnow.test/aq"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the test engine"""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def variable_ids(db_session):
    """Seeded TEMP / HEAT_INDEX / AQI variables"""
    return await seed_variables(db_session)


@pytest_asyncio.fixture
async def three_stations(db_session, variable_ids):
    """Three catalog stations; names sort in id order"""
    source = Source(name="AirNow")
    stations = [
        Station(name="Station 1 Sky Harbor", external_id="85034", latitude=33.4342, longitude=-112.0116, source=source),
        Station(name="Station 2 Tempe", external_id="85281", latitude=33.4255, longitude=-111.9400, source=source),
        Station(name="Station 3 South Mountain", external_id="SMTN1", latitude=33.3400, longitude=-112.0600),
    ]
    db_session.add_all(stations)
    await db_session.commit()
    return stations


def json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload), headers={"Content-Type": "application/json"})


def nws_point_payload(lat: str, lon: str) -> dict:
    return {
        "properties": {
            "observationStations": f"{NWS_BASE_URL}/gridpoints/PSR/{lat},{lon}/stations"
        }
    }


def nws_stations_payload(*identifiers: str) -> dict:
    return {
        "features": [
            {
                "id": f"{NWS_BASE_URL}/stations/{identifier}",
                "properties": {"stationIdentifier": identifier}
            }
            for identifier in identifiers
        ]
    }


def nws_observation_payload(
    temperature_c=40.0,
    heat_index_c=42.0,
    timestamp="2024-06-01T15:51:00+00:00"
) -> dict:
    properties = {
        "temperature": {"unitCode": "wmoUnit:degC", "value": temperature_c},
        "heatIndex": {"unitCode": "wmoUnit:degC", "value": heat_index_c},
    }
    if timestamp is not None:
        properties["timestamp"] = timestamp
    return {"properties": properties}


def airnow_entry(aqi, parameter="O3", category="Moderate", date="2024-06-01 ", hour=15) -> dict:
    return {
        "DateObserved": date,
        "HourObserved": hour,
        "LocalTimeZone": "MST",
        "ReportingArea": "Phoenix",
        "StateCode": "AZ",
        "ParameterName": parameter,
        "AQI": aqi,
        "Category": {"Number": 2, "Name": category},
    }


@pytest.fixture
def mock_nws_handler():
    """MockTransport handler serving one NWS station (KPHX) for any point"""

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith("/points/"):
            lat, lon = path.split("/points/")[1].split(",")
            return json_response(nws_point_payload(lat, lon))
        if path.endswith("/stations"):
            return json_response(nws_stations_payload("KPHX", "KCHD"))
        if path.endswith("/observations/latest"):
            return json_response(nws_observation_payload())
        return httpx.Response(404)

    return handler


@pytest.fixture
def mock_airnow_handler():
    """MockTransport handler returning two pollutant entries for any ZIP"""

    def handler(request: httpx.Request) -> httpx.Response:
        return json_response([
            airnow_entry(42, parameter="PM2.5", category="Good"),
            airnow_entry(87, parameter="O3", category="Moderate"),
        ])

    return handler
