"""
Unit tests for the station catalog
"""

import pytest
from unittest.mock import AsyncMock
from ingestion.catalog import StationCatalog, seed_stations, seed_variables
from models.station import Station
from core.exceptions import CatalogUnavailable


class TestStationCatalog:
    """Test catalog reads"""

    @pytest.mark.asyncio
    async def test_list_stations_in_name_order(self, db_session, three_stations):
        db_session.add(Station(name="Alpha Ridge", external_id=None, latitude=33.5, longitude=-112.1))
        await db_session.commit()

        stations = await StationCatalog(db_session).list_stations()

        assert [s.name for s in stations] == [
            "Alpha Ridge",
            "Station 1 Sky Harbor",
            "Station 2 Tempe",
            "Station 3 South Mountain",
        ]
        assert stations[0].external_id is None
        assert stations[1].source_name == "AirNow"
        assert stations[1].latitude == pytest.approx(33.4342)

    @pytest.mark.asyncio
    async def test_variable_map(self, db_session, variable_ids):
        variable_map = await StationCatalog(db_session).variable_map()

        assert set(variable_map) == {"TEMP", "HEAT_INDEX", "AQI"}
        assert variable_map == variable_ids

    @pytest.mark.asyncio
    async def test_get_station_by_external_id(self, db_session, three_stations):
        station = await StationCatalog(db_session).get_station_by_external_id("85281")

        assert station.name == "Station 2 Tempe"
        assert await StationCatalog(db_session).get_station_by_external_id("99999") is None

    @pytest.mark.asyncio
    async def test_database_failure_is_catalog_unavailable(self):
        mock_session = AsyncMock()
        mock_session.execute.side_effect = Exception("database is down")

        with pytest.raises(CatalogUnavailable):
            await StationCatalog(mock_session).list_stations()

        with pytest.raises(CatalogUnavailable):
            await StationCatalog(mock_session).variable_map()


class TestSeeding:
    """Test catalog bootstrap helpers"""

    @pytest.mark.asyncio
    async def test_seed_variables_is_idempotent(self, db_session):
        first = await seed_variables(db_session)
        second = await seed_variables(db_session)

        assert first == second
        variables = await StationCatalog(db_session).list_variables()
        assert [(v.code, v.unit) for v in variables] == [("AQI", "AQI"), ("HEAT_INDEX", "°F"), ("TEMP", "°F")]

    @pytest.mark.asyncio
    async def test_seed_stations_skips_known_names(self, db_session):
        stations = [
            {"name": "Tempe", "external_id": "85281", "latitude": 33.4255, "longitude": -111.94, "source": "AirNow"},
            {"name": "South Mountain Park", "external_id": "SMTN1", "latitude": 33.34, "longitude": -112.06},
        ]

        assert await seed_stations(db_session, stations) == 2
        assert await seed_stations(db_session, stations) == 0

        records = await StationCatalog(db_session).list_stations()
        assert [(s.name, s.source_name) for s in records] == [
            ("South Mountain Park", None),
            ("Tempe", "AirNow"),
        ]
