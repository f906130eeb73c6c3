"""
Station catalog: the station list and variable map a run starts from
"""

from typing import Dict, Iterable, List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from models.base import VARIABLE_UNITS, VariableCode
from models.station import Source, Station
from models.variable import Variable
from schemas.normalized import StationRecord, VariableRecord
from core.exceptions import CatalogUnavailable
import logging

logger = logging.getLogger(__name__)

VARIABLE_NAMES = {
    VariableCode.TEMP: "Air temperature",
    VariableCode.HEAT_INDEX: "Heat index",
    VariableCode.AQI: "Air quality index",
}


class StationCatalog:
    """
    Read access to stations and variables.

    Stations come back in a stable order (name, then id) so a run walks
    them the same way every time.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def list_stations(self) -> List[StationRecord]:
        try:
            result = await self.db.execute(
                select(Station)
                .options(selectinload(Station.source))
                .order_by(Station.name, Station.id)
            )
            stations = result.scalars().all()
        except Exception as e:
            raise CatalogUnavailable(
                "Failed to load station list",
                context={"operation": "SELECT", "table_name": "station"},
                original_exception=e
            )

        return [self._to_record(station) for station in stations]

    async def list_variables(self) -> List[VariableRecord]:
        try:
            result = await self.db.execute(select(Variable).order_by(Variable.code))
            variables = result.scalars().all()
        except Exception as e:
            raise CatalogUnavailable(
                "Failed to load variables",
                context={"operation": "SELECT", "table_name": "variable"},
                original_exception=e
            )

        return [VariableRecord.model_validate(variable) for variable in variables]

    async def variable_map(self) -> Dict[str, int]:
        """Variable code -> variable id"""
        return {variable.code: variable.id for variable in await self.list_variables()}

    async def get_station_by_external_id(self, external_id: str) -> Optional[StationRecord]:
        try:
            result = await self.db.execute(
                select(Station)
                .options(selectinload(Station.source))
                .where(Station.external_id == external_id)
            )
            station = result.scalars().first()
        except Exception as e:
            raise CatalogUnavailable(
                "Failed to look up station",
                context={"external_id": external_id},
                original_exception=e
            )
        return self._to_record(station) if station else None

    @staticmethod
    def _to_record(station: Station) -> StationRecord:
        return StationRecord(
            id=station.id,
            external_id=station.external_id,
            name=station.name,
            latitude=station.latitude,
            longitude=station.longitude,
            source_name=station.source.name if station.source else None
        )


async def seed_variables(db_session: AsyncSession) -> Dict[str, int]:
    """Create any missing variables of the fixed set. Safe to run repeatedly."""
    result = await db_session.execute(select(Variable))
    existing = {variable.code: variable for variable in result.scalars().all()}

    for code in VariableCode:
        if code.value not in existing:
            variable = Variable(code=code.value, unit=VARIABLE_UNITS[code], name=VARIABLE_NAMES[code])
            db_session.add(variable)
            existing[code.value] = variable
            logger.info(f"Created variable {code.value}")

    await db_session.flush()
    variable_ids = {code: variable.id for code, variable in existing.items()}
    await db_session.commit()
    return variable_ids


async def seed_stations(db_session: AsyncSession, stations: Iterable[Dict]) -> int:
    """
    Create stations that are not in the catalog yet, matched on name.

    Each entry: name, latitude, longitude, optional external_id and source.

    Returns:
        Number of stations created
    """
    result = await db_session.execute(select(Station.name))
    known_names = set(result.scalars().all())

    sources: Dict[str, Source] = {}
    result = await db_session.execute(select(Source))
    for source in result.scalars().all():
        sources[source.name] = source

    created = 0
    for entry in stations:
        if entry["name"] in known_names:
            continue

        source = None
        source_name = entry.get("source")
        if source_name:
            source = sources.get(source_name)
            if source is None:
                source = Source(name=source_name)
                db_session.add(source)
                sources[source_name] = source

        db_session.add(
            Station(
                name=entry["name"],
                external_id=entry.get("external_id"),
                latitude=entry["latitude"],
                longitude=entry["longitude"],
                source=source
            )
        )
        known_names.add(entry["name"])
        created += 1

    await db_session.commit()
    logger.info(f"Seeded {created} stations")
    return created
