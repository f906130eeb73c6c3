"""
Create the schema and seed the catalog (variables and Phoenix-area stations)
"""

import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.database import create_session_factory
from core.logging import setup_logging
from ingestion.catalog import seed_stations, seed_variables
from models.base import Base
# Import all models to ensure they are registered
from models.station import Source, Station
from models.variable import Variable
from models.reading import Reading

logger = logging.getLogger(__name__)

# Stations whose external_id is a ZIP code also get AirNow readings
PHOENIX_STATIONS = [
    {"name": "Phoenix Sky Harbor", "external_id": "85034", "latitude": 33.4342, "longitude": -112.0116, "source": "AirNow"},
    {"name": "Downtown Phoenix", "external_id": "85004", "latitude": 33.4484, "longitude": -112.0740, "source": "AirNow"},
    {"name": "Tempe", "external_id": "85281", "latitude": 33.4255, "longitude": -111.9400, "source": "AirNow"},
    {"name": "Scottsdale", "external_id": "85251", "latitude": 33.4942, "longitude": -111.9261, "source": "AirNow"},
    {"name": "Mesa", "external_id": "85201", "latitude": 33.4152, "longitude": -111.8315, "source": "AirNow"},
    {"name": "Glendale", "external_id": "85301", "latitude": 33.5387, "longitude": -112.1860, "source": "AirNow"},
    {"name": "South Mountain Park", "external_id": "SMTN1", "latitude": 33.3400, "longitude": -112.0600, "source": "NWS"},
]


async def init_database():
    logger.info("Connecting to database...")
    engine, session_factory = create_session_factory(echo=False)

    try:
        async with engine.begin() as conn:
            logger.info("Creating tables...")
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Tables created successfully.")

        async with session_factory() as session:
            variables = await seed_variables(session)
            logger.info(f"Variables: {', '.join(sorted(variables))}")
            await seed_stations(session, PHOENIX_STATIONS)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_database())
