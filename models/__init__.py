"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class and shared enums (ETLStatus, VariableCode)
    station: Source and Station (owned by the station catalog)
    variable: Variable (fixed set of measurement kinds)
    reading: Reading (written only by the ETL through the upsert contract)

Usage:
    from models.base import Base, VariableCode
    from models.station import Station
    from models.reading import Reading

Relationships:
    - Source → Station (one-to-many)
    - Station → Reading (one-to-many)
    - Variable → Reading (one-to-many)
"""

__all__ = [
    "Base",
    "ETLStatus",
    "VariableCode",
    "Source",
    "Station",
    "Variable",
    "Reading",
]
