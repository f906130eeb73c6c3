from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class ETLStatus(str, enum.Enum):
    """ETL run / station outcome status"""
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"


class VariableCode(str, enum.Enum):
    """Measurement kinds written by the pipeline. Codes are the storage join key."""
    TEMP = "TEMP"
    HEAT_INDEX = "HEAT_INDEX"
    AQI = "AQI"


# Unit of measure for each variable as stored (°F for temperatures).
VARIABLE_UNITS = {
    VariableCode.TEMP: "°F",
    VariableCode.HEAT_INDEX: "°F",
    VariableCode.AQI: "AQI",
}
