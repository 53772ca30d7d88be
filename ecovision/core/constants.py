"""
EcoVision - Constants and Reference Data
Pollution categories, severity scale and sample reports.
"""

from enum import Enum
from typing import Any, Dict, List

# =============================================================================
# POLLUTION CATEGORIES
# =============================================================================


class PollutionType(str, Enum):
    """Pollution category assigned by the classifier."""
    SOLID_WASTE = "Residuos Sólidos"
    WATER = "Contaminación del Agua"
    AIR = "Contaminación del Aire"
    NOISE = "Contaminación Acústica"
    VISUAL = "Contaminación Visual"
    SOIL = "Contaminación del Suelo"


class PollutionLevel(str, Enum):
    """Ordinal severity: Bajo < Moderado < Alto < Crítico."""
    LOW = "Bajo"
    MODERATE = "Moderado"
    HIGH = "Alto"
    CRITICAL = "Crítico"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, PollutionLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, PollutionLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, PollutionLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, PollutionLevel):
            return NotImplemented
        return self.rank >= other.rank


_LEVEL_ORDER: List[PollutionLevel] = [
    PollutionLevel.LOW,
    PollutionLevel.MODERATE,
    PollutionLevel.HIGH,
    PollutionLevel.CRITICAL,
]

POLLUTION_TYPES: List[PollutionType] = list(PollutionType)
POLLUTION_LEVELS: List[PollutionLevel] = list(_LEVEL_ORDER)

# Filter value meaning "no narrowing"
ALL_FILTER = "all"

# =============================================================================
# SAMPLE DATA
# =============================================================================

# Initial reports shown by the demo deployment (Lima, Peru)
SAMPLE_REPORTS: List[Dict[str, Any]] = [
    {
        "id": "1",
        "type": PollutionType.WATER,
        "level": PollutionLevel.CRITICAL,
        "description": "Río contaminado con residuos sólidos y plásticos",
        "location": {"lat": -12.0464, "lng": -77.0428, "address": "Cercado de Lima, Lima"},
        "image": "samples/contaminacion-agua-1.png",
        "timestamp": "2025-10-02T10:30:00",
        "status": "pending",
    },
    {
        "id": "2",
        "type": PollutionType.WATER,
        "level": PollutionLevel.HIGH,
        "description": "Agua estancada contaminada con desechos plásticos",
        "location": {"lat": -12.0565, "lng": -77.1181, "address": "Callao, Provincia Constitucional del Callao"},
        "image": "samples/contaminacion-agua-2.png",
        "timestamp": "2025-10-03T14:15:00",
        "status": "in-progress",
    },
    {
        "id": "3",
        "type": PollutionType.AIR,
        "level": PollutionLevel.CRITICAL,
        "description": "Quema de residuos sólidos generando humo tóxico",
        "location": {"lat": -11.9932, "lng": -76.9976, "address": "San Juan de Lurigancho, Lima"},
        "image": "samples/contaminacion-aire.png",
        "timestamp": "2025-10-05T09:00:00",
        "status": "pending",
    },
    {
        "id": "4",
        "type": PollutionType.SOLID_WASTE,
        "level": PollutionLevel.HIGH,
        "description": "Acumulación de basura en espacio público",
        "location": {"lat": -12.2127, "lng": -76.9388, "address": "Villa El Salvador, Lima"},
        "image": "samples/contaminacion-aire.png",
        "timestamp": "2025-10-07T11:45:00",
        "status": "resolved",
    },
]
