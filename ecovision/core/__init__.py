"""
EcoVision - Core Utilities
Central configuration, reference data, errors and projection.
"""

from ecovision.core.config import settings
from ecovision.core.constants import (
    ALL_FILTER,
    POLLUTION_LEVELS,
    POLLUTION_TYPES,
    PollutionLevel,
    PollutionType,
)
from ecovision.core.exceptions import (
    EcoVisionError,
    IncompleteSubmission,
    InvalidCoordinate,
    InvalidTeamAssignment,
    StaleClassification,
    UnknownClassification,
    UnknownReportId,
)
from ecovision.core.geo_utils import (
    GeoProjection,
    Location,
    project,
    validate_coordinate,
)

__all__ = [
    "settings",
    "ALL_FILTER",
    "POLLUTION_LEVELS",
    "POLLUTION_TYPES",
    "PollutionLevel",
    "PollutionType",
    "EcoVisionError",
    "IncompleteSubmission",
    "InvalidCoordinate",
    "InvalidTeamAssignment",
    "StaleClassification",
    "UnknownClassification",
    "UnknownReportId",
    "GeoProjection",
    "Location",
    "project",
    "validate_coordinate",
]
