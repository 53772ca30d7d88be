"""
EcoVision - Pollution Incident Triage
Citizen reports, photo classification, triage statistics and map viewport.
"""

__version__ = "0.1.0"

from ecovision.triage import TeamAssignment, TriageEngine

__all__ = ["TeamAssignment", "TriageEngine", "__version__"]
