"""
EcoVision - Domain Errors
Every failure in the triage core is local and recoverable by retrying
the action that triggered it.
"""


class EcoVisionError(Exception):
    """Base class for triage engine errors."""


class InvalidCoordinate(EcoVisionError, ValueError):
    """Latitude/longitude is non-finite or outside its valid range."""

    def __init__(self, latitude: float, longitude: float):
        self.latitude = latitude
        self.longitude = longitude
        super().__init__(
            f"Invalid coordinate ({latitude}, {longitude}): "
            "latitude must be in [-90, 90] and longitude in [-180, 180]"
        )


class UnknownReportId(EcoVisionError, KeyError):
    """No report with the given id exists in the store."""

    def __init__(self, report_id: str):
        self.report_id = report_id
        super().__init__(report_id)

    def __str__(self) -> str:
        return f"Unknown report id: {self.report_id}"


class IncompleteSubmission(EcoVisionError):
    """A report was submitted before classification produced type and level."""


class StaleClassification(EcoVisionError):
    """A classification finished after being cancelled or superseded."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Classification {token} is no longer current")


class UnknownClassification(EcoVisionError, KeyError):
    """The classification token was never issued or has been discarded."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(token)

    def __str__(self) -> str:
        return f"Unknown classification token: {self.token}"


class InvalidTeamAssignment(EcoVisionError, ValueError):
    """Team name or contact missing from an assignment."""
