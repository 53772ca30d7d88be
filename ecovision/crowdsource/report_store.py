"""
Pollution report store for crowdsourced data
Receives citizen reports and tracks their triage status
"""

import logging
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from ecovision.core.constants import PollutionLevel, PollutionType
from ecovision.core.exceptions import IncompleteSubmission, UnknownReportId
from ecovision.core.geo_utils import Location, validate_coordinate

logger = logging.getLogger(__name__)

# Captured photo: raw bytes or a reference (URL, data URI, path)
ImageData = Union[bytes, str]


class ReportStatus(str, Enum):
    """Triage state of a report."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class Report:
    """
    Pollution report submitted by a citizen.

    Everything but ``status`` is fixed at creation; a status change
    produces a new record with the same id.
    """
    id: str
    type: PollutionType
    level: PollutionLevel
    description: str
    location: Location
    image: ImageData = field(repr=False)
    timestamp: datetime
    status: ReportStatus = ReportStatus.PENDING

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "type": self.type.value,
            "level": self.level.value,
            "description": self.description,
            "location": self.location.to_dict(),
            "has_image": bool(self.image),
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
        }


@dataclass
class ReportDraft:
    """Submission payload; type and level stay None until classified."""
    location: Location
    image: Optional[ImageData]
    description: str = ""
    type: Optional[PollutionType] = None
    level: Optional[PollutionLevel] = None


class ReportStore:
    """
    Authoritative mapping of report id to Report.

    Reports are kept newest-first: submit() prepends, so all() needs no
    sorting.
    """

    def __init__(self):
        self._order: List[str] = []
        self._reports: Dict[str, Report] = {}
        self._last_id_ns = 0

        logger.info("ReportStore initialized")

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, report_id: object) -> bool:
        return report_id in self._reports

    def submit(self, draft: ReportDraft) -> Report:
        """
        Create a report from a classified draft.

        Args:
            draft: Submission payload with type and level populated

        Returns:
            Created Report, status pending

        Raises:
            IncompleteSubmission: if classification has not finished
            InvalidCoordinate: if the draft location is invalid
        """
        if draft.type is None or draft.level is None:
            raise IncompleteSubmission(
                "Report cannot be submitted before classification has finished"
            )
        if not draft.image:
            raise IncompleteSubmission("Report requires a captured image")

        validate_coordinate(draft.location.lat, draft.location.lng)

        report = Report(
            id=self._next_id(),
            type=PollutionType(draft.type),
            level=PollutionLevel(draft.level),
            description=draft.description or "",
            location=draft.location,
            image=draft.image,
            timestamp=datetime.now(timezone.utc),
        )

        self._reports[report.id] = report
        self._order.insert(0, report.id)

        logger.info(
            f"New report created: {report.id} ({report.type.value}, {report.level.value}) "
            f"at ({report.location.lat}, {report.location.lng})"
        )

        return report

    def update_status(
        self,
        report_id: str,
        new_status: Union[ReportStatus, str]
    ) -> Report:
        """
        Overwrite the status of a report.

        Any status may follow any other.

        Raises:
            UnknownReportId: if no such report exists (store unchanged)
            ValueError: if new_status is not a valid status value
        """
        status = ReportStatus(new_status)

        report = self._reports.get(report_id)
        if report is None:
            logger.warning(f"Status update for unknown report {report_id} ignored")
            raise UnknownReportId(report_id)

        updated = replace(report, status=status)
        self._reports[report_id] = updated

        logger.info(f"Report {report_id} status: {report.status.value} -> {status.value}")

        return updated

    def get(self, report_id: str) -> Optional[Report]:
        """Get report by ID."""
        return self._reports.get(report_id)

    def all(self) -> List[Report]:
        """All reports, newest first."""
        return [self._reports[report_id] for report_id in self._order]

    def load(self, reports: Iterable[Report]) -> int:
        """
        Import existing reports, appended in the given order.

        Returns:
            Number of reports loaded

        Raises:
            ValueError: on a duplicate id
        """
        count = 0
        for report in reports:
            if report.id in self._reports:
                raise ValueError(f"Duplicate report id: {report.id}")
            validate_coordinate(report.location.lat, report.location.lng)
            self._reports[report.id] = report
            self._order.append(report.id)
            if report.id.isdigit():
                self._last_id_ns = max(self._last_id_ns, int(report.id))
            count += 1

        logger.info(f"Loaded {count} existing reports")
        return count

    def _next_id(self) -> str:
        stamp = max(time.time_ns(), self._last_id_ns + 1)
        while str(stamp) in self._reports:
            stamp += 1
        self._last_id_ns = stamp
        return str(stamp)


def report_from_dict(data: Dict[str, Any]) -> Report:
    """Build a Report from a plain mapping such as SAMPLE_REPORTS entries."""
    timestamp = data["timestamp"]
    if isinstance(timestamp, str):
        timestamp = datetime.fromisoformat(timestamp)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    location = data["location"]
    if isinstance(location, dict):
        location = Location(
            lat=location["lat"],
            lng=location["lng"],
            address=location.get("address", ""),
        )

    return Report(
        id=str(data["id"]),
        type=PollutionType(data["type"]),
        level=PollutionLevel(data["level"]),
        description=data.get("description", ""),
        location=location,
        image=data.get("image", ""),
        timestamp=timestamp,
        status=ReportStatus(data.get("status", ReportStatus.PENDING)),
    )
