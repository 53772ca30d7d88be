"""
EcoVision - Triage Engine
Single entry point used by the citizen map and the authority dashboard.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from ecovision.analysis.filters import ReportFilter, filter_by_status
from ecovision.analysis.report_stats import ReportAggregates, compute_aggregates
from ecovision.core.config import settings
from ecovision.core.constants import ALL_FILTER, SAMPLE_REPORTS, PollutionType
from ecovision.core.exceptions import (
    IncompleteSubmission,
    InvalidTeamAssignment,
    UnknownReportId,
)
from ecovision.core.geo_utils import GeoProjection, Location
from ecovision.crowdsource.photo_analyzer import (
    ClassificationRequest,
    ClassificationService,
)
from ecovision.crowdsource.report_store import (
    ImageData,
    Report,
    ReportDraft,
    ReportStatus,
    ReportStore,
    report_from_dict,
)
from ecovision.crowdsource.submission import SubmissionFlow
from ecovision.visualization.viewport import Vector, ViewportController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeamAssignment:
    """Acknowledgement that a response team was notified about a report."""
    report_id: str
    team_name: str
    team_contact: str
    assigned_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def message(self) -> str:
        return (
            f'Equipo "{self.team_name}" asignado al reporte #{self.report_id}\n'
            f"Contacto: {self.team_contact}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report_id": self.report_id,
            "team_name": self.team_name,
            "team_contact": self.team_contact,
            "assigned_at": self.assigned_at.isoformat(),
            "message": self.message,
        }


class TriageEngine:
    """
    Report store, classification, filters, aggregates and the map viewport
    behind one object.

    The store is the only state shared between views; each open map view
    owns its own ViewportController.
    """

    def __init__(
        self,
        store: Optional[ReportStore] = None,
        classification_service: Optional[ClassificationService] = None,
        projection: Optional[GeoProjection] = None,
        seed_sample_reports: Optional[bool] = None,
    ):
        """
        Initialize triage engine.

        Args:
            store: Report store (a fresh one by default)
            classification_service: Classification runner
            projection: Map projection shared by all map views
            seed_sample_reports: Load the demo report set
        """
        self.store = store or ReportStore()
        self.classification = classification_service or ClassificationService()
        self.projection = projection or GeoProjection()
        self.type_filter = ReportFilter()
        self._viewport: Optional[ViewportController] = None

        if seed_sample_reports is None:
            seed_sample_reports = settings.seed_sample_reports
        if seed_sample_reports:
            self.store.load(report_from_dict(data) for data in SAMPLE_REPORTS)

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def submit_report(self, draft: ReportDraft) -> Report:
        """Store a classified draft; rejects unclassified drafts."""
        try:
            return self.store.submit(draft)
        except IncompleteSubmission as e:
            logger.warning(f"Submission rejected: {e}")
            raise

    def update_report_status(
        self,
        report_id: str,
        status: Union[ReportStatus, str]
    ) -> Report:
        return self.store.update_status(report_id, status)

    def get_report(self, report_id: str) -> Report:
        report = self.store.get(report_id)
        if report is None:
            raise UnknownReportId(report_id)
        return report

    def reports(self) -> List[Report]:
        return self.store.all()

    def assign_team(
        self,
        report_id: str,
        team_name: str,
        team_contact: str
    ) -> TeamAssignment:
        """
        Notify a response team about a report.

        No report state changes; the acknowledgement is the only output.

        Raises:
            UnknownReportId: if the report does not exist
            InvalidTeamAssignment: if name or contact is blank
        """
        report = self.get_report(report_id)

        team_name = (team_name or "").strip()
        team_contact = (team_contact or "").strip()
        if not team_name or not team_contact:
            raise InvalidTeamAssignment("Team name and contact are both required")

        assignment = TeamAssignment(
            report_id=report.id,
            team_name=team_name,
            team_contact=team_contact,
        )
        logger.info(f"Team {team_name!r} assigned to report {report.id}")
        return assignment

    # -------------------------------------------------------------------------
    # Classification
    # -------------------------------------------------------------------------

    def start_classification(self, image: ImageData) -> str:
        return self.classification.classify(image)

    def cancel_classification(self, token: str) -> bool:
        return self.classification.cancel(token)

    def classification_status(self, token: str) -> ClassificationRequest:
        return self.classification.get(token)

    async def wait_for_classification(self, token: str) -> ClassificationRequest:
        return await self.classification.wait(token)

    def new_submission(self) -> SubmissionFlow:
        return SubmissionFlow(self.classification)

    def submit_flow(self, flow: SubmissionFlow, location: Location) -> Report:
        """
        Submit a finished submission flow.

        The flow is reset afterwards, which forgets its classification
        request and the image it held.

        Raises:
            IncompleteSubmission: if the flow's analysis has not completed
        """
        try:
            draft = flow.build_draft(location)
        except IncompleteSubmission as e:
            logger.warning(f"Submission rejected: {e}")
            raise

        report = self.submit_report(draft)
        flow.reset()
        return report

    # -------------------------------------------------------------------------
    # Filters and aggregates
    # -------------------------------------------------------------------------

    def set_type_filter(self, value: Union[str, PollutionType] = ALL_FILTER) -> None:
        self.type_filter.set_filter(value)

    def visible_reports(self) -> List[Report]:
        return self.type_filter.visible(self.store.all())

    def available_filters(self) -> List[str]:
        return self.type_filter.available_filters(self.store.all())

    def reports_by_status(self, status: Union[str, ReportStatus] = ALL_FILTER) -> List[Report]:
        return filter_by_status(self.store.all(), status)

    def get_aggregates(self) -> ReportAggregates:
        return compute_aggregates(self.store.all())

    # -------------------------------------------------------------------------
    # Map view
    # -------------------------------------------------------------------------

    def open_map_view(self) -> ViewportController:
        """Create a fresh viewport, replacing any open one."""
        self._viewport = ViewportController(projection=self.projection)
        return self._viewport

    def close_map_view(self) -> None:
        self._viewport = None

    @property
    def viewport(self) -> ViewportController:
        if self._viewport is None:
            return self.open_map_view()
        return self._viewport

    def set_viewport_pan(self, x: float, y: float) -> Vector:
        return self.viewport.set_pan(x, y)

    def set_viewport_zoom(self, value: float) -> float:
        return self.viewport.set_zoom(value)

    def zoom_in(self) -> float:
        return self.viewport.zoom_in()

    def zoom_out(self) -> float:
        return self.viewport.zoom_out()

    def wheel(self, delta_y: float) -> float:
        return self.viewport.wheel(delta_y)

    def begin_drag(self, x: float, y: float, button: int = 0) -> bool:
        return self.viewport.begin_drag(x, y, button)

    def update_drag(self, x: float, y: float) -> Vector:
        return self.viewport.update_drag(x, y)

    def end_drag(self) -> None:
        self.viewport.end_drag()

    def pointer_down(
        self,
        x: float,
        y: float,
        viewport_size: Tuple[float, float] = (0.0, 0.0),
        button: int = 0
    ) -> Optional[Report]:
        return self.viewport.pointer_down(x, y, self.visible_reports(), viewport_size, button)

    def select_report(self, report_id: Optional[str]) -> Optional[Report]:
        """Select a report (None returns to the list view)."""
        if report_id is None:
            self.viewport.clear_selection()
            return None
        report = self.get_report(report_id)
        self.viewport.select(report.id)
        return report

    def selected_report(self) -> Optional[Report]:
        return self.viewport.selected(self.store.all())

    def marker_positions(
        self,
        viewport_size: Optional[Tuple[float, float]] = None
    ) -> List[Dict[str, object]]:
        return self.viewport.markers(self.visible_reports(), viewport_size)
