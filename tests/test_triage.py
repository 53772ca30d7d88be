"""
Tests for the triage engine
"""
import asyncio

import pytest

from ecovision.core.constants import PollutionLevel, PollutionType
from ecovision.core.exceptions import (
    IncompleteSubmission,
    InvalidTeamAssignment,
    UnknownReportId,
)
from ecovision.core.geo_utils import Location
from ecovision.crowdsource.photo_analyzer import ClassificationState
from ecovision.crowdsource.report_store import ReportDraft, ReportStatus
from ecovision.visualization.viewport import Vector


class TestTriageScenario:
    """End-to-end scenario across store, aggregates, filter and viewport."""

    def test_example_scenario(self, engine, water_draft):
        """Test submit, resolve, filter, drag and zoom."""
        assert engine.get_aggregates().total == 0

        report = engine.submit_report(water_draft)
        stats = engine.get_aggregates()
        assert stats.total == 1
        assert stats.by_status[ReportStatus.PENDING] == 1
        assert stats.critical == 1

        resolved = engine.update_report_status(report.id, "resolved")
        stats = engine.get_aggregates()
        assert stats.by_status[ReportStatus.PENDING] == 0
        assert stats.by_status[ReportStatus.RESOLVED] == 1
        assert resolved.type == report.type
        assert resolved.level == report.level
        assert resolved.location == report.location
        assert resolved.timestamp == report.timestamp

        engine.set_type_filter(PollutionType.AIR)
        assert engine.visible_reports() == []
        engine.set_type_filter("all")

        engine.begin_drag(100, 100)
        engine.update_drag(130, 160)
        engine.end_drag()
        assert engine.viewport.pan == Vector(30, 60)

        offset_before = engine.viewport.render_position(resolved) - engine.viewport.pan
        engine.set_viewport_zoom(2.0)
        offset_after = engine.viewport.render_position(resolved) - engine.viewport.pan
        assert engine.viewport.pan == Vector(30, 60)
        assert offset_after == Vector(offset_before.x * 2, offset_before.y * 2)

    def test_citizen_flow_end_to_end(self, engine):
        """Test capture, classification and submission through the engine."""
        location = Location(lat=-12.05, lng=-77.03, address="Lima")

        async def scenario():
            flow = engine.new_submission()
            flow.capture_image(b"photo")
            with pytest.raises(IncompleteSubmission):
                engine.submit_report(ReportDraft(location=location, image=b"photo"))
            await engine.wait_for_classification(flow.token)
            return flow, engine.submit_flow(flow, location)

        flow, report = asyncio.run(scenario())

        assert engine.reports()[0] == report
        assert flow.token is None
        assert flow.image is None
        assert len(engine.classification) == 0
        assert report.type is PollutionType.WATER
        assert report.status is ReportStatus.PENDING

    def test_cancel_classification(self, engine):
        """Test cancelling through the engine suppresses the result."""
        engine.classification.latency_seconds = 0.02

        async def scenario():
            token = engine.start_classification(b"photo")
            engine.cancel_classification(token)
            await asyncio.sleep(0.05)
            return engine.classification_status(token)

        request = asyncio.run(scenario())
        assert request.state is ClassificationState.CANCELLED
        assert len(engine.store) == 0


class TestTriageEngine:
    """Test suite for authority-side operations."""

    def test_seeded_engine(self, seeded_engine):
        """Test the sample data loads."""
        assert [r.id for r in seeded_engine.reports()] == ["1", "2", "3", "4"]
        assert seeded_engine.available_filters()[0] == "all"

    def test_update_unknown_report(self, engine):
        """Test status update on a missing id."""
        with pytest.raises(UnknownReportId):
            engine.update_report_status("missing", ReportStatus.RESOLVED)

    def test_assign_team(self, seeded_engine):
        """Test team assignment acknowledgement leaves the report alone."""
        before = seeded_engine.get_report("1")
        ack = seeded_engine.assign_team("1", "Brigada Rímac", "999 888 777")

        assert ack.report_id == "1"
        assert ack.message == 'Equipo "Brigada Rímac" asignado al reporte #1\nContacto: 999 888 777'
        assert seeded_engine.get_report("1") == before

    def test_assign_team_requires_fields(self, seeded_engine):
        """Test blank team details are rejected."""
        with pytest.raises(InvalidTeamAssignment):
            seeded_engine.assign_team("1", "  ", "999")
        with pytest.raises(InvalidTeamAssignment):
            seeded_engine.assign_team("1", "Brigada", "")

    def test_assign_team_unknown_report(self, seeded_engine):
        """Test assignment to a missing report."""
        with pytest.raises(UnknownReportId):
            seeded_engine.assign_team("404", "Brigada", "999")

    def test_reports_by_status(self, seeded_engine):
        """Test dashboard tabs."""
        assert [r.id for r in seeded_engine.reports_by_status("resolved")] == ["4"]
        assert len(seeded_engine.reports_by_status()) == 4

    def test_select_report(self, seeded_engine):
        """Test selection resolves against the store and survives updates."""
        seeded_engine.select_report("3")
        seeded_engine.update_report_status("3", ReportStatus.IN_PROGRESS)

        selected = seeded_engine.selected_report()
        assert selected.id == "3"
        assert selected.status is ReportStatus.IN_PROGRESS

        seeded_engine.select_report(None)
        assert seeded_engine.selected_report() is None

    def test_select_unknown_report(self, seeded_engine):
        """Test selecting a missing report fails."""
        with pytest.raises(UnknownReportId):
            seeded_engine.select_report("404")

    def test_pointer_down_uses_visible_reports(self, seeded_engine):
        """Test filtered-out markers cannot be hit."""
        seeded_engine.set_type_filter(PollutionType.AIR)
        assert seeded_engine.pointer_down(400, 300, (800, 600)) is None
        assert seeded_engine.viewport.state.is_dragging

        seeded_engine.end_drag()
        seeded_engine.set_type_filter("all")
        hit = seeded_engine.pointer_down(400, 300, (800, 600))
        assert hit.id == "1"

    def test_marker_positions_follow_filter(self, seeded_engine):
        """Test marker list reflects the type filter."""
        seeded_engine.set_type_filter(PollutionType.WATER)
        assert [m["id"] for m in seeded_engine.marker_positions()] == ["1", "2"]

    def test_map_view_lifecycle(self, seeded_engine):
        """Test closing the map view resets its state."""
        seeded_engine.set_viewport_zoom(2.5)
        seeded_engine.select_report("2")
        seeded_engine.close_map_view()

        assert seeded_engine.viewport.zoom == 1.0
        assert seeded_engine.viewport.state.selected_report_id is None

    def test_zoom_controls(self, engine):
        """Test engine zoom controls saturate."""
        for _ in range(20):
            engine.zoom_out()
        assert engine.viewport.zoom == 0.5
        engine.wheel(-1)
        assert engine.viewport.zoom == pytest.approx(0.6)
        assert engine.zoom_in() == pytest.approx(0.8)

    def test_critical_level_is_highest(self):
        """Test severity ordering."""
        assert PollutionLevel.LOW < PollutionLevel.MODERATE < PollutionLevel.HIGH < PollutionLevel.CRITICAL
        assert max(PollutionLevel) is PollutionLevel.CRITICAL
