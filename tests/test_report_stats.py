"""
Tests for triage statistics and report filters
"""
import random

import pytest

from ecovision.analysis.filters import ReportFilter, filter_by_status
from ecovision.analysis.report_stats import compute_aggregates
from ecovision.core.constants import (
    POLLUTION_LEVELS,
    POLLUTION_TYPES,
    SAMPLE_REPORTS,
    PollutionLevel,
    PollutionType,
)
from ecovision.crowdsource.report_store import ReportStatus, ReportStore, report_from_dict


@pytest.fixture
def sample_reports():
    """The four Lima sample reports in store order."""
    return [report_from_dict(data) for data in SAMPLE_REPORTS]


class TestAggregates:
    """Test suite for report aggregation."""

    def test_empty_set(self):
        """Test aggregates of no reports."""
        stats = compute_aggregates([])

        assert stats.total == 0
        assert stats.by_status == {s: 0 for s in ReportStatus}
        assert stats.critical == 0
        assert stats.by_type_sorted == []
        assert stats.type_percentage(PollutionType.AIR) == 0

    def test_sample_counts(self, sample_reports):
        """Test counts for the sample set."""
        stats = compute_aggregates(sample_reports)

        assert stats.total == 4
        assert stats.by_status[ReportStatus.PENDING] == 2
        assert stats.by_status[ReportStatus.IN_PROGRESS] == 1
        assert stats.by_status[ReportStatus.RESOLVED] == 1
        assert stats.critical == 2
        assert stats.by_severity[PollutionLevel.HIGH] == 2
        assert stats.by_severity[PollutionLevel.LOW] == 0

    def test_type_ranking_stable_on_ties(self, sample_reports):
        """Test types sort by count with ties in first-seen order."""
        stats = compute_aggregates(sample_reports)

        assert stats.by_type_sorted == [
            (PollutionType.WATER, 2),
            (PollutionType.AIR, 1),
            (PollutionType.SOLID_WASTE, 1),
        ]
        assert stats.type_percentage(PollutionType.WATER) == 0.5
        assert stats.type_percentage(PollutionType.NOISE) == 0

    def test_counts_sum_to_total(self, make_draft):
        """Test status and type counts always add up to the total."""
        rng = random.Random(99)
        store = ReportStore()
        for _ in range(60):
            report = store.submit(make_draft(rng.choice(POLLUTION_TYPES), rng.choice(POLLUTION_LEVELS)))
            if rng.random() < 0.5:
                store.update_status(report.id, rng.choice(list(ReportStatus)))

            stats = compute_aggregates(store.all())
            assert sum(stats.by_status.values()) == stats.total
            assert sum(n for _, n in stats.by_type_sorted) == stats.total
            assert sum(stats.by_severity.values()) == stats.total
            counts = [n for _, n in stats.by_type_sorted]
            assert counts == sorted(counts, reverse=True)

    def test_to_dict(self, sample_reports):
        """Test transport form of the aggregates."""
        data = compute_aggregates(sample_reports).to_dict()

        assert data["total"] == 4
        assert data["by_status"] == {"pending": 2, "in-progress": 1, "resolved": 1}
        assert data["critical"] == 2
        assert data["by_type_sorted"][0] == {
            "type": "Contaminación del Agua",
            "count": 2,
            "percentage": 0.5,
        }


class TestReportFilter:
    """Test suite for the type filter."""

    def test_all_passes_everything(self, sample_reports):
        """Test the default filter keeps every report in order."""
        assert ReportFilter().visible(sample_reports) == sample_reports

    def test_filter_by_type(self, sample_reports):
        """Test only matching types remain, order preserved."""
        type_filter = ReportFilter()
        type_filter.set_filter(PollutionType.WATER)

        assert [r.id for r in type_filter.visible(sample_reports)] == ["1", "2"]

    def test_filter_by_type_string(self, sample_reports):
        """Test the filter accepts the type label."""
        type_filter = ReportFilter("Contaminación del Aire")
        assert [r.id for r in type_filter.visible(sample_reports)] == ["3"]

    def test_vanished_filter_is_empty(self, sample_reports):
        """Test a type with no reports yields an empty list, not an error."""
        type_filter = ReportFilter(PollutionType.NOISE)
        assert type_filter.visible(sample_reports) == []
        assert ReportFilter("not-a-type").visible(sample_reports) == []

    def test_available_filters(self, sample_reports):
        """Test available values follow the report set."""
        assert ReportFilter.available_filters(sample_reports) == [
            "all",
            "Contaminación del Agua",
            "Contaminación del Aire",
            "Residuos Sólidos",
        ]
        assert ReportFilter.available_filters([]) == ["all"]


class TestStatusFilter:
    """Test suite for dashboard status tabs."""

    def test_all_tab(self, sample_reports):
        """Test the 'all' tab."""
        assert filter_by_status(sample_reports) == sample_reports

    def test_pending_tab(self, sample_reports):
        """Test the pending tab."""
        assert [r.id for r in filter_by_status(sample_reports, "pending")] == ["1", "3"]

    def test_invalid_tab(self, sample_reports):
        """Test an unknown status is rejected."""
        with pytest.raises(ValueError):
            filter_by_status(sample_reports, "archived")
