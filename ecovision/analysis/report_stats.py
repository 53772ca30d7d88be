"""
EcoVision - Report Statistics
Triage counts derived from the current report set.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from ecovision.core.constants import POLLUTION_LEVELS, PollutionLevel, PollutionType
from ecovision.crowdsource.report_store import Report, ReportStatus


@dataclass(frozen=True)
class ReportAggregates:
    """Dashboard summary of a report snapshot."""
    total: int
    by_status: Dict[ReportStatus, int]
    by_severity: Dict[PollutionLevel, int]
    by_type_sorted: List[Tuple[PollutionType, int]] = field(default_factory=list)

    @property
    def critical(self) -> int:
        """Headline metric: reports at Crítico level."""
        return self.by_severity.get(PollutionLevel.CRITICAL, 0)

    @property
    def by_type(self) -> Dict[PollutionType, int]:
        return dict(self.by_type_sorted)

    def type_percentage(self, pollution_type: PollutionType) -> float:
        """Share of reports of the given type, 0 when there are none."""
        if self.total == 0:
            return 0.0
        return self.by_type.get(pollution_type, 0) / self.total

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "by_status": {s.value: n for s, n in self.by_status.items()},
            "by_severity": {lvl.value: n for lvl, n in self.by_severity.items()},
            "critical": self.critical,
            "by_type_sorted": [
                {
                    "type": t.value,
                    "count": n,
                    "percentage": self.type_percentage(t),
                }
                for t, n in self.by_type_sorted
            ],
        }


def compute_aggregates(reports: Sequence[Report]) -> ReportAggregates:
    """
    Recompute triage statistics from a report snapshot.

    Args:
        reports: Reports in store order (newest first)

    Returns:
        ReportAggregates. Type counts are ordered by count descending;
        ties keep the order in which each type was first encountered.
    """
    by_status = {status: 0 for status in ReportStatus}
    by_severity = {level: 0 for level in POLLUTION_LEVELS}
    by_type: Dict[PollutionType, int] = {}

    for report in reports:
        by_status[report.status] += 1
        by_severity[report.level] += 1
        by_type[report.type] = by_type.get(report.type, 0) + 1

    # sorted() is stable, dict preserves first-encounter order
    by_type_sorted = sorted(by_type.items(), key=lambda item: item[1], reverse=True)

    return ReportAggregates(
        total=len(reports),
        by_status=by_status,
        by_severity=by_severity,
        by_type_sorted=by_type_sorted,
    )
