"""
EcoVision - Analysis Module
Triage statistics and report filtering.
"""

from ecovision.analysis.report_stats import ReportAggregates, compute_aggregates
from ecovision.analysis.filters import ReportFilter, filter_by_status

__all__ = [
    "ReportAggregates",
    "compute_aggregates",
    "ReportFilter",
    "filter_by_status",
]
