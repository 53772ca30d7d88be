"""
EcoVision - Report Filters
Narrow the report set by pollution type (map) or status (dashboard tabs).
"""

import logging
from typing import List, Sequence, Union

from ecovision.core.constants import ALL_FILTER, PollutionType
from ecovision.crowdsource.report_store import Report, ReportStatus

logger = logging.getLogger(__name__)


def _normalize(value: Union[str, PollutionType]) -> str:
    if isinstance(value, PollutionType):
        return value.value
    return str(value)


class ReportFilter:
    """
    Type filter applied before reports reach the map and list views.

    A filter value with no matching reports (for instance a type that has
    since disappeared from the store) gives an empty result, not an error.
    """

    def __init__(self, value: Union[str, PollutionType] = ALL_FILTER):
        self.value = _normalize(value)

    def set_filter(self, value: Union[str, PollutionType]) -> None:
        self.value = _normalize(value)
        logger.debug(f"Type filter set to {self.value!r}")

    @property
    def is_all(self) -> bool:
        return self.value == ALL_FILTER

    def visible(self, reports: Sequence[Report]) -> List[Report]:
        """Reports passing the filter, in the order given."""
        if self.is_all:
            return list(reports)
        return [r for r in reports if r.type.value == self.value]

    @staticmethod
    def available_filters(reports: Sequence[Report]) -> List[str]:
        """'all' followed by the distinct types present, first-seen order."""
        values = [ALL_FILTER]
        for report in reports:
            if report.type.value not in values:
                values.append(report.type.value)
        return values


def filter_by_status(
    reports: Sequence[Report],
    status: Union[str, ReportStatus] = ALL_FILTER
) -> List[Report]:
    """
    Dashboard tab filter.

    Args:
        reports: Reports in store order
        status: A ReportStatus value or "all"

    Returns:
        Matching reports, order preserved

    Raises:
        ValueError: if status is neither "all" nor a valid status
    """
    if status == ALL_FILTER:
        return list(reports)

    wanted = ReportStatus(status)
    return [r for r in reports if r.status is wanted]
