"""
EcoVision - Crowdsource Module
Handles citizen pollution reports and their classification.
"""

from ecovision.crowdsource.report_store import (
    Report,
    ReportDraft,
    ReportStatus,
    ReportStore,
    report_from_dict,
)
from ecovision.crowdsource.photo_analyzer import (
    ClassificationRequest,
    ClassificationService,
    ClassificationState,
    Classifier,
    PhotoAnalyzer,
    classify_photo,
)
from ecovision.crowdsource.submission import SubmissionFlow

__all__ = [
    # Report Store
    "Report",
    "ReportDraft",
    "ReportStatus",
    "ReportStore",
    "report_from_dict",
    # Photo Analyzer
    "ClassificationRequest",
    "ClassificationService",
    "ClassificationState",
    "Classifier",
    "PhotoAnalyzer",
    "classify_photo",
    # Submission
    "SubmissionFlow",
]
