"""
Pytest configuration and fixtures
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ecovision.core.constants import PollutionLevel, PollutionType
from ecovision.core.geo_utils import GeoProjection, Location
from ecovision.crowdsource.photo_analyzer import ClassificationService, Classifier
from ecovision.crowdsource.report_store import ReportDraft
from ecovision.triage import TriageEngine


class FixedClassifier(Classifier):
    """Classifier returning a preset result and counting calls."""

    def __init__(self, pollution_type=PollutionType.WATER, level=PollutionLevel.CRITICAL):
        self.pollution_type = pollution_type
        self.level = level
        self.calls = 0

    def classify(self, image):
        self.calls += 1
        return self.pollution_type, self.level


@pytest.fixture
def fixed_classifier():
    """Deterministic classifier (water, critical)."""
    return FixedClassifier()


@pytest.fixture
def classification_service(fixed_classifier):
    """Classification service with no latency."""
    return ClassificationService(classifier=fixed_classifier, latency_seconds=0)


@pytest.fixture
def projection():
    """Projection centered on Cercado de Lima."""
    return GeoProjection(center_lat=-12.0464, center_lng=-77.0428, scale=2000, origin_x=0, origin_y=0)


@pytest.fixture
def engine(classification_service, projection):
    """Empty triage engine."""
    return TriageEngine(
        classification_service=classification_service,
        projection=projection,
        seed_sample_reports=False,
    )


@pytest.fixture
def seeded_engine(classification_service, projection):
    """Triage engine with the four Lima sample reports."""
    return TriageEngine(
        classification_service=classification_service,
        projection=projection,
        seed_sample_reports=True,
    )


@pytest.fixture
def lima_location():
    """Cercado de Lima."""
    return Location(lat=-12.0464, lng=-77.0428, address="Cercado de Lima, Lima")


@pytest.fixture
def water_draft(lima_location):
    """Classified draft: water pollution, critical."""
    return ReportDraft(
        location=lima_location,
        image=b"\x89PNG-river",
        description="Río contaminado con plásticos",
        type=PollutionType.WATER,
        level=PollutionLevel.CRITICAL,
    )


@pytest.fixture
def make_draft():
    """Factory for classified drafts."""
    def _make(pollution_type, level=PollutionLevel.LOW, lat=-12.05, lng=-77.05):
        return ReportDraft(
            location=Location(lat=lat, lng=lng, address="Lima"),
            image=b"photo",
            description="",
            type=pollution_type,
            level=level,
        )
    return _make
