"""
EcoVision - REST API

FastAPI application exposing citizen report submission, photo
classification, authority triage and map marker placement.

Run with: uvicorn ecovision.api.main:app --reload
"""

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ecovision import __version__
from ecovision.core.config import settings
from ecovision.core.constants import ALL_FILTER
from ecovision.core.exceptions import (
    IncompleteSubmission,
    InvalidCoordinate,
    InvalidTeamAssignment,
    UnknownClassification,
    UnknownReportId,
)
from ecovision.core.geo_utils import Location
from ecovision.core.logging import setup_logging
from ecovision.crowdsource.photo_analyzer import ClassificationRequest, ClassificationState
from ecovision.crowdsource.report_store import Report, ReportDraft, ReportStatus
from ecovision.analysis.filters import ReportFilter, filter_by_status
from ecovision.triage import TriageEngine
from ecovision.visualization.viewport import ViewportController

logger = setup_logging()

# FastAPI app
app = FastAPI(
    title="EcoVision",
    description="Citizen pollution reports with photo classification and authority triage",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Pydantic Models
# ============================================================================

class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    timestamp: str
    report_count: int
    pending_classifications: int


class LocationModel(BaseModel):
    """Report location."""
    lat: float
    lng: float
    address: str


class ReportResponse(BaseModel):
    """Pollution report response."""
    id: str
    type: str
    level: str
    description: str
    location: LocationModel
    has_image: bool
    timestamp: str
    status: str


class ReportListResponse(BaseModel):
    """List of pollution reports."""
    count: int
    filters: List[str]
    reports: List[ReportResponse]


class ReportCreateRequest(BaseModel):
    """Submit a report from a finished classification."""
    classification_token: str
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str = ""
    description: str = ""


class TeamAssignRequest(BaseModel):
    """Assign a response team to a report."""
    team_name: str = Field(..., min_length=1)
    team_contact: str = Field(..., min_length=1)


class TeamAssignResponse(BaseModel):
    """Team assignment acknowledgement."""
    report_id: str
    team_name: str
    team_contact: str
    assigned_at: str
    message: str


class TypeCount(BaseModel):
    """Reports of one type."""
    type: str
    count: int
    percentage: float


class ReportStatsResponse(BaseModel):
    """Triage statistics."""
    total: int
    by_status: dict
    by_severity: dict
    critical: int
    by_type_sorted: List[TypeCount]


class ClassificationResponse(BaseModel):
    """State of a photo classification."""
    token: str
    state: str
    type: Optional[str]
    level: Optional[str]
    error: Optional[str]
    requested_at: str
    completed_at: Optional[str]


class MarkerResponse(BaseModel):
    """Marker placement relative to the viewport center."""
    id: str
    x: float
    y: float
    type: str
    level: str
    selected: bool


class MarkerListResponse(BaseModel):
    """Marker placement for a camera state."""
    pan_x: float
    pan_y: float
    zoom: float
    markers: List[MarkerResponse]


# ============================================================================
# Helper Functions
# ============================================================================

# Global instance for stateful services
_engine = TriageEngine()


def get_engine() -> TriageEngine:
    """Engine dependency (overridable in tests)."""
    return _engine


def to_report_response(report: Report) -> ReportResponse:
    return ReportResponse(**report.to_dict())


def to_classification_response(request: ClassificationRequest) -> ClassificationResponse:
    return ClassificationResponse(**request.to_dict())


# ============================================================================
# System Routes
# ============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(engine: TriageEngine = Depends(get_engine)):
    """Check API health status."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        report_count=len(engine.store),
        pending_classifications=engine.classification.pending_count,
    )


# ============================================================================
# Classification Routes
# ============================================================================

@app.post("/api/v1/classifications", response_model=ClassificationResponse, tags=["Classification"])
async def start_classification(
    photo: UploadFile = File(...),
    wait: bool = Query(False, description="Block until the analysis finishes"),
    engine: TriageEngine = Depends(get_engine),
):
    """
    Upload a photo and start its analysis.

    The returned token is used to poll the result and to submit the report.
    """
    image = await photo.read()
    if not image:
        raise HTTPException(status_code=400, detail="Empty photo")

    token = engine.start_classification(image)
    request = engine.classification_status(token)
    if wait:
        request = await engine.wait_for_classification(token)

    return to_classification_response(request)


@app.get("/api/v1/classifications/{token}", response_model=ClassificationResponse, tags=["Classification"])
async def get_classification(token: str, engine: TriageEngine = Depends(get_engine)):
    """Poll a photo analysis."""
    try:
        return to_classification_response(engine.classification_status(token))
    except UnknownClassification as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.delete("/api/v1/classifications/{token}", response_model=ClassificationResponse, tags=["Classification"])
async def cancel_classification(token: str, engine: TriageEngine = Depends(get_engine)):
    """Cancel a pending analysis (photo removed before it finished)."""
    try:
        engine.cancel_classification(token)
        return to_classification_response(engine.classification_status(token))
    except UnknownClassification as e:
        raise HTTPException(status_code=404, detail=str(e))


# ============================================================================
# Report Routes
# ============================================================================

@app.post("/api/v1/reports", response_model=ReportResponse, status_code=201, tags=["Reports"])
async def create_report(request: ReportCreateRequest, engine: TriageEngine = Depends(get_engine)):
    """
    Submit a pollution report.

    Only accepted once the photo analysis behind classification_token has
    completed; the analysis result supplies the type and level.
    """
    try:
        classification = engine.classification_status(request.classification_token)
    except UnknownClassification as e:
        raise HTTPException(status_code=404, detail=str(e))

    if classification.state is not ClassificationState.COMPLETED:
        raise HTTPException(
            status_code=409,
            detail=f"Classification is {classification.state.value}; submit after it completes",
        )

    draft = ReportDraft(
        location=Location(lat=request.latitude, lng=request.longitude, address=request.address),
        image=classification.image,
        description=request.description,
        type=classification.pollution_type,
        level=classification.level,
    )

    try:
        report = engine.submit_report(draft)
    except (IncompleteSubmission, InvalidCoordinate) as e:
        raise HTTPException(status_code=400, detail=str(e))

    engine.classification.discard(request.classification_token)
    return to_report_response(report)


@app.get("/api/v1/reports", response_model=ReportListResponse, tags=["Reports"])
async def list_reports(
    type: str = Query(ALL_FILTER, description="Pollution type or 'all'"),
    status: str = Query(ALL_FILTER, description="pending, in-progress, resolved or 'all'"),
    limit: int = Query(default=50, ge=1, le=200),
    engine: TriageEngine = Depends(get_engine),
):
    """List reports newest first, optionally filtered by type and status."""
    reports = ReportFilter(type).visible(engine.reports())
    try:
        reports = filter_by_status(reports, status)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid status: {status}")

    reports = reports[:limit]

    return ReportListResponse(
        count=len(reports),
        filters=engine.available_filters(),
        reports=[to_report_response(r) for r in reports],
    )


@app.get("/api/v1/reports/stats/summary", response_model=ReportStatsResponse, tags=["Reports"])
async def get_report_stats(engine: TriageEngine = Depends(get_engine)):
    """Dashboard statistics for all reports."""
    return ReportStatsResponse(**engine.get_aggregates().to_dict())


@app.get("/api/v1/reports/{report_id}", response_model=ReportResponse, tags=["Reports"])
async def get_report(report_id: str, engine: TriageEngine = Depends(get_engine)):
    """Get a specific report by ID."""
    try:
        return to_report_response(engine.get_report(report_id))
    except UnknownReportId:
        raise HTTPException(status_code=404, detail="Report not found")


@app.put("/api/v1/reports/{report_id}/status", response_model=ReportResponse, tags=["Reports"])
async def update_report_status(
    report_id: str,
    status: str = Query(..., description="New status: pending, in-progress, resolved"),
    engine: TriageEngine = Depends(get_engine),
):
    """Update the triage status of a report."""
    try:
        status_enum = ReportStatus(status)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid status: {status}")

    try:
        report = engine.update_report_status(report_id, status_enum)
    except UnknownReportId:
        raise HTTPException(status_code=404, detail="Report not found")

    return to_report_response(report)


@app.post("/api/v1/reports/{report_id}/assign", response_model=TeamAssignResponse, tags=["Reports"])
async def assign_team(
    report_id: str,
    request: TeamAssignRequest,
    engine: TriageEngine = Depends(get_engine),
):
    """Notify a response team about a report."""
    try:
        assignment = engine.assign_team(report_id, request.team_name, request.team_contact)
    except UnknownReportId:
        raise HTTPException(status_code=404, detail="Report not found")
    except InvalidTeamAssignment as e:
        raise HTTPException(status_code=400, detail=str(e))

    return TeamAssignResponse(**assignment.to_dict())


# ============================================================================
# Map Routes
# ============================================================================

@app.get("/api/v1/map/markers", response_model=MarkerListResponse, tags=["Map"])
async def get_markers(
    pan_x: float = Query(0.0),
    pan_y: float = Query(0.0),
    zoom: float = Query(1.0, description="Saturated into the configured zoom range"),
    type: str = Query(ALL_FILTER, description="Pollution type or 'all'"),
    selected: Optional[str] = Query(None, description="Selected report id"),
    engine: TriageEngine = Depends(get_engine),
):
    """Marker positions, relative to the viewport center, for a camera state."""
    viewport = ViewportController(projection=engine.projection)
    viewport.set_pan(pan_x, pan_y)
    viewport.set_zoom(zoom)
    viewport.select(selected)

    reports = ReportFilter(type).visible(engine.reports())

    return MarkerListResponse(
        pan_x=viewport.pan.x,
        pan_y=viewport.pan.y,
        zoom=viewport.zoom,
        markers=[MarkerResponse(**m) for m in viewport.markers(reports)],
    )


# ============================================================================
# Main
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
