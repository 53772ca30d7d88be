"""
Viewport Module for EcoVision

Pan/zoom camera for the report map. Reports are projected once onto the
plane; the camera only changes how that plane is drawn, so every marker
stays pinned to its geographic point.

Render coordinates are measured from the viewport's visual center (the
transform origin):

    render = pan + projected * zoom
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ecovision.core.config import settings
from ecovision.core.geo_utils import GeoProjection
from ecovision.crowdsource.report_store import Report

logger = logging.getLogger(__name__)

PRIMARY_BUTTON = 0


@dataclass(frozen=True)
class Vector:
    """2D point or offset on the render plane."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Vector") -> "Vector":
        return Vector(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector") -> "Vector":
        return Vector(self.x - other.x, self.y - other.y)

    def scaled(self, factor: float) -> "Vector":
        return Vector(self.x * factor, self.y * factor)

    def distance_to(self, other: "Vector") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Idle:
    """No drag in progress."""


@dataclass(frozen=True)
class Dragging:
    """Drag in progress; pan follows pointer - anchor."""
    anchor: Vector


DragState = Union[Idle, Dragging]


@dataclass
class ViewportState:
    """Camera state of one open map view."""
    pan: Vector = field(default_factory=Vector)
    zoom: float = 1.0
    selected_report_id: Optional[str] = None
    drag_state: DragState = field(default_factory=Idle)

    @property
    def is_dragging(self) -> bool:
        return isinstance(self.drag_state, Dragging)

    def to_dict(self) -> Dict[str, object]:
        return {
            "pan": {"x": self.pan.x, "y": self.pan.y},
            "zoom": self.zoom,
            "selected_report_id": self.selected_report_id,
            "dragging": self.is_dragging,
        }


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class ViewportController:
    """
    Owns a ViewportState and interprets pointer/wheel input.

    Zoom writes saturate into [zoom_min, zoom_max]; no viewport input
    ever raises.
    """

    def __init__(
        self,
        projection: Optional[GeoProjection] = None,
        state: Optional[ViewportState] = None,
        zoom_min: Optional[float] = None,
        zoom_max: Optional[float] = None,
        wheel_step: Optional[float] = None,
        button_step: Optional[float] = None,
        hit_radius: Optional[float] = None,
    ):
        self.projection = projection or GeoProjection()
        self.zoom_min = settings.zoom_min if zoom_min is None else zoom_min
        self.zoom_max = settings.zoom_max if zoom_max is None else zoom_max
        self.wheel_step = settings.wheel_zoom_step if wheel_step is None else wheel_step
        self.button_step = settings.button_zoom_step if button_step is None else button_step
        self.hit_radius = settings.marker_hit_radius if hit_radius is None else hit_radius

        if self.zoom_min > self.zoom_max:
            raise ValueError(f"zoom_min {self.zoom_min} exceeds zoom_max {self.zoom_max}")

        self.state = state or ViewportState()
        self.state.zoom = self._saturate_zoom(self.state.zoom, fallback=1.0)

    # -------------------------------------------------------------------------
    # Camera
    # -------------------------------------------------------------------------

    @property
    def pan(self) -> Vector:
        return self.state.pan

    @property
    def zoom(self) -> float:
        return self.state.zoom

    def set_pan(self, x: float, y: float) -> Vector:
        """Set the pan offset; non-finite components are ignored."""
        new_x = x if math.isfinite(x) else self.state.pan.x
        new_y = y if math.isfinite(y) else self.state.pan.y
        self.state.pan = Vector(new_x, new_y)
        return self.state.pan

    def set_zoom(self, value: float) -> float:
        self.state.zoom = self._saturate_zoom(value)
        return self.state.zoom

    def zoom_by(self, delta: float) -> float:
        return self.set_zoom(self.state.zoom + delta)

    def zoom_in(self) -> float:
        return self.zoom_by(self.button_step)

    def zoom_out(self) -> float:
        return self.zoom_by(-self.button_step)

    def wheel(self, delta_y: float) -> float:
        """
        One scroll notch: down (positive delta) zooms out, up zooms in.

        A zero or non-finite delta leaves zoom unchanged.
        """
        if not math.isfinite(delta_y) or delta_y == 0:
            return self.state.zoom
        step = -self.wheel_step if delta_y > 0 else self.wheel_step
        return self.zoom_by(step)

    def _saturate_zoom(self, value: float, fallback: Optional[float] = None) -> float:
        if math.isnan(value):
            value = self.state.zoom if fallback is None else fallback
        return clamp(value, self.zoom_min, self.zoom_max)

    # -------------------------------------------------------------------------
    # Drag state machine
    # -------------------------------------------------------------------------

    def begin_drag(self, x: float, y: float, button: int = PRIMARY_BUTTON) -> bool:
        """
        Idle -> Dragging on a primary-button press.

        Returns:
            True if a drag started
        """
        if button != PRIMARY_BUTTON or not (math.isfinite(x) and math.isfinite(y)):
            return False
        self.state.drag_state = Dragging(anchor=Vector(x, y) - self.state.pan)
        return True

    def update_drag(self, x: float, y: float) -> Vector:
        """Pointer move: while dragging, pan = pointer - anchor."""
        drag = self.state.drag_state
        if isinstance(drag, Dragging):
            self.set_pan(x - drag.anchor.x, y - drag.anchor.y)
        return self.state.pan

    def end_drag(self) -> None:
        """
        Pointer release, wherever it happened.

        Callers must route releases from outside the map surface here too,
        otherwise a drag that leaves the surface never terminates.
        """
        self.state.drag_state = Idle()

    def pointer_down(
        self,
        screen_x: float,
        screen_y: float,
        reports: Sequence[Report] = (),
        viewport_size: Tuple[float, float] = (0.0, 0.0),
        button: int = PRIMARY_BUTTON,
    ) -> Optional[Report]:
        """
        Press on the map surface.

        A press on a marker selects that report and is consumed, so no
        drag begins. Otherwise a primary press starts dragging.

        Args:
            screen_x, screen_y: Pointer position in surface pixels
            reports: Reports currently drawn (hit-test candidates)
            viewport_size: (width, height) of the surface
            button: Pointer button, 0 is primary

        Returns:
            The report hit, if any
        """
        hit = self.hit_test(screen_x, screen_y, reports, viewport_size)
        if hit is not None:
            self.select(hit.id)
            return hit

        self.begin_drag(screen_x, screen_y, button)
        return None

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render_point(self, point: Tuple[float, float]) -> Vector:
        """Camera transform of a projected point, relative to the view center."""
        px, py = point
        return self.state.pan + Vector(px, py).scaled(self.state.zoom)

    def render_position(self, report: Report) -> Vector:
        return self.render_point(self.projection.project_location(report.location))

    def screen_position(
        self,
        report: Report,
        viewport_size: Tuple[float, float]
    ) -> Vector:
        """Absolute surface pixel of a report's marker."""
        width, height = viewport_size
        return Vector(width / 2.0, height / 2.0) + self.render_position(report)

    def markers(
        self,
        reports: Sequence[Report],
        viewport_size: Optional[Tuple[float, float]] = None
    ) -> List[Dict[str, object]]:
        """Render placement for each report, in drawing order."""
        placed = []
        for report in reports:
            if viewport_size is None:
                pos = self.render_position(report)
            else:
                pos = self.screen_position(report, viewport_size)
            placed.append({
                "id": report.id,
                "x": pos.x,
                "y": pos.y,
                "type": report.type.value,
                "level": report.level.value,
                "selected": report.id == self.state.selected_report_id,
            })
        return placed

    def screen_to_geo(
        self,
        screen_x: float,
        screen_y: float,
        viewport_size: Tuple[float, float]
    ) -> Tuple[float, float]:
        """Geographic (lat, lng) under a surface pixel."""
        width, height = viewport_size
        rel = Vector(screen_x - width / 2.0, screen_y - height / 2.0) - self.state.pan
        plane = rel.scaled(1.0 / self.state.zoom)
        return self.projection.unproject(plane.x, plane.y)

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def hit_test(
        self,
        screen_x: float,
        screen_y: float,
        reports: Sequence[Report],
        viewport_size: Tuple[float, float] = (0.0, 0.0)
    ) -> Optional[Report]:
        """
        Marker under the pointer, if any.

        The closest marker within hit_radius wins; on equal distance the
        one drawn last (on top) wins.
        """
        pointer = Vector(screen_x, screen_y)
        best: Optional[Report] = None
        best_distance = math.inf

        for report in reports:
            distance = self.screen_position(report, viewport_size).distance_to(pointer)
            if distance <= self.hit_radius and distance <= best_distance:
                best = report
                best_distance = distance

        return best

    def select(self, report_id: Optional[str]) -> None:
        """Replace the selection; None clears it."""
        self.state.selected_report_id = report_id
        if report_id is not None:
            logger.debug(f"Report {report_id} selected")

    def clear_selection(self) -> None:
        self.state.selected_report_id = None

    def selected(self, reports: Sequence[Report]) -> Optional[Report]:
        """Resolve the selection against the given reports."""
        report_id = self.state.selected_report_id
        if report_id is None:
            return None
        for report in reports:
            if report.id == report_id:
                return report
        return None
