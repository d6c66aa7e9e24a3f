"""
Gesture state machine for the canvas.

    Idle --pointer down on background-->  Panning
    Idle --pointer down on a handle---->  DraggingHandle
    Idle|Panning --two-finger touch---->  PinchZooming
    any --pointer up / cancel / touch end-->  Idle

Handles that share a spot (the exponential vertex and coefficient) are told
apart by Shift: a Shift+press picks the later-declared one.

The current gesture is one value of the ``Gesture`` union, so combinations
such as "panning while dragging" cannot be expressed.  Every pointer move
commits immediately; there is no rollback on release.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from curve_composer.handles import apply_handle, handle_ids, hit_test
from curve_composer.scene import CurveScene
from curve_composer.viewport import SurfaceRect, ViewportTransform

logger = logging.getLogger(__name__)

WHEEL_FACTOR_RANGE: tuple[float, float] = (0.5, 2.0)


# ===========================================================================
# Gestures
# ===========================================================================

@dataclass(frozen=True, slots=True)
class Idle:
    pass


@dataclass(frozen=True, slots=True)
class Panning:
    last_x: float
    last_y: float


@dataclass(frozen=True, slots=True)
class DraggingHandle:
    curve_id: str
    handle_id: str


@dataclass(frozen=True, slots=True)
class PinchZooming:
    distance: float


Gesture = Union[Idle, Panning, DraggingHandle, PinchZooming]

IDLE = Idle()


# ===========================================================================
# Input events (device coordinates, client pixels)
# ===========================================================================

@dataclass(frozen=True, slots=True)
class PointerEvent:
    x: float
    y: float
    alternate: bool = False  # Shift held: pick the lower of stacked handles


@dataclass(frozen=True, slots=True)
class WheelEvent:
    x: float
    y: float
    delta: float  # positive zooms in


@dataclass(frozen=True, slots=True)
class TouchPoint:
    x: float
    y: float


def _distance(a: TouchPoint, b: TouchPoint) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


# ===========================================================================
# Controller
# ===========================================================================

class InteractionController:
    """Turns input events into viewport changes or handle-driven edits.

    Every handler returns True when something visible changed and the host
    should redraw.
    """

    def __init__(self, scene: CurveScene, surface: Optional[SurfaceRect] = None) -> None:
        self.scene = scene
        self.transform = ViewportTransform(scene.viewport, surface or SurfaceRect(), scene.settings)
        self.gesture: Gesture = IDLE
        self.hovered_curve_id: Optional[str] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def _set(self, gesture: Gesture) -> None:
        if gesture != self.gesture:
            logger.debug("Gesture %s -> %s", self.gesture, gesture)
        self.gesture = gesture

    @property
    def drag_state(self) -> Optional[DraggingHandle]:
        return self.gesture if isinstance(self.gesture, DraggingHandle) else None

    @property
    def focused_curve_id(self) -> Optional[str]:
        """Curve whose handles are shown: the dragged one, else the hovered one."""
        drag = self.drag_state
        return drag.curve_id if drag is not None else self.hovered_curve_id

    def resize(self, surface: SurfaceRect) -> None:
        self.transform.surface = surface

    def _hit(self, x: float, y: float, alternate: bool = False) -> Optional[tuple[str, str]]:
        return hit_test(
            self.scene.interactive_curves(),
            self.transform,
            x,
            y,
            self.scene.settings.hit_radius_px,
            prefer_last=alternate,
        )

    # ------------------------------------------------------------------
    # Pointer
    # ------------------------------------------------------------------

    def pointer_down(self, event: PointerEvent) -> bool:
        if not isinstance(self.gesture, Idle):
            return False
        hit = self._hit(event.x, event.y, event.alternate)
        if hit is not None:
            self._set(DraggingHandle(*hit))
            self.hovered_curve_id = hit[0]
        else:
            self._set(Panning(event.x, event.y))
        return True

    def begin_handle_drag(self, curve_id: str, handle_id: str) -> bool:
        """Start a drag on a named handle without hit testing."""
        if not isinstance(self.gesture, Idle):
            return False
        curve = self.scene.get(curve_id)
        if curve is None or not curve.interactive or handle_id not in handle_ids(curve.params):
            return False
        self._set(DraggingHandle(curve_id, handle_id))
        return True

    def pointer_move(self, event: PointerEvent) -> bool:
        gesture = self.gesture
        match gesture:
            case Panning():
                self.transform.pan(event.x - gesture.last_x, event.y - gesture.last_y)
                self._set(Panning(event.x, event.y))
                return True
            case DraggingHandle():
                return self._drag_to(gesture, event)
            case Idle():
                hit = self._hit(event.x, event.y)
                hovered = hit[0] if hit is not None else None
                changed = hovered != self.hovered_curve_id
                self.hovered_curve_id = hovered
                return changed
            case PinchZooming():
                return False
        return False

    def _drag_to(self, drag: DraggingHandle, event: PointerEvent) -> bool:
        curve = self.scene.get(drag.curve_id)
        if curve is None or not curve.interactive:
            logger.debug("Drag target %s gone; clearing drag", drag.curve_id)
            self._set(IDLE)
            self.hovered_curve_id = None
            return True
        x, y = self.transform.screen_to_plane(event.x, event.y)
        updated = apply_handle(curve.params, drag.handle_id, x, y)
        if updated is curve.params:
            return False
        return curve.with_params(updated)

    def pointer_up(self, event: Optional[PointerEvent] = None) -> bool:
        was_active = not isinstance(self.gesture, Idle)
        self._set(IDLE)
        return was_active

    def pointer_cancel(self) -> bool:
        return self.pointer_up()

    # ------------------------------------------------------------------
    # Touch
    # ------------------------------------------------------------------

    def touch_start(self, points: Sequence[TouchPoint]) -> bool:
        if len(points) >= 2:
            if isinstance(self.gesture, (Idle, Panning)):
                self._set(PinchZooming(_distance(points[0], points[1])))
                return True
            return False
        if len(points) == 1:
            return self.pointer_down(PointerEvent(points[0].x, points[0].y))
        return False

    def touch_move(self, points: Sequence[TouchPoint]) -> bool:
        gesture = self.gesture
        if isinstance(gesture, PinchZooming):
            if len(points) < 2:
                return False
            a, b = points[0], points[1]
            distance = _distance(a, b)
            changed = False
            if gesture.distance > 0 and distance > 0:
                mid_x, mid_y = (a.x + b.x) / 2, (a.y + b.y) / 2
                before = self.scene.viewport.zoom
                self.transform.zoom_at(mid_x, mid_y, distance / gesture.distance)
                changed = self.scene.viewport.zoom != before
            self._set(PinchZooming(distance))
            return changed
        if len(points) == 1:
            return self.pointer_move(PointerEvent(points[0].x, points[0].y))
        return False

    def touch_end(self) -> bool:
        return self.pointer_up()

    def touch_cancel(self) -> bool:
        return self.pointer_up()

    # ------------------------------------------------------------------
    # Wheel
    # ------------------------------------------------------------------

    def wheel_factor(self, delta: float) -> float:
        if not math.isfinite(delta):
            return 1.0
        lo, hi = WHEEL_FACTOR_RANGE
        return max(lo, min(hi, 1.0 + delta / self.scene.settings.wheel_step))

    def wheel(self, event: WheelEvent) -> bool:
        """Discrete zoom about the cursor; ignored while a handle is dragged."""
        if isinstance(self.gesture, DraggingHandle):
            return False
        before = self.scene.viewport.zoom
        self.transform.zoom_at(event.x, event.y, self.wheel_factor(event.delta))
        return self.scene.viewport.zoom != before
