"""
Viewport transform: the affine map between render-surface pixels and the
mathematical plane.

The visible plane rectangle is ``base_width / zoom`` units wide; its height
follows the surface aspect ratio so that plane units stay square.  The origin
sits ``vertical_bias`` of the height above the bottom edge rather than in the
centre, which suits curves that mostly live above the x-axis.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from curve_composer.evaluator import FloatArray
from curve_composer.settings import CanvasSettings

logger = logging.getLogger(__name__)

# (exclusive zoom threshold, step) pairs, checked in order.
_FINE_STEPS: tuple[tuple[float, float], ...] = ((20.0, 0.1), (5.0, 0.2), (2.0, 0.5))
_COARSE_STEPS: tuple[tuple[float, float], ...] = ((0.2, 5.0), (0.5, 2.0))


# ===========================================================================
# Data-classes
# ===========================================================================

@dataclass(slots=True)
class Point:
    x: float = 0.0
    y: float = 0.0

    def __iter__(self):
        return iter((self.x, self.y))


@dataclass(slots=True)
class Viewport:
    """Process-wide view state: pan offset in plane units and zoom factor."""

    pan_offset: Point = field(default_factory=Point)
    zoom: float = 1.0

    def reset(self) -> None:
        self.pan_offset = Point(0.0, 0.0)
        self.zoom = 1.0
        logger.info("Viewport reset")

    def copy(self) -> Viewport:
        return Viewport(Point(self.pan_offset.x, self.pan_offset.y), self.zoom)


@dataclass(frozen=True, slots=True)
class SurfaceRect:
    """Render-surface geometry in client pixels, owned by the host UI."""

    left: float = 0.0
    top: float = 0.0
    width: float = 1000.0
    height: float = 600.0

    @property
    def safe_width(self) -> float:
        return self.width if self.width > 0 else 1.0

    @property
    def safe_height(self) -> float:
        return self.height if self.height > 0 else 1.0

    @property
    def aspect(self) -> float:
        return self.safe_width / self.safe_height


@dataclass(frozen=True, slots=True)
class PlaneBounds:
    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min


@dataclass(frozen=True, slots=True)
class GridLines:
    xs: FloatArray
    ys: FloatArray
    step: float


@dataclass(frozen=True, slots=True)
class Tick:
    axis: str        # "x" or "y"
    value: float
    label: str


# ===========================================================================
# Transform
# ===========================================================================

class ViewportTransform:
    """Bidirectional screen <-> plane mapping bound to a viewport and surface.

    The transform reads the viewport live, so pans and zooms applied through
    it (or elsewhere) are visible immediately.
    """

    def __init__(
        self,
        viewport: Viewport,
        surface: SurfaceRect,
        settings: Optional[CanvasSettings] = None,
    ) -> None:
        self.viewport = viewport
        self.surface = surface
        self.settings = settings or CanvasSettings()

    # ------------------------------------------------------------------
    # Extent
    # ------------------------------------------------------------------

    def _math_width(self, zoom: float) -> float:
        return self.settings.base_width / zoom

    def _math_height(self, zoom: float) -> float:
        return self._math_width(zoom) / self.surface.aspect

    @property
    def math_width(self) -> float:
        return self._math_width(self.viewport.zoom)

    @property
    def math_height(self) -> float:
        return self._math_height(self.viewport.zoom)

    def bounds(self) -> PlaneBounds:
        mw, mh = self.math_width, self.math_height
        pan = self.viewport.pan_offset
        y_min = -mh * self.settings.vertical_bias + pan.y
        return PlaneBounds(
            x_min=-mw / 2 + pan.x,
            x_max=mw / 2 + pan.x,
            y_min=y_min,
            y_max=y_min + mh,
        )

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def screen_to_plane(self, px: float, py: float) -> tuple[float, float]:
        """Client pixel -> plane point.  Screen y grows down, plane y grows up."""
        b = self.bounds()
        fx = (px - self.surface.left) / self.surface.safe_width
        fy = (py - self.surface.top) / self.surface.safe_height
        return b.x_min + fx * b.width, b.y_min + (1.0 - fy) * b.height

    def plane_to_screen(self, x: float, y: float) -> tuple[float, float]:
        b = self.bounds()
        fx = (x - b.x_min) / b.width
        fy = 1.0 - (y - b.y_min) / b.height
        return (
            self.surface.left + fx * self.surface.safe_width,
            self.surface.top + fy * self.surface.safe_height,
        )

    def screen_delta_to_plane(self, dx: float, dy: float) -> tuple[float, float]:
        """Pixel movement -> plane movement, y flipped."""
        return (
            dx * self.math_width / self.surface.safe_width,
            -dy * self.math_height / self.surface.safe_height,
        )

    # ------------------------------------------------------------------
    # Pan / zoom
    # ------------------------------------------------------------------

    def pan(self, dx: float, dy: float) -> None:
        """Move the view by a pixel drag; dragging right moves the view left."""
        pan = self.viewport.pan_offset
        pan.x -= dx * self.math_width / self.surface.safe_width
        pan.y += dy * self.math_height / self.surface.safe_height

    def zoom_at(self, px: float, py: float, factor: float) -> None:
        """Scale zoom by *factor* keeping the plane point under (px, py) fixed."""
        if not math.isfinite(factor) or factor <= 0:
            logger.debug("Ignoring zoom factor %r", factor)
            return

        anchor_x, anchor_y = self.screen_to_plane(px, py)
        old_zoom = self.viewport.zoom
        new_zoom = self.settings.clamp_zoom(old_zoom * factor)
        if new_zoom != old_zoom * factor:
            logger.debug("Zoom clamped to %s", new_zoom)
        if new_zoom == old_zoom:
            return

        fx = (px - self.surface.left) / self.surface.safe_width
        fy = (py - self.surface.top) / self.surface.safe_height
        mw, mh = self._math_width(new_zoom), self._math_height(new_zoom)

        self.viewport.zoom = new_zoom
        # Solve x_min' + fx*mw = anchor_x and y_min' + (1-fy)*mh = anchor_y
        self.viewport.pan_offset = Point(
            anchor_x + mw / 2 - fx * mw,
            anchor_y + mh * self.settings.vertical_bias - (1.0 - fy) * mh,
        )

    # ------------------------------------------------------------------
    # Grid and ticks
    # ------------------------------------------------------------------

    def grid_step(self) -> float:
        zoom = self.viewport.zoom
        for threshold, step in _FINE_STEPS:
            if zoom > threshold:
                return step
        for threshold, step in _COARSE_STEPS:
            if zoom < threshold:
                return step
        return 1.0

    @staticmethod
    def _multiples(lo: float, hi: float, step: float) -> FloatArray:
        first = math.floor(lo / step)
        last = math.ceil(hi / step)
        # Round away float noise so 0.1 * 3 prints as 0.3
        return np.round(np.arange(first, last + 1, dtype=np.float64) * step, 10)

    def grid_lines(self) -> GridLines:
        b = self.bounds()
        step = self.grid_step()
        return GridLines(
            xs=self._multiples(b.x_min, b.x_max, step),
            ys=self._multiples(b.y_min, b.y_max, step),
            step=step,
        )

    def ticks(self) -> list[Tick]:
        grid = self.grid_lines()
        decimals = max(0, -math.floor(math.log10(grid.step))) if grid.step < 1 else 0
        out: list[Tick] = []
        for axis, values in (("x", grid.xs), ("y", grid.ys)):
            for v in values:
                if v == 0:
                    continue
                out.append(Tick(axis=axis, value=float(v), label=f"{v:.{decimals}f}"))
        return out
