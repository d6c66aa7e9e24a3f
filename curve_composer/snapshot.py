"""
Frozen views of the scene for the renderer and the image exporter.

The exporter rasterises independently at its own resolution, so it receives
parameters rather than pixels and re-runs the same evaluator via
``ExportSnapshot.resample``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from curve_composer.evaluator import Polyline, sample_polyline
from curve_composer.handles import Handle, handles_for
from curve_composer.interaction import InteractionController
from curve_composer.models import Curve, CurveKind, CurveParams, legend_label
from curve_composer.scene import CurveScene
from curve_composer.settings import CanvasSettings, ExportSettings
from curve_composer.viewport import (
    GridLines,
    PlaneBounds,
    SurfaceRect,
    Tick,
    Viewport,
    ViewportTransform,
)


@dataclass(frozen=True, slots=True)
class CurveSnapshot:
    id: str
    kind: CurveKind
    params: CurveParams
    name: str
    color: str
    label: str
    polyline: Polyline

    @classmethod
    def capture(
        cls,
        curve: Curve,
        bounds: PlaneBounds,
        resolution: int,
        settings: CanvasSettings,
    ) -> CurveSnapshot:
        return cls(
            id=curve.id,
            kind=curve.kind,
            params=curve.params,
            name=curve.name,
            color=curve.color,
            label=legend_label(curve),
            polyline=sample_polyline(curve.params, bounds.x_min, bounds.x_max, resolution, settings),
        )


@dataclass(frozen=True, slots=True)
class HandleView:
    curve_id: str
    handle: Handle
    active: bool


@dataclass(frozen=True, slots=True)
class RenderSnapshot:
    bounds: PlaneBounds
    grid: GridLines
    ticks: tuple[Tick, ...]
    curves: tuple[CurveSnapshot, ...]
    handles: tuple[HandleView, ...]


def build_render_snapshot(scene: CurveScene, controller: InteractionController) -> RenderSnapshot:
    """Everything the canvas needs to draw one frame.

    Handles are listed only for the hovered or dragged curve.
    """
    transform = controller.transform
    bounds = transform.bounds()
    resolution = scene.settings.sample_resolution
    curves = tuple(
        CurveSnapshot.capture(c, bounds, resolution, scene.settings) for c in scene.visible_curves()
    )

    handles: list[HandleView] = []
    focused = scene.get(controller.focused_curve_id) if controller.focused_curve_id else None
    if focused is not None:
        drag = controller.drag_state
        for h in handles_for(focused):
            active = drag is not None and drag.curve_id == focused.id and drag.handle_id == h.handle_id
            handles.append(HandleView(focused.id, h, active))

    return RenderSnapshot(
        bounds=bounds,
        grid=transform.grid_lines(),
        ticks=tuple(transform.ticks()),
        curves=curves,
        handles=tuple(handles),
    )


# ===========================================================================
# Export
# ===========================================================================

@dataclass(frozen=True, slots=True)
class ExportSnapshot:
    curves: tuple[CurveSnapshot, ...]
    viewport: Viewport
    surface: SurfaceRect
    bounds: PlaneBounds
    grid: Optional[GridLines]
    ticks: tuple[Tick, ...]
    style: ExportSettings
    settings: CanvasSettings

    def resample(self, resolution: int) -> tuple[Polyline, ...]:
        """Re-sample every exported curve at *resolution* segments."""
        return tuple(
            sample_polyline(c.params, self.bounds.x_min, self.bounds.x_max, resolution, self.settings)
            for c in self.curves
        )


def build_export_snapshot(
    scene: CurveScene,
    surface: SurfaceRect,
    style: ExportSettings,
) -> ExportSnapshot:
    """Freeze the selected curves (default: all visible) with the current view."""
    transform = ViewportTransform(scene.viewport.copy(), surface, scene.settings)
    bounds = transform.bounds()

    if style.selected_curve_ids:
        wanted = set(style.selected_curve_ids)
        selected = [c for c in scene.curves if c.id in wanted]
    else:
        selected = scene.visible_curves()

    resolution = scene.settings.sample_resolution
    ticks = tuple(
        t for t in transform.ticks()
        if (t.axis == "x" and style.show_x_values) or (t.axis == "y" and style.show_y_values)
    )
    return ExportSnapshot(
        curves=tuple(CurveSnapshot.capture(c, bounds, resolution, scene.settings) for c in selected),
        viewport=transform.viewport,
        surface=surface,
        bounds=bounds,
        grid=transform.grid_lines() if style.show_grid else None,
        ticks=ticks,
        style=style,
        settings=scene.settings,
    )
