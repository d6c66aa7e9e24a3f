from __future__ import annotations

import re
from dataclasses import dataclass, field

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")

THEMES: tuple[str, ...] = ("light", "dark")


# ===========================================================================
# Canvas settings
# ===========================================================================

@dataclass(frozen=True, slots=True)
class CanvasSettings:
    base_width: float = 14.0          # plane units visible across at zoom 1
    vertical_bias: float = 0.15       # share of the visible height below y=0
    zoom_min: float = 0.1
    zoom_max: float = 50.0
    sample_resolution: int = 250
    power_law_sentinel: float = 1000.0
    power_law_clip: float = 100.0
    hit_radius_px: float = 12.0
    handle_size: float = 0.1
    curve_opacity: float = 0.12
    max_curves: int = 15
    wheel_step: float = 1200.0
    theme: str = "dark"

    def __post_init__(self) -> None:
        if self.base_width <= 0:
            raise ValueError(f"base_width must be positive, got {self.base_width}")
        if not (0.0 <= self.vertical_bias < 1.0):
            raise ValueError(f"vertical_bias must be in [0, 1), got {self.vertical_bias}")
        if not (0 < self.zoom_min < self.zoom_max):
            raise ValueError(
                f"zoom range must satisfy 0 < zoom_min < zoom_max, "
                f"got [{self.zoom_min}, {self.zoom_max}]"
            )
        if self.sample_resolution < 1:
            raise ValueError(f"sample_resolution must be >= 1, got {self.sample_resolution}")
        if self.power_law_clip <= 0:
            raise ValueError(f"power_law_clip must be positive, got {self.power_law_clip}")
        if self.hit_radius_px <= 0:
            raise ValueError(f"hit_radius_px must be positive, got {self.hit_radius_px}")
        if self.handle_size <= 0:
            raise ValueError(f"handle_size must be positive, got {self.handle_size}")
        if not (0.0 <= self.curve_opacity <= 1.0):
            raise ValueError(f"curve_opacity must be in [0, 1], got {self.curve_opacity}")
        if self.max_curves < 1:
            raise ValueError(f"max_curves must be >= 1, got {self.max_curves}")
        if self.wheel_step <= 0:
            raise ValueError(f"wheel_step must be positive, got {self.wheel_step}")
        if self.theme not in THEMES:
            raise ValueError(f"theme must be one of {THEMES}, got {self.theme!r}")

    def clamp_zoom(self, zoom: float) -> float:
        return max(self.zoom_min, min(self.zoom_max, zoom))


# ===========================================================================
# Export settings
# ===========================================================================

@dataclass(frozen=True, slots=True)
class ExportSettings:
    """Style flags handed to the rasteriser together with the curve snapshot.

    ``selected_curve_ids`` empty means "every visible curve".
    """

    title: str = "Distribution Model - 01"
    show_title: bool = True
    show_legend: bool = True
    show_grid: bool = True
    show_axes: bool = True
    show_x_values: bool = True
    show_y_values: bool = True
    background: str = "#0f172a"
    selected_curve_ids: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.title, str):
            raise ValueError(f"title must be a string, got {type(self.title).__name__}")
        if not _HEX_COLOR.match(self.background):
            raise ValueError(f"background must be a #rrggbb colour, got {self.background!r}")

    @property
    def show_scales(self) -> bool:
        return self.show_x_values or self.show_y_values
