from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

from curve_composer.models import (
    PALETTE,
    Curve,
    CurveKind,
    CurveParams,
    default_params,
    reorder,
)
from curve_composer.settings import CanvasSettings
from curve_composer.viewport import Viewport

logger = logging.getLogger(__name__)


def _random_id() -> str:
    return uuid.uuid4().hex[:9]


class CurveScene:
    """The live, ordered curve list plus the viewport it is seen through.

    List order is draw order: later curves are drawn on top.  All state is
    in memory only.
    """

    def __init__(
        self,
        settings: Optional[CanvasSettings] = None,
        id_factory: Callable[[], str] = _random_id,
    ) -> None:
        self.settings = settings or CanvasSettings()
        self.viewport = Viewport()
        self.curves: list[Curve] = []
        self._id_factory = id_factory
        self._color_index = 0

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, curve_id: str) -> Optional[Curve]:
        return next((c for c in self.curves if c.id == curve_id), None)

    def index_of(self, curve_id: str) -> int:
        return next((i for i, c in enumerate(self.curves) if c.id == curve_id), -1)

    def visible_curves(self) -> list[Curve]:
        return [c for c in self.curves if c.visible]

    def interactive_curves(self) -> list[Curve]:
        return [c for c in self.curves if c.interactive]

    def __len__(self) -> int:
        return len(self.curves)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def add_curve(
        self,
        kind: CurveKind,
        name: Optional[str] = None,
        params: Optional[CurveParams] = None,
    ) -> Optional[Curve]:
        """Create a curve near the current view centre; None once the scene is full."""
        if len(self.curves) >= self.settings.max_curves:
            logger.warning("Curve limit (%d) reached; not adding %s", self.settings.max_curves, kind.value)
            return None
        if params is not None and params.kind is not kind:
            logger.warning("Params of kind %s given for a %s curve", params.kind.value, kind.value)
            return None

        curve_id = self._id_factory()
        while self.get(curve_id) is not None:
            curve_id = self._id_factory()

        pan = self.viewport.pan_offset
        curve = Curve(
            id=curve_id,
            params=params if params is not None else default_params(kind, pan.x, pan.y),
            name=name or f"Curve {len(self.curves) + 1}",
            color=PALETTE[self._color_index % len(PALETTE)],
        )
        self._color_index += 1
        self.curves.append(curve)
        logger.info("Added %s curve %s (%s)", kind.value, curve.id, curve.name)
        return curve

    def delete_curve(self, curve_id: str) -> bool:
        idx = self.index_of(curve_id)
        if idx < 0:
            logger.warning("delete: unknown curve %s", curve_id)
            return False
        del self.curves[idx]
        logger.info("Deleted curve %s", curve_id)
        return True

    def clear(self) -> None:
        self.curves.clear()
        logger.info("Cleared all curves")

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def update_params(self, curve_id: str, params: CurveParams) -> bool:
        """Direct numeric edit from the editor panel; allowed on locked curves."""
        curve = self.get(curve_id)
        if curve is None:
            logger.warning("update_params: unknown curve %s", curve_id)
            return False
        return curve.with_params(params)

    def update_style(
        self,
        curve_id: str,
        *,
        name: Optional[str] = None,
        color: Optional[str] = None,
        visible: Optional[bool] = None,
        locked: Optional[bool] = None,
    ) -> bool:
        curve = self.get(curve_id)
        if curve is None:
            logger.warning("update_style: unknown curve %s", curve_id)
            return False
        if name is not None:
            curve.name = name
        if color is not None:
            curve.color = color
        if visible is not None:
            curve.visible = visible
        if locked is not None:
            curve.locked = locked
        return True

    def move_curve(self, i: int, j: int) -> None:
        self.curves = reorder(self.curves, i, j)

    def reset_view(self) -> None:
        self.viewport.reset()
