"""
Handle model: draggable control points and their inverse updates.

Every handle sits at a position computed from the current parameters and owns
an update rule that turns a dragged plane point back into parameters.  Handles
are placed at unit (or fixed) offsets from a reference point (mean, vertex,
h) so each inverse is plain algebra:

    kind          handle            position            drag to (x, y)
    ------------  ----------------  ------------------  -------------------------------
    gaussian      mean-amplitude    (μ, A)              μ←x, A←max(0.01, y)
    gaussian      sigma             (μ+σ, f(μ+σ))       σ←max(0.05, |x-μ|)
    linear        intercept         (0, b)              b←y
    linear        slope             (1, f(1))           a←y-b
    quadratic     vertex            (h, k)              h←x, k←y
    quadratic     curvature         (h+1, f(h+1))       a←(y-k)/1²
    powerLaw      vertex            (h, k)              h←x
    powerLaw      coefficient       (h+1, f(h+1))       a←(y-k)/1^b
    powerLaw      exponent          (h+2, f(h+2))       b←log2((y-k)/a)
    exponential   vertex            (h, k+a)            h←x, k←y-a
    exponential   coefficient       (h, k+a)            a←y-k
    exponential   base              (h+1, f(h+1))       base←(y-k)/a

The exponent handle's offset of 2 and its base-2 logarithm belong together:
f(h+2) = a·2^b + k.  Changing one without the other breaks the inverse.

A rule whose guard fails (log of a non-positive ratio, division by a zero
coefficient, a non-finite result) returns the parameters unchanged.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Iterable, Optional, assert_never

from curve_composer.evaluator import evaluate
from curve_composer.models import (
    Curve,
    CurveParams,
    ExponentialParams,
    GaussianParams,
    LinearParams,
    PowerLawParams,
    QuadraticParams,
)
from curve_composer.viewport import ViewportTransform

logger = logging.getLogger(__name__)

MIN_AMPLITUDE: float = 0.01
MIN_SIGMA: float = 0.05
UNIT_OFFSET: float = 1.0
EXPONENT_OFFSET: float = 2.0   # paired with log base 2 below


@dataclass(frozen=True, slots=True)
class Handle:
    handle_id: str
    x: float
    y: float
    cursor: str = "move"


# ===========================================================================
# Positions
# ===========================================================================

def handle_positions(params: CurveParams) -> list[Handle]:
    """All handles for *params*, ignoring visibility and lock state."""
    p = params
    match p:
        case GaussianParams():
            side = p.mean + p.sigma
            return [
                Handle("mean-amplitude", p.mean, p.amplitude, "move"),
                Handle("sigma", side, evaluate(p, side), "ew-resize"),
            ]
        case LinearParams():
            return [
                Handle("intercept", 0.0, p.intercept, "ns-resize"),
                Handle("slope", 1.0, evaluate(p, 1.0), "ns-resize"),
            ]
        case QuadraticParams():
            return [
                Handle("vertex", p.h, p.k, "move"),
                Handle("curvature", p.h + UNIT_OFFSET, evaluate(p, p.h + UNIT_OFFSET), "ns-resize"),
            ]
        case PowerLawParams():
            return [
                Handle("vertex", p.h, p.k, "ew-resize"),
                Handle("coefficient", p.h + UNIT_OFFSET, evaluate(p, p.h + UNIT_OFFSET), "ns-resize"),
                Handle(
                    "exponent",
                    p.h + EXPONENT_OFFSET,
                    evaluate(p, p.h + EXPONENT_OFFSET),
                    "ns-resize",
                ),
            ]
        case ExponentialParams():
            return [
                Handle("vertex", p.h, p.k + p.a, "move"),
                Handle("coefficient", p.h, p.k + p.a, "ns-resize"),
                Handle("base", p.h + UNIT_OFFSET, evaluate(p, p.h + UNIT_OFFSET), "ns-resize"),
            ]
        case _:
            assert_never(p)


def handles_for(curve: Curve) -> list[Handle]:
    """Draggable handles of *curve*; none when it is hidden or locked."""
    if not curve.interactive:
        return []
    return handle_positions(curve.params)


def handle_ids(params: CurveParams) -> tuple[str, ...]:
    return tuple(h.handle_id for h in handle_positions(params))


# ===========================================================================
# Inverse updates
# ===========================================================================

def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def _gaussian(p: GaussianParams, handle_id: str, x: float, y: float) -> Optional[GaussianParams]:
    if handle_id == "mean-amplitude":
        return replace(p, mean=x, amplitude=max(MIN_AMPLITUDE, y))
    if handle_id == "sigma":
        return replace(p, sigma=max(MIN_SIGMA, abs(x - p.mean)))
    return None


def _linear(p: LinearParams, handle_id: str, x: float, y: float) -> Optional[LinearParams]:
    if handle_id == "intercept":
        return replace(p, intercept=y)
    if handle_id == "slope":
        return replace(p, slope=y - p.intercept)
    return None


def _quadratic(p: QuadraticParams, handle_id: str, x: float, y: float) -> Optional[QuadraticParams]:
    if handle_id == "vertex":
        return replace(p, h=x, k=y)
    if handle_id == "curvature":
        return replace(p, a=(y - p.k) / UNIT_OFFSET ** 2)
    return None


def _power_law(p: PowerLawParams, handle_id: str, x: float, y: float) -> Optional[PowerLawParams]:
    if handle_id == "vertex":
        return replace(p, h=x)
    if handle_id == "coefficient":
        a = (y - p.k) / UNIT_OFFSET ** p.b
        return replace(p, a=a) if _finite(a) else None
    if handle_id == "exponent":
        if p.a == 0:
            return None
        ratio = (y - p.k) / p.a
        if not ratio > 0:
            return None
        b = math.log(ratio) / math.log(EXPONENT_OFFSET)
        return replace(p, b=b) if _finite(b) else None
    return None


def _exponential(p: ExponentialParams, handle_id: str, x: float, y: float) -> Optional[ExponentialParams]:
    if handle_id == "vertex":
        return replace(p, h=x, k=y - p.a)
    if handle_id == "coefficient":
        return replace(p, a=y - p.k)
    if handle_id == "base":
        if p.a == 0:
            return None
        ratio = (y - p.k) / p.a
        if not ratio > 0:
            return None
        base = ratio ** (1.0 / UNIT_OFFSET)
        return replace(p, base=base) if _finite(base) else None
    return None


def apply_handle(params: CurveParams, handle_id: str, x: float, y: float) -> CurveParams:
    """Parameters after dragging *handle_id* to plane point (x, y).

    Pure.  Returns *params* itself when the drag cannot be applied.
    """
    if not _finite(x, y):
        return params

    p = params
    updated: Optional[CurveParams]
    try:
        match p:
            case GaussianParams():
                updated = _gaussian(p, handle_id, x, y)
            case LinearParams():
                updated = _linear(p, handle_id, x, y)
            case QuadraticParams():
                updated = _quadratic(p, handle_id, x, y)
            case PowerLawParams():
                updated = _power_law(p, handle_id, x, y)
            case ExponentialParams():
                updated = _exponential(p, handle_id, x, y)
            case _:
                assert_never(p)
    except (ValueError, OverflowError, ZeroDivisionError):
        # Parameter dataclasses reject non-finite results at construction.
        updated = None

    if updated is None:
        logger.debug("Handle %s on %s: no-op at (%s, %s)", handle_id, p.kind.value, x, y)
        return params
    return updated


# ===========================================================================
# Hit testing
# ===========================================================================

def hit_test(
    curves: Iterable[Curve],
    transform: ViewportTransform,
    px: float,
    py: float,
    radius_px: float,
    prefer_last: bool = False,
) -> Optional[tuple[str, str]]:
    """(curve_id, handle_id) of the handle under the pointer, if any.

    Curves later in the list draw on top and are picked first; within a curve,
    the first declared handle wins ties, or the last one with *prefer_last*
    (how the exponential coefficient is reached under its vertex).
    """
    best: Optional[tuple[str, str]] = None
    best_dist = radius_px
    for curve in reversed(list(curves)):
        for handle in handles_for(curve):
            sx, sy = transform.plane_to_screen(handle.x, handle.y)
            dist = math.hypot(sx - px, sy - py)
            if _finite(dist) and dist <= radius_px and (
                best is None or dist < best_dist or (prefer_last and dist == best_dist)
            ):
                best, best_dist = (curve.id, handle.handle_id), dist
        if best is not None:
            return best
    return best
