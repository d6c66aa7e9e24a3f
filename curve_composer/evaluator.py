from __future__ import annotations

from typing import Any, Optional, Union, assert_never

import numpy as np
from numpy.typing import NDArray

from curve_composer.models import (
    Curve,
    CurveParams,
    ExponentialParams,
    GaussianParams,
    LinearParams,
    PowerLawParams,
    QuadraticParams,
)
from curve_composer.settings import CanvasSettings

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

FloatArray = NDArray[np.floating[Any]]
Polyline = FloatArray  # shape (N, 2): columns x, y; rows ascending in x

_DEFAULTS = CanvasSettings()


def _params(target: Union[Curve, CurveParams]) -> CurveParams:
    return target.params if isinstance(target, Curve) else target


# ===========================================================================
# Closed-form evaluation
# ===========================================================================

def evaluate_array(
    target: Union[Curve, CurveParams],
    xs: FloatArray,
    settings: Optional[CanvasSettings] = None,
) -> FloatArray:
    """Vectorised y = f(x).  Never raises; IEEE inf / nan propagate as values.

    Singularities:
      * gaussian with σ = 0 gives A exactly at x = μ and 0 elsewhere;
      * power law at x = h with b < 0 gives ``power_law_sentinel``.
    """
    s = settings or _DEFAULTS
    p = _params(target)
    x = np.asarray(xs, dtype=np.float64)

    with np.errstate(all="ignore"):
        match p:
            case GaussianParams():
                if p.sigma == 0:
                    return np.where(x == p.mean, p.amplitude, 0.0).astype(np.float64)
                return p.amplitude * np.exp(-((x - p.mean) ** 2) / (2.0 * p.sigma ** 2))
            case LinearParams():
                return p.slope * x + p.intercept
            case QuadraticParams():
                return p.a * (x - p.h) ** 2 + p.k
            case PowerLawParams():
                dist = np.abs(x - p.h)
                y = p.a * np.power(dist, p.b) + p.k
                if p.b < 0:
                    y = np.where(dist == 0, s.power_law_sentinel, y)
                return np.asarray(y, dtype=np.float64)
            case ExponentialParams():
                return p.a * np.power(p.base, x - p.h) + p.k
            case _:
                assert_never(p)


def evaluate(
    target: Union[Curve, CurveParams],
    x: float,
    settings: Optional[CanvasSettings] = None,
) -> float:
    """Scalar y = f(x) sharing the vectorised formula bit for bit."""
    return float(evaluate_array(target, np.asarray([x], dtype=np.float64), settings)[0])


# ===========================================================================
# Polyline sampling
# ===========================================================================

def sample_polyline(
    target: Union[Curve, CurveParams],
    x_min: float,
    x_max: float,
    resolution: int = _DEFAULTS.sample_resolution,
    settings: Optional[CanvasSettings] = None,
) -> Polyline:
    """Sample the curve over [x_min, x_max] as an (N, 2) array.

    N is ``resolution + 1`` evenly spaced points, inclusive of both ends,
    except for lines, which are fully described by their two endpoints.
    An empty range (``x_min == x_max``) yields the single point at x_min.
    Power-law samples are clipped to ``±power_law_clip`` for drawing only.
    """
    s = settings or _DEFAULTS
    p = _params(target)
    if x_min > x_max:
        x_min, x_max = x_max, x_min
    n = max(1, int(resolution))

    if x_min == x_max:
        xs = np.array([x_min], dtype=np.float64)
    elif isinstance(p, LinearParams):
        xs = np.array([x_min, x_max], dtype=np.float64)
    else:
        xs = np.linspace(x_min, x_max, n + 1, dtype=np.float64)

    ys = evaluate_array(p, xs, s)
    if isinstance(p, PowerLawParams):
        ys = np.clip(ys, -s.power_law_clip, s.power_law_clip)
    return np.column_stack((xs, ys))
