"""
Curve model: a closed set of five parametric curve kinds.

    gaussian      A·exp(-(x-μ)² / 2σ²)
    linear        a·x + b
    quadratic     a·(x-h)² + k
    powerLaw      a·|x-h|^b + k
    exponential   a·base^(x-h) + k

Each kind has its own frozen parameter dataclass; ``CurveParams`` is their
union.  Consumers dispatch with ``match`` and close with ``assert_never`` so
that adding a kind fails type checking everywhere it is not handled.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import ClassVar, Union, assert_never

logger = logging.getLogger(__name__)


class CurveKind(str, Enum):
    GAUSSIAN = "gaussian"
    LINEAR = "linear"
    QUADRATIC = "quadratic"
    POWER_LAW = "powerLaw"
    EXPONENTIAL = "exponential"


# One pleasant, distinct colour per slot; assigned round-robin.
PALETTE: tuple[str, ...] = (
    "#3b82f6",  # blue
    "#ef4444",  # red
    "#10b981",  # emerald
    "#f59e0b",  # amber
    "#8b5cf6",  # violet
    "#ec4899",  # pink
    "#06b6d4",  # cyan
)


# ===========================================================================
# Parameter sets
# ===========================================================================

class _FiniteFields:
    """Mixin: reject NaN / inf in any dataclass field."""

    __slots__ = ()

    def __post_init__(self) -> None:
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ValueError(f"{f.name} must be a real number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"{f.name} must be finite, got {value}")


@dataclass(frozen=True, slots=True)
class GaussianParams(_FiniteFields):
    kind: ClassVar[CurveKind] = CurveKind.GAUSSIAN
    mean: float
    sigma: float
    amplitude: float

    def __post_init__(self) -> None:
        _FiniteFields.__post_init__(self)
        if self.sigma < 0:
            raise ValueError(f"sigma must be >= 0, got {self.sigma}")


@dataclass(frozen=True, slots=True)
class LinearParams(_FiniteFields):
    kind: ClassVar[CurveKind] = CurveKind.LINEAR
    slope: float
    intercept: float


@dataclass(frozen=True, slots=True)
class QuadraticParams(_FiniteFields):
    kind: ClassVar[CurveKind] = CurveKind.QUADRATIC
    a: float
    h: float
    k: float


@dataclass(frozen=True, slots=True)
class PowerLawParams(_FiniteFields):
    kind: ClassVar[CurveKind] = CurveKind.POWER_LAW
    a: float
    b: float
    h: float
    k: float


@dataclass(frozen=True, slots=True)
class ExponentialParams(_FiniteFields):
    kind: ClassVar[CurveKind] = CurveKind.EXPONENTIAL
    a: float
    base: float
    h: float
    k: float


CurveParams = Union[
    GaussianParams,
    LinearParams,
    QuadraticParams,
    PowerLawParams,
    ExponentialParams,
]


def default_params(kind: CurveKind, cx: float = 0.0, cy: float = 0.0) -> CurveParams:
    """Full parameter set for a new curve centred on (cx, cy)."""
    match kind:
        case CurveKind.GAUSSIAN:
            return GaussianParams(mean=cx, sigma=1.0, amplitude=5.0)
        case CurveKind.LINEAR:
            return LinearParams(slope=1.0, intercept=cy)
        case CurveKind.QUADRATIC:
            return QuadraticParams(a=1.0, h=cx, k=cy)
        case CurveKind.POWER_LAW:
            return PowerLawParams(a=1.0, b=0.5, h=cx, k=cy)
        case CurveKind.EXPONENTIAL:
            return ExponentialParams(a=1.0, base=2.0, h=cx, k=cy)
        case _:
            assert_never(kind)


# ===========================================================================
# Curve
# ===========================================================================

@dataclass(slots=True)
class Curve:
    id: str
    params: CurveParams
    name: str
    color: str
    visible: bool = True
    locked: bool = False

    @property
    def kind(self) -> CurveKind:
        return self.params.kind

    @property
    def interactive(self) -> bool:
        """Visible and unlocked: exposes handles and accepts drags."""
        return self.visible and not self.locked

    def with_params(self, params: CurveParams) -> bool:
        """Replace the parameter set; the kind may never change."""
        if params.kind is not self.kind:
            logger.warning(
                "Refusing %s params for %s curve %s", params.kind.value, self.kind.value, self.id
            )
            return False
        self.params = params
        return True


def reorder(curves: list[Curve], i: int, j: int) -> list[Curve]:
    """Return a new list with the curve at index *i* moved to index *j*.

    Out-of-range indices leave the order untouched.
    """
    n = len(curves)
    if not (0 <= i < n and 0 <= j < n):
        logger.warning("reorder(%d, %d) out of range for %d curves", i, j, n)
        return list(curves)
    out = list(curves)
    if i == j:
        return out
    out.insert(j, out.pop(i))
    return out


def legend_label(curve: Curve) -> str:
    """Compact one-decimal parameter summary shown next to the legend swatch."""
    p = curve.params
    match p:
        case GaussianParams():
            return f"μ:{p.mean:.1f} σ:{p.sigma:.1f}"
        case LinearParams():
            return f"a:{p.slope:.1f} b:{p.intercept:.1f}"
        case QuadraticParams():
            return f"a:{p.a:.1f} h:{p.h:.1f} k:{p.k:.1f}"
        case PowerLawParams():
            return f"a:{p.a:.1f} b:{p.b:.1f} h:{p.h:.1f} k:{p.k:.1f}"
        case ExponentialParams():
            return f"a:{p.a:.1f} base:{p.base:.1f} h:{p.h:.1f} k:{p.k:.1f}"
        case _:
            assert_never(p)
