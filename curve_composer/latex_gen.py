from __future__ import annotations

from typing import assert_never

import sympy as sp

from curve_composer.models import (
    CurveParams,
    ExponentialParams,
    GaussianParams,
    LinearParams,
    PowerLawParams,
    QuadraticParams,
)


# ===========================================================================
# Formula generator
# ===========================================================================

class FormulaGenerator:
    """Converts curve parameters -> inline LaTeX for legends and captions.

    Parameters
    ----------
    approx : bool
        When True (default) coefficients are rendered as rounded decimals
        with *decimals* digits after the point.  When False, exact rational
        fractions are used.
    decimals : int
        Number of digits after the decimal point in approximate mode.
    """

    def __init__(self, approx: bool = True, decimals: int = 2) -> None:
        self.approx = approx
        self.decimals = max(0, min(10, int(decimals)))

    def reconfigure(self, approx: bool, decimals: int) -> None:
        """Update mode in place."""
        self.approx = approx
        self.decimals = max(0, min(10, int(decimals)))

    def generate(self, params: CurveParams) -> str:
        x = sp.Symbol("x")
        n = self._n
        p = params
        match p:
            case GaussianParams():
                if p.sigma == 0:
                    expr = n(p.amplitude) * sp.KroneckerDelta(x, n(p.mean))
                else:
                    expr = n(p.amplitude) * sp.exp(-((x - n(p.mean)) ** 2) / (2 * n(p.sigma) ** 2))
            case LinearParams():
                expr = n(p.slope) * x + n(p.intercept)
            case QuadraticParams():
                expr = n(p.a) * (x - n(p.h)) ** 2 + n(p.k)
            case PowerLawParams():
                expr = n(p.a) * sp.Abs(x - n(p.h)) ** n(p.b) + n(p.k)
            case ExponentialParams():
                expr = n(p.a) * sp.Pow(n(p.base), x - n(p.h), evaluate=False) + n(p.k)
            case _:
                assert_never(p)
        return self._wrap(expr)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _n(self, v: float) -> sp.Expr:
        """Convert float to sympy number respecting approx mode.

        Approx mode  → sp.Float with string representation at self.decimals places.
        Exact mode   → sp.Rational with denominator ≤ 1000 (exact fraction).
        """
        if self.approx:
            return sp.Float(f"{v:.{self.decimals}f}")
        return sp.Rational(v).limit_denominator(1000)

    def _round_floats(self, expr: sp.Basic) -> sp.Basic:
        """Walk *expr* and round every sp.Float leaf to self.decimals places.

        Arithmetic on already-rounded inputs (2σ², say) can still produce
        more digits than requested.
        """
        if isinstance(expr, sp.Float):
            return sp.Float(f"{float(expr):.{self.decimals}f}")
        if expr.args:
            return expr.func(*[self._round_floats(a) for a in expr.args])
        return expr

    def _wrap(self, expr: sp.Basic) -> str:
        if self.approx:
            return f"$f(x) = {sp.latex(self._round_floats(expr))}$"
        return f"$f(x) = {sp.latex(expr)}$"
