"""Tests for handle positions, inverse updates and hit testing."""

import math
from dataclasses import astuple

import pytest

from curve_composer.handles import (
    MIN_AMPLITUDE,
    MIN_SIGMA,
    apply_handle,
    handle_ids,
    handle_positions,
    handles_for,
    hit_test,
)
from curve_composer.models import (
    Curve,
    ExponentialParams,
    GaussianParams,
    LinearParams,
    PowerLawParams,
    QuadraticParams,
)

SAMPLE_PARAMS = [
    GaussianParams(0.0, 1.0, 5.0),
    GaussianParams(-1.5, 0.4, 2.25),
    LinearParams(1.0, 0.0),
    LinearParams(-0.75, 2.5),
    QuadraticParams(1.0, 0.0, 0.0),
    QuadraticParams(-2.0, 1.5, 3.0),
    PowerLawParams(1.0, 0.5, 0.0, 0.0),
    PowerLawParams(-1.5, 1.8, 2.0, 1.0),
    ExponentialParams(1.0, 2.0, 0.0, 0.0),
    ExponentialParams(0.5, 3.0, -1.0, 2.0),
]


def _curve(params, curve_id="c", **kw):
    return Curve(id=curve_id, params=params, name=curve_id, color="#3b82f6", **kw)


def _same(a, b):
    return type(a) is type(b) and astuple(a) == pytest.approx(astuple(b), rel=1e-9, abs=1e-12)


class TestPositions:
    """Tests for handle_positions()."""

    def test_ids_per_kind(self):
        assert handle_ids(GaussianParams(0.0, 1.0, 5.0)) == ("mean-amplitude", "sigma")
        assert handle_ids(LinearParams(1.0, 0.0)) == ("intercept", "slope")
        assert handle_ids(QuadraticParams(1.0, 0.0, 0.0)) == ("vertex", "curvature")
        assert handle_ids(PowerLawParams(1.0, 0.5, 0.0, 0.0)) == ("vertex", "coefficient", "exponent")
        assert handle_ids(ExponentialParams(1.0, 2.0, 0.0, 0.0)) == ("vertex", "coefficient", "base")

    def test_gaussian_positions(self):
        """Peak handle at (μ, A); width handle on the curve one σ right."""
        peak, side = handle_positions(GaussianParams(1.0, 2.0, 4.0))
        assert (peak.x, peak.y) == (1.0, 4.0)
        assert side.x == 3.0
        assert side.y == pytest.approx(4.0 * math.exp(-0.5))

    def test_power_law_exponent_offset(self):
        """The exponent handle sits two units right of h."""
        *_, exponent = handle_positions(PowerLawParams(1.0, 3.0, 1.0, 0.0))
        assert (exponent.x, exponent.y) == (3.0, 8.0)

    def test_exponential_shared_position(self):
        """Vertex and coefficient share (h, k+a)."""
        vertex, coeff, base = handle_positions(ExponentialParams(2.0, 3.0, 1.0, -1.0))
        assert (vertex.x, vertex.y) == (coeff.x, coeff.y) == (1.0, 1.0)
        assert (base.x, base.y) == (2.0, 5.0)

    def test_locked_or_hidden_has_no_handles(self):
        assert handles_for(_curve(LinearParams(1.0, 0.0), locked=True)) == []
        assert handles_for(_curve(LinearParams(1.0, 0.0), visible=False)) == []
        assert len(handles_for(_curve(LinearParams(1.0, 0.0)))) == 2


class TestApplyHandle:
    """Tests for apply_handle()."""

    @pytest.mark.parametrize("params", SAMPLE_PARAMS)
    def test_drag_to_own_position_is_identity(self, params):
        """Dropping a handle where it already is leaves the parameters unchanged."""
        for handle in handle_positions(params):
            updated = apply_handle(params, handle.handle_id, handle.x, handle.y)
            assert _same(updated, params), handle.handle_id

    def test_gaussian_peak_drag(self):
        """Dragging (μ, A) from (0, 5) to (2, 3) keeps σ."""
        out = apply_handle(GaussianParams(0.0, 1.0, 5.0), "mean-amplitude", 2.0, 3.0)
        assert out == GaussianParams(2.0, 1.0, 3.0)

    def test_gaussian_amplitude_floor(self):
        out = apply_handle(GaussianParams(0.0, 1.0, 5.0), "mean-amplitude", 0.0, -2.0)
        assert out.amplitude == MIN_AMPLITUDE

    def test_gaussian_sigma_floor(self):
        """Collapsing the width handle onto μ stops at the minimum σ."""
        out = apply_handle(GaussianParams(1.0, 1.0, 5.0), "sigma", 1.0, 0.0)
        assert out.sigma == MIN_SIGMA

    def test_gaussian_sigma_either_side(self):
        """Width is the absolute distance from μ."""
        out = apply_handle(GaussianParams(1.0, 1.0, 5.0), "sigma", -1.5, 0.0)
        assert out.sigma == 2.5

    def test_linear_handles(self):
        p = LinearParams(1.0, 1.0)
        assert apply_handle(p, "intercept", 5.0, -2.0) == LinearParams(1.0, -2.0)
        assert apply_handle(p, "slope", 1.0, 4.0) == LinearParams(3.0, 1.0)

    def test_quadratic_curvature(self):
        """Dragging the curvature handle of x² to (1, 5) gives a = 5."""
        out = apply_handle(QuadraticParams(1.0, 0.0, 0.0), "curvature", 1.0, 5.0)
        assert out == QuadraticParams(5.0, 0.0, 0.0)

    def test_quadratic_vertex(self):
        out = apply_handle(QuadraticParams(1.0, 0.0, 0.0), "vertex", -2.0, 1.5)
        assert out == QuadraticParams(1.0, -2.0, 1.5)

    def test_power_law_vertex_moves_h_only(self):
        out = apply_handle(PowerLawParams(1.0, 0.5, 0.0, 0.0), "vertex", 3.0, 9.0)
        assert out == PowerLawParams(1.0, 0.5, 3.0, 0.0)

    def test_power_law_exponent(self):
        """y = 4 two units right of h with a = 1 means 2^b = 4."""
        out = apply_handle(PowerLawParams(1.0, 0.5, 0.0, 0.0), "exponent", 2.0, 4.0)
        assert out.b == pytest.approx(2.0)

    def test_power_law_coefficient(self):
        out = apply_handle(PowerLawParams(1.0, 0.5, 0.0, 1.0), "coefficient", 1.0, 4.0)
        assert out.a == 3.0

    def test_exponential_base(self):
        """y = 3 one unit right of h with a = 1, k = 0 means base = 3."""
        out = apply_handle(ExponentialParams(1.0, 2.0, 0.0, 0.0), "base", 1.0, 3.0)
        assert out.base == pytest.approx(3.0)

    def test_exponential_base_scaled_by_a(self):
        """The base rule divides by a and guards only on a = 0."""
        out = apply_handle(ExponentialParams(2.0, 2.0, 0.0, 1.0), "base", 1.0, 7.0)
        assert out.base == pytest.approx(3.0)

    def test_exponential_vertex_keeps_a(self):
        out = apply_handle(ExponentialParams(2.0, 2.0, 0.0, 0.0), "vertex", 1.0, 5.0)
        assert out == ExponentialParams(2.0, 2.0, 1.0, 3.0)

    def test_exponential_coefficient(self):
        out = apply_handle(ExponentialParams(1.0, 2.0, 0.0, 1.0), "coefficient", 0.0, 4.0)
        assert out.a == 3.0

    @pytest.mark.parametrize(
        "params,handle_id,x,y",
        [
            (PowerLawParams(0.0, 0.5, 0.0, 0.0), "exponent", 2.0, 4.0),
            (PowerLawParams(1.0, 0.5, 0.0, 0.0), "exponent", 2.0, -1.0),
            (PowerLawParams(1.0, 0.5, 0.0, 2.0), "exponent", 2.0, 2.0),
            (ExponentialParams(0.0, 2.0, 0.0, 0.0), "base", 1.0, 3.0),
            (ExponentialParams(1.0, 2.0, 0.0, 0.0), "base", 1.0, -3.0),
            (LinearParams(1.0, 0.0), "vertex", 1.0, 1.0),
            (QuadraticParams(1.0, 0.0, 0.0), "vertex", math.nan, 1.0),
            (QuadraticParams(1.0, 0.0, 0.0), "curvature", 1.0, math.inf),
        ],
    )
    def test_guarded_noop_returns_same_object(self, params, handle_id, x, y):
        """Failed guards and unknown handles leave the parameters untouched."""
        assert apply_handle(params, handle_id, x, y) is params

    def test_overflowing_result_is_noop(self):
        """A finite drag whose result overflows is rejected."""
        p = QuadraticParams(1.0, 0.0, -1e308)
        assert apply_handle(p, "curvature", 1.0, 1e308) is p

    def test_pure(self):
        p = GaussianParams(0.0, 1.0, 5.0)
        apply_handle(p, "mean-amplitude", 3.0, 3.0)
        assert p == GaussianParams(0.0, 1.0, 5.0)


class TestHitTest:
    """Tests for hit_test() on the 1400 x 700 surface (100 px per unit)."""

    def test_hit_gaussian_peak(self, transform):
        """(0, 5) is drawn at screen (700, 95)."""
        curves = [_curve(GaussianParams(0.0, 1.0, 5.0))]
        assert hit_test(curves, transform, 700.0, 95.0, 12.0) == ("c", "mean-amplitude")

    def test_radius_in_pixels(self, transform):
        curves = [_curve(GaussianParams(0.0, 1.0, 5.0))]
        assert hit_test(curves, transform, 711.0, 95.0, 12.0) is not None
        assert hit_test(curves, transform, 713.0, 95.0, 12.0) is None

    def test_miss(self, transform):
        curves = [_curve(GaussianParams(0.0, 1.0, 5.0))]
        assert hit_test(curves, transform, 100.0, 600.0, 12.0) is None

    def test_nearest_handle_wins(self, transform):
        """Sigma handle sits at (1, 5e^-0.5) = screen (800, ~291.7)."""
        curves = [_curve(GaussianParams(0.0, 1.0, 5.0))]
        assert hit_test(curves, transform, 798.0, 290.0, 12.0) == ("c", "sigma")

    def test_topmost_curve_first(self, transform):
        """The later curve in draw order wins on overlap."""
        curves = [
            _curve(QuadraticParams(1.0, 0.0, 0.0), "under"),
            _curve(QuadraticParams(-1.0, 0.0, 0.0), "over"),
        ]
        assert hit_test(curves, transform, 700.0, 595.0, 12.0) == ("over", "vertex")

    def test_skips_locked_and_hidden(self, transform):
        curves = [
            _curve(QuadraticParams(1.0, 0.0, 0.0), "under"),
            _curve(QuadraticParams(1.0, 0.0, 0.0), "locked", locked=True),
            _curve(QuadraticParams(1.0, 0.0, 0.0), "hidden", visible=False),
        ]
        assert hit_test(curves, transform, 700.0, 595.0, 12.0) == ("under", "vertex")

    def test_exponential_tie_picks_vertex(self, transform):
        """Vertex and coefficient coincide; the first declared is returned."""
        curves = [_curve(ExponentialParams(1.0, 2.0, 0.0, 0.0))]
        assert hit_test(curves, transform, 700.0, 495.0, 12.0) == ("c", "vertex")

    def test_exponential_tie_prefer_last(self, transform):
        """With prefer_last the stacked coefficient handle is returned."""
        curves = [_curve(ExponentialParams(1.0, 2.0, 0.0, 0.0))]
        assert hit_test(curves, transform, 700.0, 495.0, 12.0, prefer_last=True) == ("c", "coefficient")

    def test_prefer_last_keeps_nearest(self, transform):
        """prefer_last only breaks exact ties; a closer handle still wins."""
        curves = [_curve(GaussianParams(0.0, 1.0, 5.0))]
        assert hit_test(curves, transform, 702.0, 96.0, 12.0, prefer_last=True) == ("c", "mean-amplitude")
