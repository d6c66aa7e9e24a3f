"""Tests for canvas and export settings validation."""

import pytest

from curve_composer.settings import CanvasSettings, ExportSettings


class TestCanvasSettings:
    """Tests for CanvasSettings."""

    def test_defaults(self):
        s = CanvasSettings()
        assert (s.base_width, s.vertical_bias) == (14.0, 0.15)
        assert (s.zoom_min, s.zoom_max) == (0.1, 50.0)
        assert s.sample_resolution == 250
        assert s.max_curves == 15

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"base_width": 0.0},
            {"vertical_bias": 1.0},
            {"zoom_min": 5.0, "zoom_max": 2.0},
            {"zoom_min": 0.0},
            {"sample_resolution": 0},
            {"power_law_clip": -1.0},
            {"hit_radius_px": 0.0},
            {"curve_opacity": 1.5},
            {"max_curves": 0},
            {"wheel_step": 0.0},
            {"theme": "sepia"},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            CanvasSettings(**kwargs)

    def test_clamp_zoom(self):
        s = CanvasSettings()
        assert s.clamp_zoom(0.01) == 0.1
        assert s.clamp_zoom(3.0) == 3.0
        assert s.clamp_zoom(1e9) == 50.0

    def test_frozen(self):
        with pytest.raises(AttributeError):
            CanvasSettings().zoom_max = 10.0


class TestExportSettings:
    """Tests for ExportSettings."""

    def test_defaults(self):
        s = ExportSettings()
        assert s.title == "Distribution Model - 01"
        assert s.show_scales
        assert s.selected_curve_ids == ()

    def test_show_scales(self):
        assert ExportSettings(show_x_values=False).show_scales
        assert not ExportSettings(show_x_values=False, show_y_values=False).show_scales

    @pytest.mark.parametrize("bg", ["blue", "#fff", "#12345g"])
    def test_bad_background(self, bg):
        with pytest.raises(ValueError):
            ExportSettings(background=bg)

    def test_bad_title(self):
        with pytest.raises(ValueError):
            ExportSettings(title=None)
