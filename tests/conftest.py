"""Shared fixtures for the curve engine tests.

The default surface is 1400 x 700 px: at zoom 1 that is 100 px per plane unit,
with the plane spanning x in [-7, 7] and y in [-1.05, 5.95].
"""

import itertools

import pytest

from curve_composer.interaction import InteractionController
from curve_composer.scene import CurveScene
from curve_composer.settings import CanvasSettings
from curve_composer.viewport import SurfaceRect, Viewport, ViewportTransform


@pytest.fixture
def settings():
    return CanvasSettings()


@pytest.fixture
def surface():
    return SurfaceRect(0.0, 0.0, 1400.0, 700.0)


@pytest.fixture
def transform(surface, settings):
    return ViewportTransform(Viewport(), surface, settings)


@pytest.fixture
def scene(settings):
    counter = itertools.count(1)
    return CurveScene(settings, id_factory=lambda: f"c{next(counter)}")


@pytest.fixture
def controller(scene, surface):
    return InteractionController(scene, surface)
