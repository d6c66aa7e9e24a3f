from curve_composer.evaluator import evaluate, evaluate_array, sample_polyline
from curve_composer.handles import Handle, apply_handle, handles_for, hit_test
from curve_composer.interaction import (
    DraggingHandle,
    Idle,
    InteractionController,
    Panning,
    PinchZooming,
    PointerEvent,
    TouchPoint,
    WheelEvent,
)
from curve_composer.models import (
    Curve,
    CurveKind,
    CurveParams,
    ExponentialParams,
    GaussianParams,
    LinearParams,
    PowerLawParams,
    QuadraticParams,
    reorder,
)
from curve_composer.scene import CurveScene
from curve_composer.settings import CanvasSettings, ExportSettings
from curve_composer.viewport import SurfaceRect, Viewport, ViewportTransform

__version__ = "0.1.0"
