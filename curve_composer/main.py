"""
Curve Composer: interactive parametric curve canvas.

Curve kinds
-----------
1.  Gaussian        A·exp(-(x-μ)² / 2σ²)
2.  Linear          a·x + b
3.  Quadratic       a·(x-h)² + k
4.  Power law       a·|x-h|^b + k
5.  Exponential     a·base^(x-h) + k

Left drag on the background pans, left drag on a handle edits the curve,
the wheel or a two-finger pinch zooms about the cursor.  This window is a
thin host: every coordinate, handle and zoom decision is made by the engine
modules; the window only forwards events and draws the render snapshot.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

import numpy as np
import pyqtgraph as pg
import pyqtgraph.exporters
from PySide6.QtCore import QEvent, Qt
from PySide6.QtGui import QMouseEvent, QTouchEvent, QWheelEvent
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from curve_composer.evaluator import FloatArray
from curve_composer.interaction import InteractionController, PointerEvent, TouchPoint, WheelEvent
from curve_composer.latex_gen import FormulaGenerator
from curve_composer.models import CurveKind
from curve_composer.scene import CurveScene
from curve_composer.settings import CanvasSettings, ExportSettings
from curve_composer.snapshot import RenderSnapshot, build_export_snapshot, build_render_snapshot
from curve_composer.viewport import GridLines, PlaneBounds, SurfaceRect, Tick

logger = logging.getLogger(__name__)

KIND_LABELS: dict[CurveKind, str] = {
    CurveKind.GAUSSIAN: "Gaussian",
    CurveKind.LINEAR: "Linear",
    CurveKind.QUADRATIC: "Quadratic",
    CurveKind.POWER_LAW: "Power law",
    CurveKind.EXPONENTIAL: "Exponential",
}

_THEME_COLORS: dict[str, dict[str, tuple[int, int, int, int]]] = {
    "dark": {
        "background": (15, 23, 42, 255),
        "grid": (255, 255, 255, 13),
        "axis": (255, 255, 255, 51),
        "text": (148, 163, 184, 255),
    },
    "light": {
        "background": (248, 250, 252, 255),
        "grid": (0, 0, 0, 10),
        "axis": (0, 0, 0, 31),
        "text": (71, 85, 105, 255),
    },
}


# ===========================================================================
# Pure helpers
# ===========================================================================

def hex_to_rgb(color: str) -> tuple[int, int, int]:
    value = color.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def grid_segments(grid: GridLines, bounds: PlaneBounds) -> tuple[FloatArray, FloatArray]:
    """Flatten grid lines into (x, y) arrays for a ``connect="pairs"`` plot."""
    xs: list[float] = []
    ys: list[float] = []
    for gx in grid.xs:
        xs.extend((float(gx), float(gx)))
        ys.extend((bounds.y_min, bounds.y_max))
    for gy in grid.ys:
        xs.extend((bounds.x_min, bounds.x_max))
        ys.extend((float(gy), float(gy)))
    return np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)


def export_filename(title: str) -> str:
    slug = "-".join(title.lower().split()) or "curves"
    return f"{slug}.png"


def tick_position(tick: Tick, bounds: PlaneBounds) -> tuple[float, float, tuple[float, float]]:
    """Plane position and TextItem anchor for a tick label.

    Labels ride along the axes, pinned to the visible edge when the axis
    itself is scrolled out of view.
    """
    if tick.axis == "x":
        y = min(max(0.0, bounds.y_min), bounds.y_max)
        return tick.value, y, (0.5, 1.0 if y <= bounds.y_min else 0.0)
    x = min(max(0.0, bounds.x_min), bounds.x_max)
    return x, tick.value, (1.0 if x > bounds.x_min else 0.0, 0.5)


# ===========================================================================
# Main window
# ===========================================================================

class ComposerWindow(QMainWindow):

    def __init__(self, settings: Optional[CanvasSettings] = None) -> None:
        super().__init__()
        self.setWindowTitle("Curve Composer")
        self.setGeometry(100, 100, 1450, 820)

        self._settings = settings or CanvasSettings()
        self._scene = CurveScene(self._settings)
        self._controller = InteractionController(self._scene)
        self._formulas = FormulaGenerator(approx=True, decimals=2)

        self._curve_items: list[Any] = []
        self._handle_item: Optional[pg.ScatterPlotItem] = None
        self._grid_item: Optional[pg.PlotDataItem] = None
        self._axis_items: list[Any] = []
        self._tick_items: list[Any] = []

        self._build_ui()
        self._configure_plot()
        self._scene.add_curve(CurveKind.GAUSSIAN, name="Standard Normal")
        self._refresh_list()
        self.redraw()

    def _build_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        root = QHBoxLayout(central)

        left = QVBoxLayout()
        self._title_edit = QLineEdit("Distribution Model - 01")
        left.addWidget(self._title_edit)
        self._plot_widget = pg.PlotWidget()
        left.addWidget(self._plot_widget)

        btn_row = QHBoxLayout()
        self._reset_btn = QPushButton("Reset View")
        self._export_btn = QPushButton("Export PNG")
        self._status_lbl = QLabel("Ready")
        self._status_lbl.setStyleSheet("color: gray; font-style: italic;")
        self._reset_btn.clicked.connect(self.reset_view)
        self._export_btn.clicked.connect(self.export_png)
        for widget in (self._reset_btn, self._export_btn, self._status_lbl):
            btn_row.addWidget(widget)
        left.addLayout(btn_row)

        flags_row = QHBoxLayout()
        self._grid_cb = QCheckBox("Grid")
        self._axes_cb = QCheckBox("Axes")
        self._legend_cb = QCheckBox("Legend")
        self._scales_cb = QCheckBox("Scales")
        for cb in (self._grid_cb, self._axes_cb, self._legend_cb, self._scales_cb):
            cb.setChecked(True)
            cb.toggled.connect(lambda _checked: self.redraw())
            flags_row.addWidget(cb)
        flags_row.addStretch(1)
        left.addLayout(flags_row)
        root.addLayout(left, 3)

        right = QVBoxLayout()
        for kind, label in KIND_LABELS.items():
            btn = QPushButton(f"Add {label}")
            btn.clicked.connect(lambda _checked=False, k=kind: self.add_curve(k))
            right.addWidget(btn)

        right.addWidget(QLabel("Curves (top of list draws last):"))
        self._curve_list = QListWidget()
        self._curve_list.itemChanged.connect(self._on_item_changed)
        right.addWidget(self._curve_list)

        edit_row = QHBoxLayout()
        self._up_btn = QPushButton("Up")
        self._down_btn = QPushButton("Down")
        self._lock_btn = QPushButton("Lock / Unlock")
        self._delete_btn = QPushButton("Delete")
        self._clear_btn = QPushButton("Clear")
        self._up_btn.clicked.connect(lambda: self.move_selected(-1))
        self._down_btn.clicked.connect(lambda: self.move_selected(1))
        self._lock_btn.clicked.connect(self.toggle_lock)
        self._delete_btn.clicked.connect(self.delete_selected)
        self._clear_btn.clicked.connect(self.clear_curves)
        for widget in (self._up_btn, self._down_btn, self._lock_btn, self._delete_btn, self._clear_btn):
            edit_row.addWidget(widget)
        right.addLayout(edit_row)

        right.addWidget(QLabel("Formulas:"))
        self._formula_lbl = QLabel("")
        self._formula_lbl.setWordWrap(True)
        self._formula_lbl.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        right.addWidget(self._formula_lbl)
        root.addLayout(right, 1)

        vb = self._plot_widget.plotItem.vb
        vb.setMenuEnabled(False)
        vb.setMouseEnabled(x=False, y=False)  # the engine owns pan and zoom
        viewport = self._plot_widget.viewport()
        viewport.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        viewport.installEventFilter(self)

    def _configure_plot(self) -> None:
        colors = _THEME_COLORS[self._settings.theme]
        self._plot_widget.setBackground(colors["background"])
        self._plot_widget.hideButtons()
        # Scale labels come from the engine's ticks, not pyqtgraph's axes.
        self._plot_widget.hideAxis("left")
        self._plot_widget.hideAxis("bottom")
        self._legend = self._plot_widget.addLegend(offset=(10, 10))
        vb = self._plot_widget.plotItem.vb
        vb.disableAutoRange()
        vb.setAspectLocked(False)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def _surface(self) -> SurfaceRect:
        rect = self._plot_widget.plotItem.vb.sceneBoundingRect()
        return SurfaceRect(rect.left(), rect.top(), rect.width(), rect.height())

    def resizeEvent(self, event: Any) -> None:  # noqa: N802
        super().resizeEvent(event)
        self.redraw()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def eventFilter(self, obj: Any, event: QEvent) -> bool:  # noqa: N802
        if obj is not self._plot_widget.viewport():
            return super().eventFilter(obj, event)

        self._controller.resize(self._surface())
        et = event.type()
        changed = False

        if et == QEvent.Type.Wheel and isinstance(event, QWheelEvent):
            pos = event.position()
            changed = self._controller.wheel(WheelEvent(pos.x(), pos.y(), event.angleDelta().y()))
        elif isinstance(event, QTouchEvent) and et in (
            QEvent.Type.TouchBegin, QEvent.Type.TouchUpdate,
            QEvent.Type.TouchEnd, QEvent.Type.TouchCancel,
        ):
            points = [TouchPoint(p.position().x(), p.position().y()) for p in event.points()]
            if et == QEvent.Type.TouchBegin:
                changed = self._controller.touch_start(points)
            elif et == QEvent.Type.TouchUpdate:
                # A second finger may join an ongoing pan.
                if len(points) >= 2 and self._controller.touch_start(points):
                    changed = True
                else:
                    changed = self._controller.touch_move(points)
            elif et == QEvent.Type.TouchEnd:
                changed = self._controller.touch_end()
            else:
                changed = self._controller.touch_cancel()
            event.accept()
        elif isinstance(event, QMouseEvent):
            pos = event.position()
            shift = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)
            pointer = PointerEvent(pos.x(), pos.y(), alternate=shift)
            if et == QEvent.Type.MouseButtonPress and event.button() == Qt.MouseButton.LeftButton:
                changed = self._controller.pointer_down(pointer)
                if self._controller.drag_state is None:
                    self._plot_widget.viewport().setCursor(Qt.CursorShape.ClosedHandCursor)
            elif et == QEvent.Type.MouseMove:
                changed = self._controller.pointer_move(pointer)
            elif et == QEvent.Type.MouseButtonRelease and event.button() == Qt.MouseButton.LeftButton:
                changed = self._controller.pointer_up(pointer)
                self._plot_widget.viewport().unsetCursor()
            else:
                return super().eventFilter(obj, event)
        else:
            return super().eventFilter(obj, event)

        if changed:
            self.redraw()
            if self._controller.drag_state is None:
                self._refresh_formulas()
        return True

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def redraw(self) -> None:
        self._controller.resize(self._surface())
        snap = build_render_snapshot(self._scene, self._controller)
        self._draw(snap, show_handles=True, show_ticks=self._scales_cb.isChecked())

    def _draw(self, snap: RenderSnapshot, show_handles: bool, show_ticks: bool) -> None:
        plot = self._plot_widget
        colors = _THEME_COLORS[self._settings.theme]

        for item in self._curve_items + self._axis_items + self._tick_items:
            plot.removeItem(item)
        self._curve_items.clear()
        self._axis_items.clear()
        self._tick_items.clear()
        self._legend.clear()
        if self._grid_item is not None:
            plot.removeItem(self._grid_item)
            self._grid_item = None
        if self._handle_item is not None:
            plot.removeItem(self._handle_item)
            self._handle_item = None

        b = snap.bounds
        plot.setXRange(b.x_min, b.x_max, padding=0)
        plot.setYRange(b.y_min, b.y_max, padding=0)

        if self._grid_cb.isChecked():
            gx, gy = grid_segments(snap.grid, b)
            self._grid_item = plot.plot(gx, gy, connect="pairs", pen=pg.mkPen(colors["grid"], width=1))
        if self._axes_cb.isChecked():
            axis_pen = pg.mkPen(colors["axis"], width=2)
            self._axis_items.append(plot.plot([b.x_min, b.x_max], [0.0, 0.0], pen=axis_pen))
            self._axis_items.append(plot.plot([0.0, 0.0], [b.y_min, b.y_max], pen=axis_pen))
        if show_ticks:
            for tick in snap.ticks:
                x, y, anchor = tick_position(tick, b)
                label = pg.TextItem(tick.label, color=colors["text"], anchor=anchor)
                label.setPos(x, y)
                plot.addItem(label)
                self._tick_items.append(label)

        opacity = int(255 * self._settings.curve_opacity)
        for curve in snap.curves:
            r, g, bl = hex_to_rgb(curve.color)
            xs, ys = curve.polyline[:, 0], curve.polyline[:, 1]
            fill = (r, g, bl, opacity) if curve.kind is CurveKind.GAUSSIAN else None
            item = plot.plot(
                xs, ys,
                pen=pg.mkPen((r, g, bl), width=3),
                fillLevel=0.0 if fill is not None else None,
                brush=fill,
            )
            self._curve_items.append(item)
            if self._legend_cb.isChecked():
                self._legend.addItem(item, f"{curve.name}  {curve.label}")

        if show_handles and snap.handles:
            spots = []
            for view in snap.handles:
                curve = self._scene.get(view.curve_id)
                color = hex_to_rgb(curve.color) if curve is not None else (255, 255, 255)
                spots.append({
                    "pos": (view.handle.x, view.handle.y),
                    "size": 16 if view.active else 12,
                    "brush": pg.mkBrush(*color),
                    "pen": pg.mkPen("w", width=2),
                })
            self._handle_item = pg.ScatterPlotItem(spots=spots)
            plot.addItem(self._handle_item)

    # ------------------------------------------------------------------
    # Curve list
    # ------------------------------------------------------------------

    def _refresh_list(self) -> None:
        self._curve_list.blockSignals(True)
        self._curve_list.clear()
        for curve in reversed(self._scene.curves):
            lock = " [locked]" if curve.locked else ""
            item = QListWidgetItem(f"{curve.name} — {KIND_LABELS[curve.kind]}{lock}")
            item.setData(Qt.ItemDataRole.UserRole, curve.id)
            item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
            item.setCheckState(Qt.CheckState.Checked if curve.visible else Qt.CheckState.Unchecked)
            r, g, b = hex_to_rgb(curve.color)
            item.setForeground(pg.mkColor(r, g, b))
            self._curve_list.addItem(item)
        self._curve_list.blockSignals(False)
        self._refresh_formulas()

    def _refresh_formulas(self) -> None:
        lines = [f"{c.name}: {self._formulas.generate(c.params)}" for c in self._scene.visible_curves()]
        self._formula_lbl.setText("\n".join(lines) if lines else "(no visible curve)")

    def _selected_id(self) -> Optional[str]:
        item = self._curve_list.currentItem()
        return item.data(Qt.ItemDataRole.UserRole) if item is not None else None

    def _on_item_changed(self, item: QListWidgetItem) -> None:
        curve_id = item.data(Qt.ItemDataRole.UserRole)
        self._scene.update_style(curve_id, visible=item.checkState() == Qt.CheckState.Checked)
        self._refresh_formulas()
        self.redraw()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def add_curve(self, kind: CurveKind) -> None:
        if self._scene.add_curve(kind) is None:
            QMessageBox.information(
                self, "Limit reached", f"At most {self._settings.max_curves} curves are allowed."
            )
            return
        self._refresh_list()
        self.redraw()

    def delete_selected(self) -> None:
        curve_id = self._selected_id()
        if curve_id is not None and self._scene.delete_curve(curve_id):
            self._refresh_list()
            self.redraw()

    def clear_curves(self) -> None:
        self._scene.clear()
        self._controller.pointer_cancel()
        self._refresh_list()
        self.redraw()

    def toggle_lock(self) -> None:
        curve_id = self._selected_id()
        curve = self._scene.get(curve_id) if curve_id is not None else None
        if curve is not None:
            self._scene.update_style(curve.id, locked=not curve.locked)
            self._refresh_list()
            self.redraw()

    def move_selected(self, step: int) -> None:
        """Move the selected curve up (-1) or down (+1) in the displayed list."""
        curve_id = self._selected_id()
        if curve_id is None:
            return
        i = self._scene.index_of(curve_id)
        # The list widget shows the scene reversed (topmost first).
        self._scene.move_curve(i, i - step)
        self._refresh_list()
        self.redraw()

    def reset_view(self) -> None:
        self._scene.reset_view()
        self.redraw()

    def export_png(self) -> None:
        style = ExportSettings(
            title=self._title_edit.text(),
            show_legend=self._legend_cb.isChecked(),
            show_grid=self._grid_cb.isChecked(),
            show_axes=self._axes_cb.isChecked(),
            show_x_values=self._scales_cb.isChecked(),
            show_y_values=self._scales_cb.isChecked(),
        )
        path, _ = QFileDialog.getSaveFileName(
            self, "Export image", export_filename(style.title), "PNG image (*.png)"
        )
        if not path:
            return

        export = build_export_snapshot(self._scene, self._surface(), style)
        frame = RenderSnapshot(
            bounds=export.bounds,
            grid=export.grid if export.grid is not None else GridLines(
                np.empty(0), np.empty(0), 1.0),
            ticks=export.ticks,
            curves=export.curves,
            handles=(),
        )
        plot_item = self._plot_widget.plotItem
        try:
            self._draw(frame, show_handles=False, show_ticks=style.show_scales)
            if style.show_title:
                plot_item.setTitle(style.title)
            exporter = pyqtgraph.exporters.ImageExporter(plot_item)
            exporter.parameters()["width"] = int(self._surface().width * 4)
            exporter.export(path)
            self._status_lbl.setText(f"Exported {path}")
            logger.info("Exported %d curves to %s", len(export.curves), path)
        except (OSError, RuntimeError, ValueError) as exc:
            QMessageBox.critical(self, "Export Error", str(exc))
        finally:
            plot_item.setTitle(None)
            self.redraw()


# ===========================================================================
# Entry point
# ===========================================================================

def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app = QApplication(sys.argv)
    window = ComposerWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
