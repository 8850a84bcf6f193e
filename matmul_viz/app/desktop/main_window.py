"""
Matrix Multiplication Visualizer - Main Window

PySide6 main window: input grids for A and B, the animated result C, the
current step display and playback controls. All state lives in the
MatrixStore; this window only renders snapshots and forwards user intents.
"""

import logging

from PySide6 import QtWidgets, QtCore

from matmul_viz.core.animator import AnimationController, RUNNING_SUM_ANCHOR
from matmul_viz.core.presets import find_preset
from matmul_viz.core.state import Point
from matmul_viz.core.store import MATRIX_A, MATRIX_B
from .floating_number import FloatingNumberOverlay
from .widgets import MatrixPanel, PlaybackControls, PresetSelector, StepDisplay

logger = logging.getLogger(__name__)

RESULT_ANCHOR_PREFIX = "matrix-cell-C-"


class MainWindow(QtWidgets.QMainWindow):
    """
    Main application window.

    Owns the AnimationController (it needs the window to locate the
    floating-number anchors) and tears it down on close.
    """

    def __init__(self, store, config=None):
        super().__init__()
        self.setWindowTitle("Matrix Multiplication Calculator")
        self.resize(1200, 800)

        # Core State
        self.store = store
        self.config = config or store.config
        self.controller = AnimationController(
            store, self.config, locate_anchor=self._locate_anchor, parent=self
        )

        # Build UI
        self._setup_ui()

        # Connect signals
        self._connect_signals()

        self._refresh_all()

    def _setup_ui(self):
        """Create the UI layout."""
        self.central_widget = QtWidgets.QWidget()
        self.setCentralWidget(self.central_widget)
        self.main_layout = QtWidgets.QVBoxLayout(self.central_widget)

        # Presets
        preset_row = QtWidgets.QHBoxLayout()
        preset_row.addWidget(QtWidgets.QLabel("Quick Presets:"))
        self.presets = PresetSelector()
        preset_row.addWidget(self.presets, stretch=1)
        self.main_layout.addLayout(preset_row)

        # Matrices side by side
        matrices_row = QtWidgets.QHBoxLayout()
        self.panel_a = MatrixPanel(MATRIX_A, "Matrix A", self.config)
        self.panel_b = MatrixPanel(MATRIX_B, "Matrix B", self.config)
        self.panel_c = MatrixPanel("C", "Result C = A × B", self.config)
        matrices_row.addWidget(self.panel_a)
        matrices_row.addWidget(QtWidgets.QLabel("×"))
        matrices_row.addWidget(self.panel_b)
        matrices_row.addWidget(QtWidgets.QLabel("="))
        matrices_row.addWidget(self.panel_c)
        self.main_layout.addLayout(matrices_row, stretch=1)

        self.step_display = StepDisplay()
        self.main_layout.addWidget(self.step_display)

        # Playback controls (bottom)
        self.playback = PlaybackControls(self.config)
        self.main_layout.addWidget(self.playback)

        # Overlay sits on top of everything in the central widget
        self.floating_number = FloatingNumberOverlay(self.config.flight_ms, parent=self.central_widget)

    def _connect_signals(self):
        """Connect UI signals to slots."""
        self.playback.play_toggled.connect(self.controller.toggle_play)
        self.playback.step_forward_requested.connect(self.controller.step_forward)
        self.playback.step_backward_requested.connect(self.controller.step_backward)
        self.playback.reset_requested.connect(self.controller.reset)
        self.playback.speed_changed.connect(self.controller.set_speed)
        self.playback.step_mode_changed.connect(self.controller.set_step_mode)
        self.presets.preset_selected.connect(self._on_preset_selected)

        for which, panel in ((MATRIX_A, self.panel_a), (MATRIX_B, self.panel_b)):
            panel.grid.cell_edited.connect(
                lambda row, col, text, which=which: self._on_cell_edited(which, row, col, text)
            )
            panel.dimensions.resize_requested.connect(
                lambda rows, cols, which=which: self.store.resize_matrix(which, rows, cols)
            )

        self.store.inputs_changed.connect(self._refresh_inputs)
        self.store.result_changed.connect(self._refresh_result)
        self.store.highlight_changed.connect(self._refresh_highlight)
        self.store.animation_changed.connect(self._refresh_animation)
        self.store.floating_number_changed.connect(self._refresh_floating_number)
        self.store.settings_changed.connect(self._refresh_all)

    # ─────────────────────────────────────────────────────────────────────────
    # Store -> view
    # ─────────────────────────────────────────────────────────────────────────

    def _refresh_all(self):
        self._refresh_inputs()
        self._refresh_result()
        self._refresh_highlight(MATRIX_A)
        self._refresh_highlight(MATRIX_B)
        self._refresh_animation()

    def _refresh_inputs(self):
        precision = self.store.settings.precision
        self.panel_a.set_matrix(self.store.matrix_a, precision)
        self.panel_b.set_matrix(self.store.matrix_b, precision)

    def _refresh_result(self):
        self.panel_c.set_matrix(self.store.matrix_c, self.store.settings.precision)
        self.playback.sync(self.store.animation, self.store.matrix_c is not None)

    def _refresh_highlight(self, which):
        panel = self.panel_a if which == MATRIX_A else self.panel_b
        panel.grid.set_highlight(self.store.highlight(which))

    def _refresh_animation(self):
        snapshot = self.store.snapshot()
        self.step_display.update_from(snapshot)
        self.playback.sync(snapshot.animation, snapshot.matrix_c is not None)
        editable = not snapshot.is_editing_locked
        self.panel_a.set_editing_enabled(editable)
        self.panel_b.set_editing_enabled(editable)
        self.presets.setEnabled(editable)

    def _refresh_floating_number(self):
        self.floating_number.update_from(self.store.floating_number, self.store.settings.precision)

    # ─────────────────────────────────────────────────────────────────────────
    # UI Event Handlers
    # ─────────────────────────────────────────────────────────────────────────

    def _on_cell_edited(self, which, row, col, text):
        if not self.store.edit_cell(which, row, col, text):
            # Rejected edit: put the previous value back
            self._refresh_inputs()

    def _on_preset_selected(self, name):
        preset = find_preset(name)
        if preset is not None:
            self.store.load_preset(preset)

    def _locate_anchor(self, name):
        """Anchor centre in central-widget coordinates, None if not on screen."""
        if name == RUNNING_SUM_ANCHOR:
            widget = self.step_display.lbl_sum
            if not widget.isVisible():
                return None
            center = widget.mapTo(self.central_widget, widget.rect().center())
            return Point(center.x(), center.y())

        if name.startswith(RESULT_ANCHOR_PREFIX):
            row, col = (int(part) for part in name[len(RESULT_ANCHOR_PREFIX):].split("-"))
            grid = self.panel_c.grid
            center = grid.cell_center(row, col)
            if center is None or not grid.isVisible():
                return None
            center = grid.mapTo(self.central_widget, center)
            return Point(center.x(), center.y())

        return None

    def keyPressEvent(self, event):
        """Handle keyboard shortcuts."""
        key = event.key()

        if key == QtCore.Qt.Key_Space:
            self.controller.toggle_play()
        elif key == QtCore.Qt.Key_Right:
            self.controller.step_forward()
        elif key == QtCore.Qt.Key_Left:
            self.controller.step_backward()
        elif key == QtCore.Qt.Key_R:
            self.controller.reset()
        else:
            super().keyPressEvent(event)

    def closeEvent(self, event):
        self.controller.shutdown()
        super().closeEvent(event)
