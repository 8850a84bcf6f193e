from PySide6 import QtWidgets, QtCore, QtGui

from matmul_viz.core.presets import PRESET_MATRICES
from matmul_viz.core.state import HighlightState, StepMode

# Cell colours (dark mode friendly)
DOT_PRODUCT_COLOR = QtGui.QColor(70, 110, 180, 90)
ACTIVE_PAIR_COLOR = QtGui.QColor(230, 170, 40, 200)


def format_number(value, precision=2):
    """Integers without decimals, everything else with `precision` places."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.{precision}f}"


class MatrixGrid(QtWidgets.QTableWidget):
    """
    Editable grid for one matrix.

    Highlights the dot-product row (A) or column (B) and the active pair.
    """
    cell_edited = QtCore.Signal(int, int, str)  # row, col, raw text

    def __init__(self, kind, read_only=False, parent=None):
        super().__init__(parent)
        self.kind = kind  # "A", "B" or "C"
        self.read_only = read_only
        self._updating = False
        self._highlight = HighlightState()

        self.horizontalHeader().setSectionResizeMode(QtWidgets.QHeaderView.ResizeToContents)
        self.verticalHeader().setSectionResizeMode(QtWidgets.QHeaderView.ResizeToContents)
        self.setSizeAdjustPolicy(QtWidgets.QAbstractScrollArea.AdjustToContents)
        if read_only:
            self.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)

        self.itemChanged.connect(self._on_item_changed)

    def set_matrix(self, matrix, precision=2):
        """Show a matrix, or an empty grid when there is none."""
        self._updating = True
        try:
            if matrix is None:
                self.setRowCount(0)
                self.setColumnCount(0)
                return
            self.setRowCount(matrix.rows)
            self.setColumnCount(matrix.cols)
            for row in range(matrix.rows):
                for col in range(matrix.cols):
                    # Reuse items so a rejected edit can be reverted from inside itemChanged
                    item = self.item(row, col)
                    if item is None:
                        item = QtWidgets.QTableWidgetItem()
                        item.setTextAlignment(QtCore.Qt.AlignCenter)
                        if self.read_only:
                            item.setFlags(item.flags() & ~QtCore.Qt.ItemIsEditable)
                        self.setItem(row, col, item)
                    item.setText(format_number(matrix.data[row][col], precision))
            self._apply_highlight()
        finally:
            self._updating = False

    def set_highlight(self, highlight):
        self._highlight = highlight
        self._updating = True
        try:
            self._apply_highlight()
        finally:
            self._updating = False

    def set_editing_enabled(self, enabled):
        if self.read_only:
            return
        triggers = (QtWidgets.QAbstractItemView.DoubleClicked
                    | QtWidgets.QAbstractItemView.EditKeyPressed
                    | QtWidgets.QAbstractItemView.AnyKeyPressed)
        self.setEditTriggers(triggers if enabled else QtWidgets.QAbstractItemView.NoEditTriggers)

    def cell_center(self, row, col):
        """Centre of a cell in this widget's coordinates, or None if out of range."""
        if not (0 <= row < self.rowCount() and 0 <= col < self.columnCount()):
            return None
        rect = self.visualRect(self.model().index(row, col))
        return self.viewport().mapTo(self, rect.center())

    def _apply_highlight(self):
        highlight = self._highlight
        pair = highlight.active_pair
        active = None
        if pair is not None:
            active = pair.a if self.kind == "A" else pair.b if self.kind == "B" else None

        for row in range(self.rowCount()):
            for col in range(self.columnCount()):
                item = self.item(row, col)
                if item is None:
                    continue
                in_dot_product = (
                    (self.kind == "A" and highlight.row == row)
                    or (self.kind == "B" and highlight.col == col)
                )
                if active is not None and (active.row, active.col) == (row, col):
                    item.setBackground(ACTIVE_PAIR_COLOR)
                elif in_dot_product:
                    item.setBackground(DOT_PRODUCT_COLOR)
                else:
                    item.setBackground(QtGui.QBrush())

    def _on_item_changed(self, item):
        if self._updating:
            return
        self.cell_edited.emit(item.row(), item.column(), item.text())


class DimensionControls(QtWidgets.QWidget):
    """Rows × cols spin boxes."""
    resize_requested = QtCore.Signal(int, int)

    def __init__(self, minimum=1, maximum=10, parent=None):
        super().__init__(parent)
        layout = QtWidgets.QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.spin_rows = QtWidgets.QSpinBox()
        self.spin_rows.setRange(minimum, maximum)
        self.spin_cols = QtWidgets.QSpinBox()
        self.spin_cols.setRange(minimum, maximum)
        self.spin_rows.valueChanged.connect(self._on_changed)
        self.spin_cols.valueChanged.connect(self._on_changed)

        layout.addWidget(QtWidgets.QLabel("Rows:"))
        layout.addWidget(self.spin_rows)
        layout.addWidget(QtWidgets.QLabel("Cols:"))
        layout.addWidget(self.spin_cols)
        layout.addStretch(1)

    def set_shape(self, rows, cols):
        for spin, value in ((self.spin_rows, rows), (self.spin_cols, cols)):
            spin.blockSignals(True)
            spin.setValue(value)
            spin.blockSignals(False)

    def _on_changed(self, _value):
        self.resize_requested.emit(self.spin_rows.value(), self.spin_cols.value())


class MatrixPanel(QtWidgets.QGroupBox):
    """Titled grid, with dimension controls for the input matrices."""

    def __init__(self, kind, title, config, parent=None):
        super().__init__(title, parent)
        layout = QtWidgets.QVBoxLayout(self)
        read_only = kind == "C"

        self.dimensions = None
        if not read_only:
            self.dimensions = DimensionControls(config.min_dimension, config.max_dimension)
            layout.addWidget(self.dimensions)

        self.grid = MatrixGrid(kind, read_only=read_only)
        layout.addWidget(self.grid)

        self.lbl_empty = QtWidgets.QLabel("No result: dimensions are incompatible")
        self.lbl_empty.setStyleSheet("color: gray; font-style: italic;")
        self.lbl_empty.setVisible(False)
        layout.addWidget(self.lbl_empty)

    def set_matrix(self, matrix, precision):
        self.grid.set_matrix(matrix, precision)
        self.lbl_empty.setVisible(matrix is None)
        if matrix is not None and self.dimensions is not None:
            self.dimensions.set_shape(matrix.rows, matrix.cols)

    def set_editing_enabled(self, enabled):
        self.grid.set_editing_enabled(enabled)
        if self.dimensions is not None:
            self.dimensions.setEnabled(enabled)


class StepDisplay(QtWidgets.QWidget):
    """
    Current multiply-accumulate and running sum.
    `lbl_sum` is where the floating number takes off from.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QtWidgets.QVBoxLayout(self)

        self.lbl_operation = QtWidgets.QLabel()
        self.lbl_operation.setAlignment(QtCore.Qt.AlignCenter)
        self.lbl_operation.setWordWrap(True)
        self.lbl_operation.setStyleSheet("font-family: monospace; font-size: 16px;")

        self.lbl_sum = QtWidgets.QLabel()
        self.lbl_sum.setAlignment(QtCore.Qt.AlignCenter)
        self.lbl_sum.setStyleSheet("font-family: monospace; font-size: 18px; font-weight: bold;")

        self.progress = QtWidgets.QProgressBar()
        self.progress.setFormat("%v / %m cells")

        layout.addWidget(self.lbl_operation)
        layout.addWidget(self.lbl_sum)
        layout.addWidget(self.progress)

    def update_from(self, snapshot):
        step = snapshot.animation.current_step
        precision = snapshot.settings.precision
        progress = snapshot.animation.progress

        self.progress.setRange(0, max(progress.total_cells, 1))
        self.progress.setValue(progress.completed_cells)

        if step is None:
            self.lbl_sum.setText("")
            if not snapshot.validation.is_valid:
                self.lbl_operation.setText(f"Matrix Dimensions Incompatible\n{snapshot.validation.error}")
            else:
                self.lbl_operation.setText(
                    f"Ready to Multiply! Result will be {snapshot.dimensions.m}×{snapshot.dimensions.p}. "
                    "Press Play to see the dot product steps."
                )
            return

        self.lbl_operation.setText(
            f"A[{step.i + 1},{step.k + 1}] = {format_number(step.a_value, precision)}  ×  "
            f"B[{step.k + 1},{step.j + 1}] = {format_number(step.b_value, precision)}  =  "
            f"{format_number(step.product, precision)}"
        )
        self.lbl_sum.setText(
            f"Running Sum for C[{step.i + 1},{step.j + 1}]: {format_number(step.partial_sum, precision)}"
        )


class PlaybackControls(QtWidgets.QWidget):
    """
    Play/Pause, stepping, reset, speed slider and step mode toggle.
    """
    play_toggled = QtCore.Signal()
    step_forward_requested = QtCore.Signal()
    step_backward_requested = QtCore.Signal()
    reset_requested = QtCore.Signal()
    speed_changed = QtCore.Signal(float)
    step_mode_changed = QtCore.Signal(str)

    def __init__(self, config, parent=None):
        super().__init__(parent)
        self.config = config
        layout = QtWidgets.QHBoxLayout(self)

        self.btn_reset = QtWidgets.QPushButton("Reset")
        self.btn_back = QtWidgets.QPushButton("Step Back")
        self.btn_play = QtWidgets.QPushButton("Play")
        self.btn_forward = QtWidgets.QPushButton("Step Forward")
        self.btn_reset.clicked.connect(self.reset_requested)
        self.btn_back.clicked.connect(self.step_backward_requested)
        self.btn_play.clicked.connect(self.play_toggled)
        self.btn_forward.clicked.connect(self.step_forward_requested)

        # Slider works in speed_step units
        self.slider = QtWidgets.QSlider(QtCore.Qt.Horizontal)
        self.slider.setRange(self._to_ticks(config.min_speed), self._to_ticks(config.max_speed))
        self.slider.valueChanged.connect(self._on_slider)
        self.lbl_speed = QtWidgets.QLabel()

        self.check_cell_mode = QtWidgets.QCheckBox("Step by cell")
        self.check_cell_mode.toggled.connect(
            lambda checked: self.step_mode_changed.emit(StepMode.CELL.value if checked else StepMode.FACTOR.value)
        )

        for widget in (self.btn_reset, self.btn_back, self.btn_play, self.btn_forward):
            layout.addWidget(widget)
        layout.addWidget(QtWidgets.QLabel("Speed:"))
        layout.addWidget(self.slider, stretch=1)
        layout.addWidget(self.lbl_speed)
        layout.addWidget(self.check_cell_mode)

    def sync(self, animation, has_result):
        """Mirror the animation state without re-emitting signals."""
        self.btn_play.setText("Pause" if animation.is_playing else "Play")
        self.btn_play.setEnabled(has_result)
        self.btn_back.setEnabled(animation.current_step is not None)
        self.lbl_speed.setText(f"{animation.speed:.2f} steps/sec")

        self.slider.blockSignals(True)
        self.slider.setValue(self._to_ticks(animation.speed))
        self.slider.blockSignals(False)

        self.check_cell_mode.blockSignals(True)
        self.check_cell_mode.setChecked(animation.step_mode is StepMode.CELL)
        self.check_cell_mode.blockSignals(False)

    def _to_ticks(self, speed):
        return int(round(speed / self.config.speed_step))

    def _on_slider(self, ticks):
        self.speed_changed.emit(ticks * self.config.speed_step)


class PresetSelector(QtWidgets.QComboBox):
    """Quick presets dropdown."""
    preset_selected = QtCore.Signal(str)  # preset name

    def __init__(self, parent=None):
        super().__init__(parent)
        self.addItem("Select a preset...", None)
        for preset in PRESET_MATRICES:
            self.addItem(preset.name, preset.name)
            self.setItemData(self.count() - 1, preset.description, QtCore.Qt.ToolTipRole)
        self.activated.connect(self._on_activated)

    def _on_activated(self, index):
        name = self.itemData(index)
        if name:
            self.preset_selected.emit(name)
