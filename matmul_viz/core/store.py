"""
Matrix Store

Single point of truth for the visualizer. Owns the input matrices, the
derived result matrix, highlights, animation state and the floating-number
overlay. All mutation goes through the named setters below; observers are
notified through Qt signals.
"""

import dataclasses
import logging
from typing import Optional, Sequence, Tuple

from PySide6 import QtCore

from .config import AnimatorConfig
from .matrix import (
    DotProductStep,
    Matrix,
    create_matrix,
    dimensions_of,
    parse_cell_value,
    resize_matrix as resized_copy,
    update_matrix_cell,
    validate_multiplication,
)
from .persistence import MatrixSnapshotStore
from .presets import PresetMatrix
from .state import (
    AnimationState,
    FloatingNumberState,
    HighlightState,
    Point,
    Settings,
    StepMode,
    StoreSnapshot,
)

logger = logging.getLogger(__name__)

MATRIX_A = "A"
MATRIX_B = "B"
SOURCE_MATRICES = (MATRIX_A, MATRIX_B)


class MatrixStore(QtCore.QObject):
    """
    Injectable application state container.

    Whenever A or B is replaced the store revalidates, recomputes the
    dimensions and swaps in a zero-filled result of the right shape (or None
    when the pair cannot be multiplied), so C never shows stale values.

    Input edits are refused while playback is running or a step is active.
    """

    inputs_changed = QtCore.Signal()
    result_changed = QtCore.Signal()
    highlight_changed = QtCore.Signal(str)  # "A" or "B"
    animation_changed = QtCore.Signal()
    steps_changed = QtCore.Signal()
    floating_number_changed = QtCore.Signal()
    settings_changed = QtCore.Signal()

    def __init__(self, config: Optional[AnimatorConfig] = None,
                 persistence: Optional[MatrixSnapshotStore] = None, parent=None):
        super().__init__(parent)
        self.config = config or AnimatorConfig()
        self.persistence = persistence

        self._matrix_a = create_matrix(2, 3)
        self._matrix_b = create_matrix(3, 2)
        if persistence is not None:
            restored = persistence.load()
            if restored is not None:
                self._matrix_a, self._matrix_b = restored
                logger.info("Restored matrices %dx%d and %dx%d",
                            self._matrix_a.rows, self._matrix_a.cols,
                            self._matrix_b.rows, self._matrix_b.cols)

        self._matrix_c = None
        self._validation = None
        self._dimensions = None
        self._derive_result()

        self._highlights = {MATRIX_A: HighlightState(), MATRIX_B: HighlightState()}
        self._animation = AnimationState(speed=self.config.clamp_speed(self.config.default_speed))
        self._steps: Tuple[DotProductStep, ...] = ()
        self._floating_number = FloatingNumberState()
        self._settings = Settings(precision=self.config.default_precision)

    # ─────────────────────────────────────────────────────────────────────────
    # Read access
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def matrix_a(self) -> Matrix:
        return self._matrix_a

    @property
    def matrix_b(self) -> Matrix:
        return self._matrix_b

    @property
    def matrix_c(self) -> Optional[Matrix]:
        return self._matrix_c

    @property
    def validation(self):
        return self._validation

    @property
    def dimensions(self):
        return self._dimensions

    @property
    def animation(self) -> AnimationState:
        return self._animation

    @property
    def steps(self) -> Tuple[DotProductStep, ...]:
        return self._steps

    @property
    def floating_number(self) -> FloatingNumberState:
        return self._floating_number

    @property
    def settings(self) -> Settings:
        return self._settings

    def highlight(self, which: str) -> HighlightState:
        return self._highlights[self._source_key(which)]

    @property
    def is_editing_locked(self) -> bool:
        """A/B may not change while a step sequence derived from them is on screen."""
        return self._animation.is_playing or self._animation.current_step is not None

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            matrix_a=self._matrix_a,
            matrix_b=self._matrix_b,
            matrix_c=self._matrix_c,
            dimensions=self._dimensions,
            validation=self._validation,
            highlight_a=self._highlights[MATRIX_A],
            highlight_b=self._highlights[MATRIX_B],
            animation=self._animation,
            floating_number=self._floating_number,
            settings=self._settings,
            steps=self._steps,
            is_editing_locked=self.is_editing_locked,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Input matrices
    # ─────────────────────────────────────────────────────────────────────────

    def set_matrix(self, which: str, matrix: Matrix) -> bool:
        """Replace A or B. Returns False when editing is locked."""
        which = self._source_key(which)
        if self.is_editing_locked:
            logger.debug("Refusing to replace matrix %s during animation", which)
            return False

        if which == MATRIX_A:
            self._matrix_a = matrix
        else:
            self._matrix_b = matrix
        self._inputs_replaced()
        return True

    def edit_cell(self, which: str, row: int, col: int, value) -> bool:
        """
        Apply a user edit to one cell of A or B.

        Non-numeric input is discarded and the previous value kept.
        """
        which = self._source_key(which)
        number = parse_cell_value(value)
        if number is None:
            logger.debug("Discarding non-numeric edit %r for %s[%d,%d]", value, which, row, col)
            return False

        current = self._matrix_a if which == MATRIX_A else self._matrix_b
        return self.set_matrix(which, update_matrix_cell(current, row, col, number))

    def resize_matrix(self, which: str, rows: int, cols: int) -> bool:
        which = self._source_key(which)
        rows = self.config.clamp_dimension(rows)
        cols = self.config.clamp_dimension(cols)
        current = self._matrix_a if which == MATRIX_A else self._matrix_b
        if current.shape == (rows, cols):
            return True
        return self.set_matrix(which, resized_copy(current, rows, cols))

    def load_preset(self, preset: PresetMatrix) -> bool:
        """Load both matrices of a preset in one replacement."""
        if self.is_editing_locked:
            logger.debug("Refusing to load preset %r during animation", preset.name)
            return False

        self._matrix_a = Matrix(preset.matrix_a)
        self._matrix_b = Matrix(preset.matrix_b)
        logger.info("Loaded preset %r", preset.name)
        self._inputs_replaced()
        self.compute_result()
        return True

    def _inputs_replaced(self):
        self._derive_result()
        if self.persistence is not None:
            self.persistence.save(self._matrix_a, self._matrix_b)
        self.inputs_changed.emit()
        self.result_changed.emit()

    def _derive_result(self):
        self._validation = validate_multiplication(self._matrix_a, self._matrix_b)
        self._dimensions = dimensions_of(self._matrix_a, self._matrix_b)
        if self._validation.is_valid:
            self._matrix_c = create_matrix(self._matrix_a.rows, self._matrix_b.cols, 0)
        else:
            self._matrix_c = None

    # ─────────────────────────────────────────────────────────────────────────
    # Result matrix
    # ─────────────────────────────────────────────────────────────────────────

    def compute_result(self):
        """Start C over as zeros, ready to be filled in by the animation."""
        if not self._validation.is_valid:
            return
        self._matrix_c = create_matrix(self._matrix_a.rows, self._matrix_b.cols, 0)
        self.result_changed.emit()

    def clear_result(self):
        self._matrix_c = None
        self.result_changed.emit()

    def update_result_cell(self, row: int, col: int, value: float):
        if self._matrix_c is None:
            return
        self._matrix_c = update_matrix_cell(self._matrix_c, row, col, value)
        self.result_changed.emit()

    # ─────────────────────────────────────────────────────────────────────────
    # Highlighting
    # ─────────────────────────────────────────────────────────────────────────

    def set_highlight(self, which: str, highlight: HighlightState):
        which = self._source_key(which)
        self._highlights[which] = highlight
        self.highlight_changed.emit(which)

    def clear_highlight(self, which: str):
        self.set_highlight(which, HighlightState())

    # ─────────────────────────────────────────────────────────────────────────
    # Animation
    # ─────────────────────────────────────────────────────────────────────────

    def set_animation_state(self, **changes):
        """Replace selected AnimationState fields, e.g. set_animation_state(is_playing=True)."""
        if "step_mode" in changes:
            changes["step_mode"] = StepMode(changes["step_mode"])
        self._animation = dataclasses.replace(self._animation, **changes)
        self.animation_changed.emit()

    def set_current_steps(self, steps: Sequence[DotProductStep]):
        self._steps = tuple(steps)
        self.steps_changed.emit()

    # ─────────────────────────────────────────────────────────────────────────
    # Floating number
    # ─────────────────────────────────────────────────────────────────────────

    def trigger_floating_number(self, value: float, start: Optional[Point], end: Optional[Point]):
        """Show the overlay; nothing happens if either anchor could not be located."""
        if start is None or end is None:
            return
        self._floating_number = FloatingNumberState(is_visible=True, value=value, start=start, end=end)
        self.floating_number_changed.emit()

    def hide_floating_number(self):
        if self._floating_number == FloatingNumberState():
            return
        self._floating_number = FloatingNumberState()
        self.floating_number_changed.emit()

    # ─────────────────────────────────────────────────────────────────────────
    # Settings
    # ─────────────────────────────────────────────────────────────────────────

    def set_precision(self, precision: int):
        self._settings = dataclasses.replace(self._settings, precision=min(max(int(precision), 0), 6))
        self.settings_changed.emit()

    @staticmethod
    def _source_key(which: str) -> str:
        key = str(which).upper()
        if key not in SOURCE_MATRICES:
            raise ValueError(f"Unknown source matrix {which!r}, expected 'A' or 'B'")
        return key
