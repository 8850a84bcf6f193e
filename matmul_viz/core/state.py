from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .matrix import CellPosition, Dimensions, DotProductStep, Matrix, ValidationResult


class StepMode(str, Enum):
    FACTOR = "factor"  # one multiply-accumulate per step
    CELL = "cell"      # recorded only; stepping stays per factor


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class ActivePair:
    """The A cell (i, k) and B cell (k, j) feeding the current step."""
    a: CellPosition
    b: CellPosition


@dataclass(frozen=True)
class HighlightState:
    """
    Highlight for one source matrix.
    A uses `row`, B uses `col`; both carry the same active pair.
    """
    row: Optional[int] = None
    col: Optional[int] = None
    active_pair: Optional[ActivePair] = None

    @property
    def is_empty(self) -> bool:
        return self.row is None and self.col is None and self.active_pair is None


@dataclass(frozen=True)
class Progress:
    current_cell: Optional[CellPosition] = None
    total_cells: int = 0
    completed_cells: int = 0


@dataclass(frozen=True)
class AnimationState:
    """
    Holds the playback state of the visualizer.
    Independent of UI or timer backend.
    """
    is_playing: bool = False
    speed: float = 1.0  # steps per second
    current_step: Optional[DotProductStep] = None
    step_mode: StepMode = StepMode.FACTOR
    progress: Progress = field(default_factory=Progress)


@dataclass(frozen=True)
class FloatingNumberState:
    """Transient overlay carrying a finished cell sum to the result matrix."""
    is_visible: bool = False
    value: Optional[float] = None
    start: Optional[Point] = None
    end: Optional[Point] = None


@dataclass(frozen=True)
class Settings:
    precision: int = 2  # decimal places shown for non-integers


@dataclass(frozen=True)
class StoreSnapshot:
    """Read-only view handed to the presentation layer."""
    matrix_a: Matrix
    matrix_b: Matrix
    matrix_c: Optional[Matrix]
    dimensions: Dimensions
    validation: ValidationResult
    highlight_a: HighlightState
    highlight_b: HighlightState
    animation: AnimationState
    floating_number: FloatingNumberState
    settings: Settings
    steps: Tuple[DotProductStep, ...]
    is_editing_locked: bool
