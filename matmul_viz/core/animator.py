"""
Animation Controller

Drives the dot-product step sequence under a QTimer and keeps the store's
highlight, running-sum and result state in step with the pointer.

States:
    IDLE      no sequence materialized, pointer -1
    READY     sequence materialized, pointer -1, not playing
    STEPPING  pointer inside the sequence, timer stopped
    PLAYING   timer-driven auto-advance

Every completed cell starts a CellFlight, a three-phase deferred effect
(SETTLING -> FLYING -> COMMITTING) that carries the finished sum into C.
reset() and shutdown() cancel all of them.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional, Tuple

from PySide6 import QtCore

from .config import AnimatorConfig
from .matrix import CellPosition, DotProductStep
from .sequencer import ProgressUpdate, completed_cells_at, generate_all_steps
from .state import ActivePair, HighlightState, Point, Progress, StepMode
from .store import MATRIX_A, MATRIX_B, MatrixStore

logger = logging.getLogger(__name__)

RUNNING_SUM_ANCHOR = "dot-product-sum"

AnchorLocator = Callable[[str], Optional[Point]]


def result_cell_anchor(row: int, col: int) -> str:
    return f"matrix-cell-C-{row}-{col}"


def _no_anchor(name):
    return None


class ControllerState(str, Enum):
    IDLE = "idle"
    READY = "ready"
    STEPPING = "stepping"
    PLAYING = "playing"


class FlightPhase(str, Enum):
    SETTLING = "settling"      # highlight render settles before the flight
    FLYING = "flying"          # floating number on its way to C[i, j]
    COMMITTING = "committing"  # value written, highlights clear after a pause
    DONE = "done"
    CANCELLED = "cancelled"


class CellFlight(QtCore.QObject):
    """
    Deferred effect for one completed cell.

    A single single-shot timer is re-armed for each phase, so cancel() only
    has one thing to stop. A cancelled flight never touches the store.
    """

    finished = QtCore.Signal(object)

    def __init__(self, step: DotProductStep, store: MatrixStore, config: AnimatorConfig,
                 locate_anchor: AnchorLocator, parent=None):
        super().__init__(parent)
        self.step = step
        self.store = store
        self.config = config
        self.locate_anchor = locate_anchor
        self.phase = FlightPhase.SETTLING

        self._timer = QtCore.QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._advance)

    @property
    def is_active(self) -> bool:
        return self.phase not in (FlightPhase.DONE, FlightPhase.CANCELLED)

    def start(self):
        self._timer.start(self.config.settle_before_flight_ms)

    def cancel(self):
        self._timer.stop()
        if self.is_active:
            self.phase = FlightPhase.CANCELLED

    def _advance(self):
        step = self.step
        if self.phase is FlightPhase.SETTLING:
            self.store.trigger_floating_number(
                step.partial_sum,
                self.locate_anchor(RUNNING_SUM_ANCHOR),
                self.locate_anchor(result_cell_anchor(step.i, step.j)),
            )
            self.phase = FlightPhase.FLYING
            self._timer.start(self.config.flight_ms)

        elif self.phase is FlightPhase.FLYING:
            self.store.update_result_cell(step.i, step.j, step.partial_sum)
            self.store.hide_floating_number()
            self.phase = FlightPhase.COMMITTING
            self._timer.start(self.config.settle_after_commit_ms)

        elif self.phase is FlightPhase.COMMITTING:
            self.store.clear_highlight(MATRIX_A)
            self.store.clear_highlight(MATRIX_B)
            self.phase = FlightPhase.DONE
            self.finished.emit(self)


class AnimationController(QtCore.QObject):
    """
    Playback position, timer and per-step side effects.

    Holds no matrix data: only the materialized sequence, the pointer, the
    playback timer and the in-flight cell effects. Everything visible goes
    through the store's setters.
    """

    def __init__(self, store: MatrixStore, config: Optional[AnimatorConfig] = None,
                 locate_anchor: Optional[AnchorLocator] = None, parent=None):
        super().__init__(parent)
        self.store = store
        self.config = config or store.config
        self.locate_anchor = locate_anchor or _no_anchor

        self._steps: Optional[Tuple[DotProductStep, ...]] = None
        self._pointer = -1
        self._flights: List[CellFlight] = []

        # Playback timer, at most one live per controller
        self._timer = QtCore.QTimer(self)
        self._timer.timeout.connect(self.step_forward)

        # Edits to A/B invalidate the sequence
        self.store.inputs_changed.connect(self.reset)
        self._listening = True

        self.reset()

    # ─────────────────────────────────────────────────────────────────────────
    # Introspection
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> ControllerState:
        if self._timer.isActive():
            return ControllerState.PLAYING
        if not self._steps:
            return ControllerState.IDLE
        if self._pointer < 0:
            return ControllerState.READY
        return ControllerState.STEPPING

    @property
    def pointer(self) -> int:
        return self._pointer

    @property
    def steps(self) -> Tuple[DotProductStep, ...]:
        return self._steps or ()

    @property
    def interval_ms(self) -> int:
        return max(1, int(round(1000 / self.store.animation.speed)))

    @property
    def active_flights(self) -> List[CellFlight]:
        return [flight for flight in self._flights if flight.is_active]

    # ─────────────────────────────────────────────────────────────────────────
    # Playback
    # ─────────────────────────────────────────────────────────────────────────

    def play(self):
        """Start timer-driven auto-advance."""
        if self.store.matrix_c is None:
            logger.warning("No result matrix to animate")
            return
        if self._timer.isActive():
            return

        self._ensure_steps()
        self.store.set_animation_state(is_playing=True)
        self._timer.start(self.interval_ms)
        logger.debug("Playing at %.2f steps/sec (%d ms)", self.store.animation.speed, self.interval_ms)

    def pause(self):
        self._timer.stop()
        if self.store.animation.is_playing:
            self.store.set_animation_state(is_playing=False)
            logger.debug("Paused at step %d", self._pointer)

    def toggle_play(self):
        """
        Play/pause button behaviour.

        Starting again after a finished pass zeroes C and rewinds first.
        """
        if self.store.animation.is_playing:
            self.pause()
            return
        if self.store.animation.current_step is None and self.store.matrix_c is not None:
            self.store.compute_result()
            self.reset()
        self.play()

    def step_forward(self):
        self._ensure_steps()

        if self._pointer < len(self._steps) - 1:
            self._pointer += 1
            step = self._steps[self._pointer]
            self._show_step(step)
            if step.is_complete:
                self._start_flight(step)
        else:
            # End of the pass
            self.pause()
            self.store.set_animation_state(current_step=None)
            self._clear_highlights()
            logger.debug("Animation pass complete")

    def step_backward(self):
        if self._pointer <= 0:
            return
        self._pointer -= 1
        self._show_step(self._steps[self._pointer])

    def reset(self):
        self._timer.stop()
        self._cancel_flights()

        self._steps = None
        self._pointer = -1

        result = self.store.matrix_c
        total_cells = result.rows * result.cols if result is not None else 0
        self.store.set_animation_state(
            is_playing=False,
            current_step=None,
            progress=Progress(current_cell=None, total_cells=total_cells, completed_cells=0),
        )
        self._clear_highlights()
        self.store.hide_floating_number()
        self.store.set_current_steps(())

    def set_speed(self, speed: float):
        """Change the rate; a running timer is restarted at the new interval right away."""
        speed = self.config.clamp_speed(speed)
        self.store.set_animation_state(speed=speed)
        if self._timer.isActive():
            self._timer.stop()
            self._timer.start(self.interval_ms)

    def set_step_mode(self, mode):
        # Recorded for the UI; stepping stays one factor at a time
        self.store.set_animation_state(step_mode=StepMode(mode))

    def shutdown(self):
        """Stop everything before the owning window goes away."""
        self._timer.stop()
        self._cancel_flights()
        if self._listening:
            self.store.inputs_changed.disconnect(self.reset)
            self._listening = False

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _ensure_steps(self):
        if self._steps:
            return
        if self.store.matrix_c is None:
            self._steps = ()
        else:
            self._steps = generate_all_steps(
                self.store.matrix_a,
                self.store.matrix_b,
                on_progress=self._on_sequencer_progress,
            )
        self.store.set_current_steps(self._steps)

    def _on_sequencer_progress(self, update: ProgressUpdate):
        self.store.set_animation_state(progress=Progress(
            current_cell=update.current_cell,
            total_cells=update.total_cells,
            completed_cells=update.completed_cells,
        ))

    def _show_step(self, step: DotProductStep):
        progress = Progress(
            current_cell=step.cell,
            total_cells=self.store.animation.progress.total_cells,
            completed_cells=completed_cells_at(self._steps, self._pointer),
        )
        self.store.set_animation_state(current_step=step, progress=progress)

        # Recomputed from scratch on every move
        self._clear_highlights()
        pair = ActivePair(a=CellPosition(step.i, step.k), b=CellPosition(step.k, step.j))
        self.store.set_highlight(MATRIX_A, HighlightState(row=step.i, active_pair=pair))
        self.store.set_highlight(MATRIX_B, HighlightState(col=step.j, active_pair=pair))

    def _clear_highlights(self):
        self.store.clear_highlight(MATRIX_A)
        self.store.clear_highlight(MATRIX_B)

    def _start_flight(self, step: DotProductStep):
        flight = CellFlight(step, self.store, self.config, self.locate_anchor, parent=self)
        flight.finished.connect(self._on_flight_finished)
        self._flights.append(flight)
        flight.start()

    def _on_flight_finished(self, flight: CellFlight):
        if flight in self._flights:
            self._flights.remove(flight)
        flight.deleteLater()

    def _cancel_flights(self):
        for flight in self._flights:
            flight.cancel()
            flight.deleteLater()
        self._flights = []
