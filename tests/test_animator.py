"""
Tests for the AnimationController.

Timer-driven behaviour runs on the real Qt event loop with shortened
phase durations; wait_until() drains the deferred cell flights.
"""

import unittest

from PySide6.QtTest import QTest

from tests.qt_support import get_app, wait_until

from matmul_viz.core.animator import (
    RUNNING_SUM_ANCHOR,
    AnimationController,
    ControllerState,
    FlightPhase,
    result_cell_anchor,
)
from matmul_viz.core.config import AnimatorConfig
from matmul_viz.core.matrix import CellPosition, Matrix, create_matrix
from matmul_viz.core.presets import find_preset
from matmul_viz.core.state import ActivePair, Point, StepMode
from matmul_viz.core.store import MatrixStore

FAST = AnimatorConfig(settle_before_flight_ms=0, flight_ms=0, settle_after_commit_ms=0, max_speed=1000)
EXPECTED_C = Matrix([[58, 64], [139, 154]])

ANCHORS = {
    RUNNING_SUM_ANCHOR: Point(100, 200),
    result_cell_anchor(0, 0): Point(400, 50),
}


def locate(name):
    return ANCHORS.get(name, Point(0, 0))


class ControllerTestCase(unittest.TestCase):
    config = FAST

    @classmethod
    def setUpClass(cls):
        get_app()

    def setUp(self):
        self.store = MatrixStore(self.config)
        self.store.load_preset(find_preset("2×3 × 3×2 Example"))
        self.controller = AnimationController(self.store, locate_anchor=locate)

    def tearDown(self):
        self.controller.shutdown()

    def step(self, times):
        for _ in range(times):
            self.controller.step_forward()

    def flights_settled(self):
        return wait_until(lambda: not self.controller.active_flights)


class TestStepping(ControllerTestCase):

    def test_starts_idle(self):
        self.assertIs(self.controller.state, ControllerState.IDLE)
        self.assertEqual(self.controller.pointer, -1)
        self.assertEqual(self.store.animation.progress.total_cells, 4)
        self.assertEqual(self.store.steps, ())

    def test_step_forward_materializes_lazily(self):
        self.controller.step_forward()

        self.assertIs(self.controller.state, ControllerState.STEPPING)
        self.assertEqual(len(self.store.steps), 12)
        step = self.store.animation.current_step
        self.assertEqual((step.i, step.j, step.k, step.partial_sum), (0, 0, 0, 7))

    def test_highlights_follow_step(self):
        self.step(2)
        pair = ActivePair(a=CellPosition(0, 1), b=CellPosition(1, 0))

        highlight_a = self.store.highlight("A")
        self.assertEqual(highlight_a.row, 0)
        self.assertIsNone(highlight_a.col)
        self.assertEqual(highlight_a.active_pair, pair)

        highlight_b = self.store.highlight("B")
        self.assertEqual(highlight_b.col, 0)
        self.assertIsNone(highlight_b.row)
        self.assertEqual(highlight_b.active_pair, pair)

    def test_step_backward(self):
        self.step(4)
        self.controller.step_backward()

        self.assertEqual(self.controller.pointer, 2)
        step = self.store.animation.current_step
        self.assertEqual((step.i, step.j, step.k), (0, 0, 2))
        self.assertEqual(self.store.highlight("A").active_pair, ActivePair(CellPosition(0, 2), CellPosition(2, 0)))

    def test_step_backward_at_start_is_noop(self):
        self.controller.step_backward()
        self.assertEqual(self.controller.pointer, -1)
        self.step(1)
        self.controller.step_backward()
        self.assertEqual(self.controller.pointer, 0)
        self.assertEqual(self.store.animation.current_step.k, 0)

    def test_backward_never_starts_a_flight(self):
        self.step(3)
        self.assertTrue(self.flights_settled())
        self.step(1)
        self.controller.step_backward()
        self.assertEqual(self.controller.active_flights, [])

    def test_progress_tracks_pointer(self):
        self.step(3)
        progress = self.store.animation.progress
        self.assertEqual(progress.current_cell, CellPosition(0, 0))
        self.assertEqual(progress.completed_cells, 1)
        self.assertEqual(progress.total_cells, 4)

        self.step(1)
        self.assertEqual(self.store.animation.progress.current_cell, CellPosition(0, 1))

    def test_sequencer_progress_published_while_generating(self):
        updates = []
        self.store.animation_changed.connect(lambda: updates.append(self.store.animation.progress))
        self.step(1)
        generated = [p.completed_cells for p in updates[:4]]
        self.assertEqual(generated, [1, 2, 3, 4])

    def test_end_of_sequence(self):
        self.step(12)
        self.assertEqual(self.controller.pointer, 11)
        self.assertIsNotNone(self.store.animation.current_step)

        self.step(1)
        self.assertEqual(self.controller.pointer, 11)
        self.assertIsNone(self.store.animation.current_step)
        self.assertFalse(self.store.animation.is_playing)
        self.assertTrue(self.store.highlight("A").is_empty)
        self.assertTrue(self.store.highlight("B").is_empty)

    def test_manual_pass_fills_result(self):
        self.step(13)
        self.assertTrue(self.flights_settled())
        self.assertEqual(self.store.matrix_c, EXPECTED_C)
        self.assertFalse(self.store.floating_number.is_visible)

    def test_step_mode_recorded(self):
        self.controller.set_step_mode("cell")
        self.assertIs(self.store.animation.step_mode, StepMode.CELL)
        # Stepping still advances one factor at a time
        self.step(1)
        self.assertEqual(self.controller.pointer, 0)


class TestReset(ControllerTestCase):

    def test_reset_returns_to_idle(self):
        self.step(5)
        self.controller.reset()

        self.assertIs(self.controller.state, ControllerState.IDLE)
        self.assertEqual(self.controller.pointer, -1)
        self.assertIsNone(self.store.animation.current_step)
        self.assertEqual(self.store.animation.progress.completed_cells, 0)
        self.assertEqual(self.store.animation.progress.total_cells, 4)
        self.assertEqual(self.store.steps, ())
        self.assertTrue(self.store.highlight("A").is_empty)

    def test_reset_is_idempotent(self):
        self.step(7)
        self.controller.reset()
        once = (self.store.snapshot(), self.controller.state, self.controller.pointer)
        self.controller.reset()
        twice = (self.store.snapshot(), self.controller.state, self.controller.pointer)
        self.assertEqual(once, twice)

    def test_input_change_discards_sequence(self):
        self.step(13)
        self.assertTrue(self.flights_settled())
        self.assertTrue(self.store.edit_cell("A", 0, 0, 2))

        self.assertIs(self.controller.state, ControllerState.IDLE)
        self.assertEqual(self.store.steps, ())
        self.assertEqual(self.store.matrix_c, create_matrix(2, 2))


class TestCellFlight(ControllerTestCase):
    config = AnimatorConfig(settle_before_flight_ms=0, flight_ms=150, settle_after_commit_ms=0)

    def test_flight_phases(self):
        self.step(3)
        flight = self.controller.active_flights[0]
        self.assertIs(flight.phase, FlightPhase.SETTLING)

        self.assertTrue(wait_until(lambda: self.store.floating_number.is_visible))
        self.assertIs(flight.phase, FlightPhase.FLYING)
        floating = self.store.floating_number
        self.assertEqual(floating.value, 58)
        self.assertEqual(floating.start, Point(100, 200))
        self.assertEqual(floating.end, Point(400, 50))
        # Not committed until the flight lands
        self.assertEqual(self.store.matrix_c.data[0][0], 0)

        self.assertTrue(self.flights_settled())
        self.assertIs(flight.phase, FlightPhase.DONE)
        self.assertEqual(self.store.matrix_c.data[0][0], 58)
        self.assertFalse(self.store.floating_number.is_visible)
        self.assertTrue(self.store.highlight("A").is_empty)
        self.assertTrue(self.store.highlight("B").is_empty)

    def test_missing_anchor_still_commits(self):
        self.controller.locate_anchor = lambda name: None
        self.step(3)
        self.assertTrue(self.flights_settled())
        self.assertEqual(self.store.matrix_c.data[0][0], 58)

    def test_reset_cancels_flight(self):
        self.step(3)
        flight = self.controller.active_flights[0]
        self.controller.reset()
        QTest.qWait(250)

        self.assertIs(flight.phase, FlightPhase.CANCELLED)
        self.assertEqual(self.store.matrix_c.data[0][0], 0)
        self.assertFalse(self.store.floating_number.is_visible)
        self.assertEqual(self.controller.active_flights, [])

    def test_shutdown_cancels_flight(self):
        self.step(3)
        self.controller.shutdown()
        QTest.qWait(250)
        self.assertEqual(self.store.matrix_c.data[0][0], 0)


class TestPlayback(ControllerTestCase):

    def test_play_without_result_is_ignored(self):
        self.store.set_matrix("A", create_matrix(2, 4))
        with self.assertLogs("matmul_viz.core.animator", level="WARNING"):
            self.controller.play()
        self.assertFalse(self.store.animation.is_playing)
        self.assertIs(self.controller.state, ControllerState.IDLE)

    def test_play_and_pause(self):
        self.controller.play()
        self.assertIs(self.controller.state, ControllerState.PLAYING)
        self.assertTrue(self.store.animation.is_playing)
        self.assertEqual(len(self.store.steps), 12)

        # Second play keeps the single timer
        self.controller.play()
        self.assertEqual(self.controller.interval_ms, 1000)

        self.controller.pause()
        self.controller.pause()
        self.assertFalse(self.store.animation.is_playing)
        self.assertIs(self.controller.state, ControllerState.READY)

    def test_set_speed_restarts_timer(self):
        self.controller.play()
        self.controller.set_speed(4)
        self.assertEqual(self.store.animation.speed, 4)
        self.assertEqual(self.controller._timer.interval(), 250)
        self.assertTrue(self.controller._timer.isActive())

    def test_set_speed_clamped(self):
        self.controller.set_speed(0)
        self.assertEqual(self.store.animation.speed, FAST.min_speed)
        self.assertFalse(self.controller._timer.isActive())

    def test_full_playback(self):
        self.controller.set_speed(1000)
        self.controller.play()

        self.assertTrue(wait_until(lambda: not self.store.animation.is_playing, timeout_ms=5000))
        self.assertTrue(self.flights_settled())
        self.assertIsNone(self.store.animation.current_step)
        self.assertTrue(self.store.highlight("A").is_empty)
        self.assertTrue(self.store.highlight("B").is_empty)
        self.assertEqual(self.store.matrix_c, EXPECTED_C)
        self.assertFalse(self.store.is_editing_locked)

    def test_toggle_play_restarts_finished_pass(self):
        self.step(13)
        self.assertTrue(self.flights_settled())
        self.assertEqual(self.store.matrix_c, EXPECTED_C)

        self.controller.toggle_play()
        self.assertTrue(self.store.animation.is_playing)
        self.assertEqual(self.controller.pointer, -1)
        self.assertEqual(self.store.matrix_c, create_matrix(2, 2))

        self.controller.toggle_play()
        self.assertFalse(self.store.animation.is_playing)

    def test_edits_locked_during_playback(self):
        self.controller.play()
        self.assertFalse(self.store.edit_cell("B", 0, 0, 3))
        self.controller.pause()


if __name__ == "__main__":
    unittest.main(verbosity=2)
