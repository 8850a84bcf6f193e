"""
Smoke tests for the desktop window on the offscreen Qt platform.

Checks that store changes reach the widgets and widget edits reach the store.
"""

import unittest

from tests.qt_support import get_app, wait_until

from matmul_viz.app.desktop.main_window import MainWindow
from matmul_viz.app.desktop.widgets import format_number
from matmul_viz.core.animator import RUNNING_SUM_ANCHOR, result_cell_anchor
from matmul_viz.core.config import AnimatorConfig
from matmul_viz.core.matrix import Matrix
from matmul_viz.core.presets import find_preset
from matmul_viz.core.store import MatrixStore

FAST = AnimatorConfig(settle_before_flight_ms=0, flight_ms=0, settle_after_commit_ms=0)


class TestMainWindow(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        get_app()

    def setUp(self):
        self.store = MatrixStore(FAST)
        self.window = MainWindow(self.store)
        self.window.show()
        self.store.load_preset(find_preset("2×3 × 3×2 Example"))

    def tearDown(self):
        self.window.close()

    def test_grids_follow_store(self):
        self.assertEqual(self.window.panel_a.grid.rowCount(), 2)
        self.assertEqual(self.window.panel_a.grid.columnCount(), 3)
        self.assertEqual(self.window.panel_b.grid.item(2, 1).text(), "12")
        self.assertEqual(self.window.panel_c.grid.rowCount(), 2)

    def test_grid_edit_reaches_store(self):
        self.window.panel_a.grid.item(0, 0).setText("10")
        self.assertEqual(self.store.matrix_a.data[0][0], 10)

    def test_rejected_edit_restores_cell(self):
        self.window.panel_a.grid.item(0, 0).setText("abc")
        self.assertEqual(self.store.matrix_a.data[0][0], 1)
        self.assertEqual(self.window.panel_a.grid.item(0, 0).text(), "1")

    def test_incompatible_shapes_show_message(self):
        self.store.set_matrix("B", Matrix([[1, 2], [3, 4]]))
        self.assertEqual(self.window.panel_c.grid.rowCount(), 0)
        self.assertIn("Incompatible", self.window.step_display.lbl_operation.text())

    def test_step_display_and_anchors(self):
        self.window.controller.step_forward()
        self.assertIn("A[1,1] = 1", self.window.step_display.lbl_operation.text())
        self.assertIn("Running Sum for C[1,1]: 7", self.window.step_display.lbl_sum.text())
        self.assertIsNotNone(self.window._locate_anchor(RUNNING_SUM_ANCHOR))
        self.assertIsNotNone(self.window._locate_anchor(result_cell_anchor(1, 1)))
        self.assertIsNone(self.window._locate_anchor(result_cell_anchor(5, 5)))

    def test_controls_locked_while_stepping(self):
        self.window.controller.step_forward()
        self.assertFalse(self.window.panel_a.dimensions.isEnabled())
        self.assertFalse(self.window.presets.isEnabled())

    def test_full_pass_through_buttons(self):
        for _ in range(13):
            self.window.playback.btn_forward.click()
        self.assertTrue(wait_until(lambda: not self.window.controller.active_flights))
        self.assertEqual(self.window.panel_c.grid.item(1, 1).text(), "154")

    def test_format_number(self):
        self.assertEqual(format_number(58.0), "58")
        self.assertEqual(format_number(1.375, 2), "1.38")


if __name__ == "__main__":
    unittest.main(verbosity=2)
