"""
Matrix Multiplication Visualizer - Main Entry Point

Builds the composition root (config, persisted matrices, store) and starts
the Qt event loop.
"""
import logging
import os
import sys

from PySide6 import QtWidgets

from matmul_viz.app.desktop.main_window import MainWindow
from matmul_viz.core.config import AnimatorConfig
from matmul_viz.core.persistence import MatrixSnapshotStore
from matmul_viz.core.store import MatrixStore


def main(argv=None):
    logging.basicConfig(
        level=os.getenv("MATMUL_VIZ_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    app = QtWidgets.QApplication(argv if argv is not None else sys.argv)

    config = AnimatorConfig.from_env()
    persistence = MatrixSnapshotStore.for_application(
        config.settings_organization, config.settings_application
    )
    store = MatrixStore(config, persistence=persistence)

    window = MainWindow(store, config)
    window.show()

    print("Matrix Multiplication Visualizer started.")
    print("Controls: Space to Play/Pause, Left/Right to step, 'r' to reset.")
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
