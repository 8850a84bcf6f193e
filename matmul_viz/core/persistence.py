"""
Matrix Snapshot Persistence

Only the two input matrices survive between sessions. They are stored as
JSON lists in a QSettings key-value store; everything else is derived at
startup.
"""

import json
import logging
from typing import Optional, Tuple

from PySide6 import QtCore

from .matrix import Matrix

logger = logging.getLogger(__name__)

KEY_MATRIX_A = "matrices/a"
KEY_MATRIX_B = "matrices/b"


class MatrixSnapshotStore:
    """Reads and writes the A/B snapshot through a QSettings instance."""

    def __init__(self, settings: QtCore.QSettings):
        self.settings = settings

    @classmethod
    def for_application(cls, organization, application):
        return cls(QtCore.QSettings(organization, application))

    @classmethod
    def for_file(cls, path):
        """INI-backed store, used for portable installs and tests."""
        return cls(QtCore.QSettings(str(path), QtCore.QSettings.Format.IniFormat))

    def save(self, matrix_a: Matrix, matrix_b: Matrix):
        self.settings.setValue(KEY_MATRIX_A, json.dumps(matrix_a.tolist()))
        self.settings.setValue(KEY_MATRIX_B, json.dumps(matrix_b.tolist()))
        self.settings.sync()

    def load(self) -> Optional[Tuple[Matrix, Matrix]]:
        """Return the stored (A, B) pair, or None if absent or unreadable."""
        raw_a = self.settings.value(KEY_MATRIX_A)
        raw_b = self.settings.value(KEY_MATRIX_B)
        if raw_a is None or raw_b is None:
            return None

        try:
            return Matrix(json.loads(raw_a)), Matrix(json.loads(raw_b))
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring unreadable matrix snapshot: %s", e)
            return None

    def clear(self):
        self.settings.remove(KEY_MATRIX_A)
        self.settings.remove(KEY_MATRIX_B)
        self.settings.sync()
