"""
Floating Number Overlay

A label that flies a finished dot product from the running-sum display to
its cell in the result matrix. Positions are in the parent widget's
coordinates; the flight length matches AnimatorConfig.flight_ms.
"""

from PySide6 import QtCore, QtWidgets

from .widgets import format_number


class FloatingNumberOverlay(QtWidgets.QLabel):

    def __init__(self, flight_ms, parent=None):
        super().__init__(parent)
        self.setAttribute(QtCore.Qt.WA_TransparentForMouseEvents)
        self.setAlignment(QtCore.Qt.AlignCenter)
        self.setStyleSheet(
            "background: rgba(60, 120, 220, 200); color: white; font-weight: bold;"
            "font-size: 16px; border-radius: 12px; padding: 4px 12px;"
        )
        self.hide()

        self._animation = QtCore.QPropertyAnimation(self, b"pos", self)
        self._animation.setDuration(flight_ms)
        self._animation.setEasingCurve(QtCore.QEasingCurve.InOutQuad)

    def update_from(self, floating, precision):
        """Follow the store's FloatingNumberState."""
        if not floating.is_visible or floating.value is None:
            self._animation.stop()
            self.hide()
            return

        self.setText(format_number(floating.value, precision))
        self.adjustSize()
        # Centre the label on the anchor points
        offset = QtCore.QPoint(self.width() // 2, self.height() // 2)
        start = QtCore.QPoint(int(floating.start.x), int(floating.start.y)) - offset
        end = QtCore.QPoint(int(floating.end.x), int(floating.end.y)) - offset

        self._animation.stop()
        self.move(start)
        self.show()
        self.raise_()
        self._animation.setStartValue(start)
        self._animation.setEndValue(end)
        self._animation.start()
