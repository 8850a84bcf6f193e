"""Animated, step-by-step matrix multiplication visualizer."""

__version__ = "0.1.0"
