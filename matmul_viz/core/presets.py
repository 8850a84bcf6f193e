"""Predefined A/B pairs for quick exploration."""

from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class PresetMatrix:
    name: str
    description: str
    matrix_a: Sequence[Sequence[float]]
    matrix_b: Sequence[Sequence[float]]


PRESET_MATRICES = (
    PresetMatrix(
        name="2×3 × 3×2 Example",
        description="Simple example: A(2×3) × B(3×2) = C(2×2)",
        matrix_a=((1, 2, 3),
                  (4, 5, 6)),
        matrix_b=((7, 8),
                  (9, 10),
                  (11, 12)),
    ),
    PresetMatrix(
        name="Identity Test",
        description="A × I = A (where I is identity matrix)",
        matrix_a=((1, 2),
                  (3, 4)),
        matrix_b=((1, 0),
                  (0, 1)),
    ),
    PresetMatrix(
        name="Zero Matrix",
        description="A × 0 = 0",
        matrix_a=((1, 2, 3),
                  (4, 5, 6)),
        matrix_b=((0, 0),
                  (0, 0),
                  (0, 0)),
    ),
    PresetMatrix(
        name="Large Example",
        description="3×4 × 4×3 example with varied values",
        matrix_a=((2, -1, 3, 0),
                  (1, 4, -2, 1),
                  (0, 2, 1, -3)),
        matrix_b=((1, 0, -1),
                  (2, 3, 0),
                  (-1, 2, 1),
                  (0, -1, 2)),
    ),
)


def find_preset(name: str) -> Optional[PresetMatrix]:
    for preset in PRESET_MATRICES:
        if preset.name == name:
            return preset
    return None
