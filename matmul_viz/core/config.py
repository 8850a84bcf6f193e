import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class AnimatorConfig:
    """
    Timing constants and input bounds.

    Every field can be overridden with a MATMUL_VIZ_<FIELD> environment
    variable (or a .env file in the working directory), see from_env().
    """
    # Playback speed, steps per second
    default_speed: float = 1.0
    min_speed: float = 0.25
    max_speed: float = 3.0
    speed_step: float = 0.25

    # Matrix editor bounds, per dimension
    min_dimension: int = 1
    max_dimension: int = 10

    # Cell flight phases (ms)
    settle_before_flight_ms: int = 50
    flight_ms: int = 700  # must match the overlay animation duration
    settle_after_commit_ms: int = 100

    default_precision: int = 2

    # QSettings identity for the A/B snapshot
    settings_organization: str = "matmul-viz"
    settings_application: str = "matrix-calculator"

    def clamp_speed(self, speed: float) -> float:
        return min(max(float(speed), self.min_speed), self.max_speed)

    def clamp_dimension(self, size: int) -> int:
        return min(max(int(size), self.min_dimension), self.max_dimension)

    @classmethod
    def from_env(cls, prefix: str = "MATMUL_VIZ_") -> "AnimatorConfig":
        """Build a config from the environment, falling back to the defaults."""
        load_dotenv()
        defaults = cls()
        overrides = {}
        for name, value in vars(defaults).items():
            raw = os.getenv(prefix + name.upper())
            if raw is None:
                continue
            try:
                overrides[name] = type(value)(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {prefix + name.upper()}: {raw!r}")
        return cls(**overrides)
