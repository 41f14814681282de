"""Clamped scalar control channels (pendulum torque, drone engines)."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
import math

from ..errors import ValidationError

HISTORY_LENGTH = 256  # applied values kept per actuator


def _clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value between min and max."""
    return max(min_val, min(max_val, value))


@dataclass
class Actuator:
    """One independently driven control input.

    `current` always lies in [min_value, max_value]. `dirty` is set by
    `command()` and cleared by the owning body once a trajectory has been
    solved with `current`. `history` holds the clamped value applied by each
    `command()` call, oldest first, up to HISTORY_LENGTH entries. The initial
    value is not recorded.
    """

    name: str
    min_value: float
    max_value: float
    current: float = 0.0
    desired: float = 0.0
    dirty: bool = False
    history: deque = field(default_factory=lambda: deque(maxlen=HISTORY_LENGTH), repr=False)

    def __post_init__(self):
        self.min_value = float(self.min_value)
        self.max_value = float(self.max_value)
        self.current = float(self.current)
        if math.isnan(self.min_value) or math.isnan(self.max_value) or self.min_value > self.max_value:
            raise ValidationError(
                f"Actuator '{self.name}' has invalid bounds [{self.min_value}, {self.max_value}]"
            )
        if not self.min_value <= self.current <= self.max_value:
            raise ValidationError(
                f"Actuator '{self.name}' initial value {self.current} outside [{self.min_value}, {self.max_value}]"
            )
        self.desired = float(self.desired)

    @property
    def bounds(self) -> tuple[float, float]:
        return self.min_value, self.max_value

    def command(self, value: float) -> float:
        """Store a new command, clamped to the actuator range.

        Out-of-range values are clamped, not rejected. Returns the value
        actually applied.
        """
        value = float(value)
        if math.isnan(value):
            raise ValidationError(f"Actuator '{self.name}' received NaN command")
        applied = _clamp(value, self.min_value, self.max_value)
        self.desired = value
        self.current = applied
        self.dirty = True
        self.history.append(applied)
        return applied

    def clear(self):
        self.dirty = False
