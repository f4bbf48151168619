"""Normalized screen geometry shared by every camera computation.

All positions live in the unit square: ``(0, 0)`` is the top-left of the
recorded screen and ``(1, 1)`` the bottom-right.  Nothing in the
generator ever converts back to pixels.
"""

import math
from dataclasses import dataclass


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp *value* into ``[lo, hi]``."""
    return max(lo, min(hi, value))


@dataclass(frozen=True)
class NormalizedPoint:
    """An immutable point in [0, 1]² screen space."""
    x: float
    y: float

    def distance_to(self, other: "NormalizedPoint") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def lerp(self, other: "NormalizedPoint", t: float) -> "NormalizedPoint":
        """Linear blend toward *other*; ``t`` is not clamped."""
        return NormalizedPoint(
            self.x + (other.x - self.x) * t,
            self.y + (other.y - self.y) * t,
        )

    def clamped(self) -> "NormalizedPoint":
        return NormalizedPoint(clamp(self.x, 0.0, 1.0), clamp(self.y, 0.0, 1.0))

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @staticmethod
    def from_dict(d: dict) -> "NormalizedPoint":
        return NormalizedPoint(x=float(d["x"]), y=float(d["y"]))


CENTER = NormalizedPoint(0.5, 0.5)
