"""One-Euro adaptive low-pass filter for noisy cursor samples.

Slow movement is smoothed heavily (low cutoff, removes jitter); fast
movement raises the cutoff so the filtered value does not lag behind
the hand.  See Casiez et al., "1€ Filter", CHI 2012.
"""

import math
from typing import Optional

from .geometry import NormalizedPoint


def smoothing_factor(cutoff: float, dt: float) -> float:
    """alpha = 1 / (1 + tau/dt) with tau = 1 / (2π·cutoff)."""
    if cutoff <= 0:
        return 1.0
    tau = 1.0 / (2.0 * math.pi * cutoff)
    return 1.0 / (1.0 + tau / dt)


class OneEuroFilter:
    """Single-axis One-Euro filter.

    Stateful: feed samples in time order.  Samples whose timestamp does
    not advance are ignored and the previous output is returned.
    """

    def __init__(self, min_cutoff: float = 1.0, beta: float = 0.0, d_cutoff: float = 1.0) -> None:
        self.min_cutoff = min_cutoff
        self.beta = beta
        self.d_cutoff = d_cutoff
        self._x_prev: Optional[float] = None
        self._dx_prev = 0.0
        self._t_prev = 0.0

    def reset(self) -> None:
        self._x_prev = None
        self._dx_prev = 0.0
        self._t_prev = 0.0

    def filter(self, value: float, timestamp: float) -> float:
        if self._x_prev is None:
            self._x_prev = value
            self._t_prev = timestamp
            return value

        dt = timestamp - self._t_prev
        if dt <= 0:
            return self._x_prev

        # Derivative, smoothed at a fixed cutoff
        dx = (value - self._x_prev) / dt
        a_d = smoothing_factor(self.d_cutoff, dt)
        dx_hat = a_d * dx + (1.0 - a_d) * self._dx_prev

        # Faster motion -> higher cutoff -> less lag
        cutoff = self.min_cutoff + self.beta * abs(dx_hat)
        a = smoothing_factor(cutoff, dt)
        x_hat = a * value + (1.0 - a) * self._x_prev

        self._x_prev = x_hat
        self._dx_prev = dx_hat
        self._t_prev = timestamp
        return x_hat


class PointFilter:
    """Two independent One-Euro filters, one per axis."""

    def __init__(self, min_cutoff: float = 1.0, beta: float = 0.0, d_cutoff: float = 1.0) -> None:
        self._fx = OneEuroFilter(min_cutoff, beta, d_cutoff)
        self._fy = OneEuroFilter(min_cutoff, beta, d_cutoff)

    def reset(self) -> None:
        self._fx.reset()
        self._fy.reset()

    def filter(self, point: NormalizedPoint, timestamp: float) -> NormalizedPoint:
        return NormalizedPoint(
            self._fx.filter(point.x, timestamp),
            self._fy.filter(point.y, timestamp),
        )
