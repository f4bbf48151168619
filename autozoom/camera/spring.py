"""Damped-spring motion model for camera transitions.

A mass on a spring with damping, solved in closed form so a transition
can be sampled at any time without integrating step by step:

    m·x'' + c·x' + k·x = 0

with stiffness ``k`` (tension), damping ``c`` (friction) and mass ``m``.
The damping ratio ζ = c / (2√(k·m)) selects the regime:

* ζ < 1  under-damped: decaying oscillation at ωd = ω₀√(1-ζ²)
* ζ = 1  critically damped: fastest approach without overshoot
* ζ > 1  over-damped: sum of two decaying exponentials

Each regime solves the *normalized* problem (start at displacement 1,
rest at 0) and returns ``(position, velocity)``; :class:`SpringAnimation`
maps that back onto an arbitrary ``from``/``to`` pair.
"""

import math
from dataclasses import dataclass
from typing import Dict, Tuple

_CRITICAL_TOLERANCE = 1e-9
_MIN_DISPLACEMENT = 1e-4


def _under_damped(t: float, omega0: float, zeta: float, v0: float) -> Tuple[float, float]:
    omega_d = omega0 * math.sqrt(1.0 - zeta * zeta)
    decay = math.exp(-zeta * omega0 * t)
    a = 1.0
    b = (v0 + zeta * omega0 * a) / omega_d
    cos_v = math.cos(omega_d * t)
    sin_v = math.sin(omega_d * t)
    position = decay * (a * cos_v + b * sin_v)
    velocity = (-zeta * omega0 * decay * (a * cos_v + b * sin_v)
                + decay * (-a * omega_d * sin_v + b * omega_d * cos_v))
    return position, velocity


def _critically_damped(t: float, omega0: float, v0: float) -> Tuple[float, float]:
    decay = math.exp(-omega0 * t)
    factor = v0 + omega0
    position = decay * (1.0 + factor * t)
    velocity = decay * (factor - omega0 * (1.0 + factor * t))
    return position, velocity


def _over_damped(t: float, omega0: float, zeta: float, v0: float) -> Tuple[float, float]:
    root = math.sqrt(zeta * zeta - 1.0)
    r1 = -omega0 * (zeta - root)
    r2 = -omega0 * (zeta + root)
    c2 = (v0 - r1) / (r2 - r1)
    c1 = 1.0 - c2
    e1 = math.exp(r1 * t)
    e2 = math.exp(r2 * t)
    return c1 * e1 + c2 * e2, c1 * r1 * e1 + c2 * r2 * e2


@dataclass(frozen=True)
class SpringAnimation:
    """Spring parameters plus closed-form evaluation.

    Out-of-range parameters are clamped rather than rejected:
    tension >= 1, friction >= 0, mass >= 0.1.
    """

    tension: float = 170.0
    friction: float = 26.0
    mass: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "tension", max(1.0, self.tension))
        object.__setattr__(self, "friction", max(0.0, self.friction))
        object.__setattr__(self, "mass", max(0.1, self.mass))

    @property
    def angular_frequency(self) -> float:
        return math.sqrt(self.tension / self.mass)

    @property
    def damping_ratio(self) -> float:
        return self.friction / (2.0 * math.sqrt(self.tension * self.mass))

    @property
    def settling_time(self) -> float:
        """Seconds until the envelope decays to ~2% (four time constants)."""
        zeta = self.damping_ratio
        if zeta <= 0:
            return math.inf
        return 4.0 / (zeta * self.angular_frequency)

    def _normalized(self, t: float, v0: float) -> Tuple[float, float]:
        zeta = self.damping_ratio
        omega0 = self.angular_frequency
        if abs(zeta - 1.0) < _CRITICAL_TOLERANCE:
            return _critically_damped(t, omega0, v0)
        if zeta < 1.0:
            return _under_damped(t, omega0, zeta, v0)
        return _over_damped(t, omega0, zeta, v0)

    def value(self, t: float, start: float, end: float, initial_velocity: float = 0.0) -> float:
        """Position at *t* seconds into a move from *start* to *end*."""
        if t <= 0:
            return start
        displacement = end - start
        if abs(displacement) < _MIN_DISPLACEMENT:
            return end
        position, _ = self._normalized(t, -initial_velocity / displacement)
        return end - displacement * position

    def velocity(self, t: float, start: float, end: float, initial_velocity: float = 0.0) -> float:
        if t <= 0:
            return initial_velocity
        displacement = end - start
        if abs(displacement) < _MIN_DISPLACEMENT:
            return 0.0
        _, velocity = self._normalized(t, -initial_velocity / displacement)
        return -displacement * velocity

    def is_settled(
        self,
        t: float,
        start: float,
        end: float,
        position_threshold: float = 0.001,
        velocity_threshold: float = 0.001,
    ) -> bool:
        position_delta = abs(self.value(t, start, end) - end)
        normalized_velocity = abs(self.velocity(t, start, end) / max(abs(end - start), 1.0))
        return position_delta < position_threshold and normalized_velocity < velocity_threshold

    def progress(self, t: float) -> float:
        """Normalized 0 → 1 curve, clamped so overshoot never leaves [0, 1]."""
        return max(0.0, min(1.0, self.value(t, 0.0, 1.0)))

    def progress_over(self, elapsed: float, duration: float) -> float:
        """Progress with the spring's time axis stretched to *duration*.

        The spring reaches its settling time exactly when *elapsed*
        equals *duration*, so a transition honours its configured length
        whatever the spring's natural speed.
        """
        if duration <= 0 or elapsed >= duration:
            return 1.0
        horizon = self.settling_time
        if not math.isfinite(horizon):
            horizon = duration  # undamped: no natural settling point
        return self.progress(elapsed / duration * horizon)

    def step(
        self, position: float, velocity: float, target: float, dt: float
    ) -> Tuple[float, float]:
        """Advance one semi-implicit Euler step toward *target*."""
        accel = (-self.tension * (position - target) - self.friction * velocity) / self.mass
        velocity += accel * dt
        position += velocity * dt
        return position, velocity


# ── Presets ─────────────────────────────────────────────────────────

SPRING_PRESETS: Dict[str, SpringAnimation] = {
    "default": SpringAnimation(tension=170, friction=26, mass=1),
    "gentle": SpringAnimation(tension=120, friction=14, mass=1),
    "wobbly": SpringAnimation(tension=180, friction=12, mass=1),
    "stiff": SpringAnimation(tension=210, friction=20, mass=1),
    "slow": SpringAnimation(tension=100, friction=20, mass=1.5),
    "molasses": SpringAnimation(tension=80, friction=30, mass=2),
}

DEFAULT_SPRING = SPRING_PRESETS["default"]
