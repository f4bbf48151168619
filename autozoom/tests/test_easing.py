"""Tests for camera.easing and camera.geometry primitives."""

import pytest

from camera.easing import EasingCurve, ease_in, ease_in_out, ease_out, linear, smoothstep
from camera.geometry import CENTER, NormalizedPoint, clamp


# ── Easing curves ───────────────────────────────────────────────────


class TestEasingCurves:
    @pytest.mark.parametrize("curve", list(EasingCurve))
    def test_boundaries(self, curve: EasingCurve) -> None:
        assert curve.apply(0.0) == pytest.approx(0.0)
        assert curve.apply(1.0) == pytest.approx(1.0)

    @pytest.mark.parametrize("curve", list(EasingCurve))
    def test_clamps_out_of_range(self, curve: EasingCurve) -> None:
        assert curve.apply(-0.5) == pytest.approx(0.0)
        assert curve.apply(1.7) == pytest.approx(1.0)

    @pytest.mark.parametrize("curve", list(EasingCurve))
    def test_monotonic(self, curve: EasingCurve) -> None:
        prev = curve.apply(0.0)
        for i in range(1, 101):
            curr = curve.apply(i / 100.0)
            assert curr >= prev, f"Not monotonic at t={i / 100.0}"
            prev = curr

    def test_quadratic_values(self) -> None:
        assert linear(0.3) == pytest.approx(0.3)
        assert ease_in(0.3) == pytest.approx(0.09)
        assert ease_out(0.3) == pytest.approx(1.0 - 0.7 ** 2)

    def test_ease_in_out_halves(self) -> None:
        assert ease_in_out(0.25) == pytest.approx(2 * 0.25 ** 2)
        assert ease_in_out(0.5) == pytest.approx(0.5)
        assert ease_in_out(0.75) == pytest.approx(1.0 - (0.5 ** 2) / 2)

    def test_ease_out_faster_start(self) -> None:
        """Ease-out is above linear at the midpoint, ease-in below."""
        assert ease_out(0.5) > 0.5 > ease_in(0.5)

    def test_smoothstep_symmetric(self) -> None:
        assert smoothstep(0.5) == pytest.approx(0.5)
        assert smoothstep(0.2) == pytest.approx(1.0 - smoothstep(0.8))

    def test_enum_from_string(self) -> None:
        assert EasingCurve("ease_in_out") is EasingCurve.EASE_IN_OUT


# ── NormalizedPoint ─────────────────────────────────────────────────


class TestNormalizedPoint:
    def test_distance(self) -> None:
        assert NormalizedPoint(0.0, 0.0).distance_to(NormalizedPoint(0.3, 0.4)) == pytest.approx(0.5)

    def test_lerp(self) -> None:
        p = NormalizedPoint(0.2, 0.2).lerp(NormalizedPoint(0.6, 1.0), 0.5)
        assert p.x == pytest.approx(0.4)
        assert p.y == pytest.approx(0.6)

    def test_clamped(self) -> None:
        p = NormalizedPoint(-0.1, 1.3).clamped()
        assert (p.x, p.y) == (0.0, 1.0)

    def test_immutable(self) -> None:
        with pytest.raises(AttributeError):
            CENTER.x = 0.1  # type: ignore[misc]

    def test_dict_roundtrip(self) -> None:
        p = NormalizedPoint(0.25, 0.75)
        assert NormalizedPoint.from_dict(p.to_dict()) == p

    def test_clamp_helper(self) -> None:
        assert clamp(5.0, 0.0, 1.0) == 1.0
        assert clamp(-5.0, 0.0, 1.0) == 0.0
        assert clamp(0.4, 0.0, 1.0) == 0.4
