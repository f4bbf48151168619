"""Position-dependent zoom scale.

At a given zoom level, content near a screen edge ends up off-center
once the viewport is clamped to the recording, so it occupies less of
the frame than content in the middle.  The calculator compensates by
boosting the scale as the focus point approaches an edge or corner.

The boost curve is a pluggable policy: any callable taking a
:class:`NormalizedPoint` and returning a factor >= 1.0.
"""

import math
from dataclasses import dataclass
from typing import Callable

from .geometry import NormalizedPoint, clamp

BoostCurve = Callable[[NormalizedPoint], float]

EDGE_THRESHOLD = 0.15    # closer than this to any edge = "edge position"
CORNER_THRESHOLD = 0.2   # closer than this to two edges = "corner position"


def is_edge_position(point: NormalizedPoint, threshold: float = EDGE_THRESHOLD) -> bool:
    return (
        point.x < threshold
        or point.x > 1.0 - threshold
        or point.y < threshold
        or point.y > 1.0 - threshold
    )


def is_corner_position(point: NormalizedPoint, threshold: float = CORNER_THRESHOLD) -> bool:
    near_x = point.x < threshold or point.x > 1.0 - threshold
    near_y = point.y < threshold or point.y > 1.0 - threshold
    return near_x and near_y


def no_boost(point: NormalizedPoint) -> float:
    return 1.0


@dataclass(frozen=True)
class EdgeBoostCurve:
    """Boost by distance to the *nearest* edge, plus a corner multiplier.

    factor = 1 + edge_boost · (1 - d / 0.5), where d is the distance to
    the nearest edge (0.5 at the center).  Points in a corner region get
    an extra ``corner_boost`` multiplier on top.
    """
    edge_boost: float = 0.25
    corner_boost: float = 1.1
    corner_threshold: float = CORNER_THRESHOLD

    def __call__(self, point: NormalizedPoint) -> float:
        p = point.clamped()
        edge_distance = min(p.x, 1.0 - p.x, p.y, 1.0 - p.y)
        factor = 1.0 + self.edge_boost * (1.0 - edge_distance / 0.5)
        if is_corner_position(p, self.corner_threshold):
            factor *= self.corner_boost
        return factor


@dataclass(frozen=True)
class RadialBoostCurve:
    """Boost by Euclidean distance from the screen center.

    Smoother than :class:`EdgeBoostCurve` (no corner step); reaches
    ``1 + max_boost`` exactly at the corners.
    """
    max_boost: float = 0.3

    def __call__(self, point: NormalizedPoint) -> float:
        p = point.clamped()
        r = math.hypot(p.x - 0.5, p.y - 0.5) / math.hypot(0.5, 0.5)
        return 1.0 + self.max_boost * r


class DynamicZoomCalculator:
    """Maps a focus point to a zoom scale within ``[min_scale, max_scale]``."""

    def __init__(
        self,
        base_scale: float = 2.0,
        min_scale: float = 1.0,
        max_scale: float = 3.0,
        boost_curve: BoostCurve = EdgeBoostCurve(),
    ) -> None:
        self.base_scale = base_scale
        self.min_scale = min_scale
        self.max_scale = max_scale
        self.boost_curve = boost_curve

    def scale_with_corner_boost(self, point: NormalizedPoint) -> float:
        # A curve returning < 1 must never zoom below the base scale
        factor = max(1.0, self.boost_curve(point))
        return clamp(self.base_scale * factor, max(1.0, self.min_scale), self.max_scale)
