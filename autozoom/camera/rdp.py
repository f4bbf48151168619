"""Ramer–Douglas–Peucker path simplification with a time-gap floor.

Follow mode produces one camera sample per output tick, far more than a
renderer needs.  ``simplify`` drops samples that lie within *epsilon*
of the straight line through their neighbours; ``densify`` then puts
raw samples back wherever the simplified path leaves too long a gap,
because slow near-linear motion can otherwise collapse to two points
seconds apart.
"""

import math
from dataclasses import dataclass
from typing import List

import numpy as np

from .geometry import NormalizedPoint


@dataclass(frozen=True)
class PathPoint:
    """A camera center sample at a time."""
    time: float
    position: NormalizedPoint


def perpendicular_distance(
    point: NormalizedPoint, start: NormalizedPoint, end: NormalizedPoint
) -> float:
    """Distance from *point* to the infinite line through *start*/*end*.

    Falls back to the plain distance to *start* when the segment has
    zero length.
    """
    dx = end.x - start.x
    dy = end.y - start.y
    length = math.hypot(dx, dy)
    if length == 0:
        return point.distance_to(start)
    return abs(dy * point.x - dx * point.y + end.x * start.y - end.y * start.x) / length


def simplify(points: List[PathPoint], epsilon: float) -> List[PathPoint]:
    """Reduce *points* to the subset needed to stay within *epsilon*.

    First and last points are always kept.  Uses an explicit stack of
    index ranges instead of recursion so long paths cannot exhaust the
    interpreter's recursion limit.
    """
    if len(points) <= 2:
        return list(points)

    keep = [False] * len(points)
    keep[0] = keep[-1] = True
    stack = [(0, len(points) - 1)]

    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue
        a = points[first].position
        b = points[last].position
        max_dist = -1.0
        index = first
        for i in range(first + 1, last):
            d = perpendicular_distance(points[i].position, a, b)
            if d > max_dist:
                max_dist = d
                index = i
        if max_dist > epsilon:
            keep[index] = True
            stack.append((first, index))
            stack.append((index, last))

    return [p for p, k in zip(points, keep) if k]


def densify(
    simplified: List[PathPoint], raw: List[PathPoint], max_gap: float
) -> List[PathPoint]:
    """Insert raw samples so no two consecutive points are > *max_gap* apart.

    For each synthetic time ``t0 + k·max_gap`` inside an oversized gap the
    raw sample nearest in time is inserted, provided it lies strictly
    between the two enclosing simplified points.  The result is sorted
    and has unique timestamps.
    """
    if len(simplified) < 2 or not raw or max_gap <= 0:
        return sorted(simplified, key=lambda p: p.time)

    raw_sorted = sorted(raw, key=lambda p: p.time)
    raw_times = np.array([p.time for p in raw_sorted])

    out = list(simplified)
    for a, b in zip(simplified, simplified[1:]):
        gap = b.time - a.time
        if gap <= max_gap:
            continue
        synthetic = a.time + max_gap * np.arange(1, int(math.ceil(gap / max_gap)))
        synthetic = synthetic[synthetic < b.time]
        if synthetic.size == 0:
            continue
        # Nearest raw sample: compare the neighbours either side of each insertion point
        idx = np.searchsorted(raw_times, synthetic)
        left = np.clip(idx - 1, 0, len(raw_times) - 1)
        right = np.clip(idx, 0, len(raw_times) - 1)
        pick_right = np.abs(raw_times[right] - synthetic) < np.abs(raw_times[left] - synthetic)
        nearest = np.where(pick_right, right, left)
        for i in np.unique(nearest):
            candidate = raw_sorted[int(i)]
            if a.time < candidate.time < b.time:
                out.append(candidate)

    by_time = {}
    for p in sorted(out, key=lambda p: p.time):
        by_time.setdefault(p.time, p)
    return list(by_time.values())
