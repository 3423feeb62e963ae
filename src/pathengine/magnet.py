"""Directional snapping of a dragged point onto reference lines."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .geometry import Vector, find_closest_point_on_line, find_lines_intersection


@dataclass
class MagnetReference:
    """An infinite line through ``source`` with bearing ``heading`` (degrees)."""

    source: Vector
    heading: float


def find_closest_reference(
    target: Vector,
    refs: Sequence[MagnetReference]
) -> Tuple[Vector, Optional[MagnetReference]]:
    """Project ``target`` onto every reference line and keep the nearest.

    Ties keep the earlier reference. Without references the target itself is
    returned with ``None``.
    """
    closest_pos: Optional[Vector] = None
    closest_distance = math.inf
    closest_ref: Optional[MagnetReference] = None

    for ref in refs:
        result = find_closest_point_on_line(ref.source, ref.heading, target)
        distance = target.distance(result)
        if distance < closest_distance:
            closest_pos = result
            closest_distance = distance
            closest_ref = ref

    return (closest_pos if closest_pos is not None else target), closest_ref


def magnet(
    target: Vector,
    refs: Sequence[MagnetReference],
    threshold: float
) -> Tuple[Vector, List[MagnetReference]]:
    """Snap ``target`` to the nearest reference line, or to a line intersection.

    1. Project onto the nearest line. Give up if it is farther than
       ``threshold``.
    2. From that projection, find the nearest line that is not parallel to
       the first one.
    3. If the two lines intersect within ``threshold`` of the original
       target, snap to the intersection.

    Reference headings are not normalized. Parallel lines are found with
    ``heading % 180``, which is floored, so ``-90`` is parallel to ``90``.

    Args:
        target: The dragged point.
        refs: Candidate reference lines.
        threshold: Maximum snap distance.

    Returns:
        The snapped position and the references it lies on (empty when
        nothing snapped, in which case the position is ``target`` itself).
    """
    result1, result1_ref = find_closest_reference(target, refs)

    if result1_ref is None or result1.distance(target) > threshold:
        return target, []

    _, result2_ref = find_closest_reference(
        result1,
        [ref for ref in refs if ref.heading % 180 != result1_ref.heading % 180]
    )

    if result2_ref is not None:
        result3 = find_lines_intersection(
            result1_ref.source, result1_ref.heading, result2_ref.source, result2_ref.heading
        )
        if result3 is not None and result3.distance(target) < threshold:
            return result3, [result1_ref, result2_ref]

    return result1, [result1_ref]
