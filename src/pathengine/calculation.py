"""Point calculation pipeline.

Sampling, uniform resampling, keyframe indexing and keyframe processing are
chained here into a single :class:`PointCalculationResult` per path. The
result is a pure function of the path's segments, keyframes and config; the
caller decides when to recompute it.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Union

from .config import PointCalculationOptions
from .keyframes import get_keyframe_indexes, process_keyframes
from .models import (
    KeyframeIndexing,
    LookaheadKeyframe,
    Path,
    Point,
    PointCalculationResult,
    SpeedKeyframe,
)
from .sampling import sample_path
from .uniform import compute_uniform_points
from .units import Quantity, UnitConverter, UnitOfLength, as_quantity

log = logging.getLogger(__name__)


def compute_path_points(
    path: Path,
    density: Union[Quantity, float],
    options: Optional[PointCalculationOptions] = None
) -> PointCalculationResult:
    """Calculate the speed-annotated uniform points of a path.

    Args:
        path: Path to calculate.
        density: Distance between uniform points.
        options: Calculation options; ``default_follow_bent_rate`` applies to
            the implicit keyframe at index 0 of both keyframe lists.

    Returns:
        The uniform points followed by one terminal point exactly at the
        path's last control (its heading, speed and lookahead 0), the segment
        index boundaries, and the indexes of the user keyframes (the implicit
        keyframes are not listed).

    Example:
        >>> from pathengine.models import make_end_control
        >>> path = Path()
        >>> _ = path.add_linear_segment(make_end_control(66, 60, 90), start=make_end_control(60, 60, 0))
        >>> result = compute_path_points(path, Quantity(2, UnitOfLength.CENTIMETER))
        >>> len(result.points)
        5
    """
    if options is None:
        options = PointCalculationOptions()
    density = as_quantity(density)

    if not path.segments:
        log.debug("Path %s has no segments", path.uid)
        return PointCalculationResult(
            arc_length=0.0, points=[], segment_indexes=[], speed_keyframe_indexes=[], lookahead_keyframe_indexes=[]
        )

    sample_result = sample_path(path, density)
    uniform_result = compute_uniform_points(sample_result, density)
    points = uniform_result.points

    speed_keyframe_indexes = get_keyframe_indexes(path.segments, uniform_result.segment_indexes, "speed")
    process_keyframes(path.pc, points, [
        KeyframeIndexing(0, None, SpeedKeyframe(0, 1, options.default_follow_bent_rate)),
        *speed_keyframe_indexes
    ])
    lookahead_keyframe_indexes = get_keyframe_indexes(path.segments, uniform_result.segment_indexes, "lookahead")
    process_keyframes(path.pc, points, [
        KeyframeIndexing(0, None, LookaheadKeyframe(0, 1, options.default_follow_bent_rate)),
        *lookahead_keyframe_indexes
    ])

    last_segment = path.segments[-1]
    last_control = last_segment.last
    points.append(Point(
        last_control.x, last_control.y, sample_ref=last_segment, sample_t=1.0, speed=0.0, heading=last_control.heading
    ))

    if path.pc.max_deceleration_rate is not None:
        apply_deceleration_limit(
            points, path.pc.max_deceleration_rate, UnitConverter(density.unit, UnitOfLength.INCH)
        )

    return PointCalculationResult(
        arc_length=sample_result.arc_length,
        points=points,
        segment_indexes=uniform_result.segment_indexes,
        speed_keyframe_indexes=speed_keyframe_indexes,
        lookahead_keyframe_indexes=lookahead_keyframe_indexes,
    )


def apply_deceleration_limit(points: List[Point], rate: float, converter: UnitConverter) -> None:
    """Cap speeds so the robot can brake to the final point's speed.

    Walking backwards, each point's speed becomes at most
    ``sqrt(v_next^2 + 2 * rate * d)`` with ``d`` the distance to the next
    point, converted by ``converter`` (density unit to inches).
    """
    for i in range(len(points) - 2, -1, -1):
        last = points[i + 1]
        current = points[i]

        new_speed = math.sqrt(last.speed ** 2 + 2 * rate * converter.from_a_to_b(last.distance(current)))
        current.speed = min(current.speed, new_speed)


def discrete_points(path: Path) -> List[Point]:
    """The first control of the path and the last control of each segment, without interpolation."""
    if not path.segments:
        return []

    start = path.segments[0]
    points = [Point(start.first.x, start.first.y, sample_ref=start, sample_t=0.0, heading=start.first.heading)]
    for segment in path.segments:
        points.append(Point(segment.last.x, segment.last.y, sample_ref=segment, sample_t=0.0, heading=segment.last.heading))
    return points
