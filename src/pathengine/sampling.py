"""Dense, non-uniform sampling of segments and paths.

The sample points produced here are the raw material for the uniform
resampler: they carry exact positions and cumulative arc length, plus the
segment boundary markers (headings and ``is_last``) that must survive
resampling.

The joined result of :func:`sample_path` looks like::

    A B B B ... B B B C B B B ... B B B C B B B ... B B B D

    A: first sample of the first segment, with heading
    B: samples inside a segment
    C: last sample of a segment, with heading and is_last
       (the next segment's own first sample is dropped)
    D: last sample of the last segment, with heading and is_last
"""

from __future__ import annotations

import logging
import math
from typing import List, Union

import numpy as np

from .geometry import bezier_positions
from .models import Path, SampleCalculationResult, SamplePoint, Segment
from .units import Quantity, UnitOfLength, as_quantity

log = logging.getLogger(__name__)

# Parameter step per centimetre of density; 1 cm density gives 200 steps.
SAMPLES_PER_CENTIMETER = 200


def _parameter_steps(interval: float) -> List[float]:
    # t is accumulated, not multiplied, so the last step may stop short of 1.
    if not interval > 0 or math.isinf(interval):
        interval = 1.0
    ts: List[float] = []
    t = 0.0
    while t <= 1:
        ts.append(t)
        t += interval
    return ts


def bezier_curve_points(segment: Segment, interval: float, prev_integral: float = 0.0) -> List[SamplePoint]:
    """Sample a segment by stepping its Bezier parameter.

    The first sample is exactly the first control; the last one is generally
    *not* the last control because stepping by ``interval`` rarely lands on 1.

    Args:
        segment: Segment to sample.
        interval: Parameter step.
        prev_integral: Arc length accumulated before this segment.

    Returns:
        Sample points with un-rescaled ``delta`` and exact ``integral``.
    """
    ts = _parameter_steps(interval)
    controls = segment.controls
    pts = bezier_positions(controls, ts)

    first = controls[0]
    prev = np.vstack([[first.x, first.y], pts[:-1]])
    deltas = np.hypot(pts[:, 0] - prev[:, 0], pts[:, 1] - prev[:, 1])

    points: List[SamplePoint] = []
    total = prev_integral
    for (x, y), delta, t in zip(pts.tolist(), deltas.tolist(), ts):
        total += delta
        points.append(SamplePoint(x, y, delta=delta, integral=total, ref=segment, t=t))
    return points


def sample_segment(
    segment: Segment,
    density: Union[Quantity, float],
    prev_integral: float = 0.0
) -> List[SamplePoint]:
    """Sample one segment; at least 2 points are returned.

    The first sample carries the segment's start heading. A final sample is
    appended at exactly the last control, with the end heading and
    ``is_last = True``.

    Every segment gets the same number of parameter steps regardless of its
    length, so raw deltas of a long segment are larger than those of a short
    one. All deltas of the segment are multiplied by
    ``steps / (segment_length / density)`` to bring them to a common scale;
    a zero-length segment (infinite ratio) is left as is.
    """
    density = as_quantity(density)
    target_interval = density.to(UnitOfLength.CENTIMETER) / SAMPLES_PER_CENTIMETER

    points = bezier_curve_points(segment, target_interval, prev_integral)
    points[0].heading = segment.first.heading

    last_point = points[-1]
    last_control = segment.last
    distance = last_point.distance(last_control)
    integral_distance = last_point.integral + distance
    final_point = SamplePoint(
        last_control.x,
        last_control.y,
        delta=distance,
        integral=integral_distance,
        ref=segment,
        t=1.0,
        heading=last_control.heading,
        is_last=True
    )
    points.append(final_point)

    length = integral_distance - prev_integral
    if length != 0 and density.value != 0 and target_interval > 0:
        ratio = 1 / target_interval / (length / density.value)
        for point in points:
            point.delta *= ratio
    else:
        log.debug("Zero-length segment %s, delta rescale skipped", segment.uid)

    return points


def sample_path(path: Path, density: Union[Quantity, float]) -> SampleCalculationResult:
    """Concatenate the samples of every segment of a path.

    Returns:
        ``arc_length`` equal to the last sample's ``integral`` (0 without
        segments) and the joined sample list (empty without segments,
        otherwise at least 2 points).
    """
    density = as_quantity(density)
    rtn: List[SamplePoint] = []
    arc_length = 0.0
    for segment in path.segments:
        first_point, *points = sample_segment(segment, density, arc_length)
        # The next segment's first sample coincides with the previous final sample
        if not rtn:
            rtn.append(first_point)
        rtn.extend(points)
        arc_length = rtn[-1].integral

    return SampleCalculationResult(arc_length=arc_length, points=rtn)
