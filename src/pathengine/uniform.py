"""Uniform arc-length resampling of path samples."""

from __future__ import annotations

import math
from typing import List, Union

from .geometry import curvature
from .models import IndexBoundary, Point, SampleCalculationResult, SamplePoint, UniformCalculationResult
from .units import Quantity, as_quantity


class _UniformSampler:
    """Walks the samples once with a monotonic cursor and emits uniform points.

    Boundary markers found between two uniform points are folded onto those
    points. When more than one heading or split falls inside a single step
    only the first and last survive; the ones in between are dropped.
    """

    def __init__(self, sample_result: SampleCalculationResult, density: Quantity):
        self.samples = sample_result.points
        self.arc_length = sample_result.arc_length
        self.density = density

        self.points: List[Point] = []
        self.segment_indexes: List[IndexBoundary] = []

        self.closest_idx = 1  # only advanced by step()
        self.segment_from_idx = 0
        self.segment_idx = 0

    def _add_segment(self, idx: int) -> None:
        self.segment_indexes.append(IndexBoundary(self.segment_idx, self.segment_from_idx, idx + 1))
        self.segment_from_idx = idx + 1
        self.points[idx].is_last = True
        self.segment_idx += 1

    def _add_empty_segment(self) -> None:
        self.segment_indexes.append(IndexBoundary(self.segment_idx, self.segment_from_idx, self.segment_from_idx))
        self.segment_idx += 1

    def _insert_headings(self, headings: List[float]) -> None:
        prev_idx = len(self.points) - 2
        curr_idx = len(self.points) - 1
        if len(headings) == 1:
            self.points[curr_idx].heading = headings[0]
        elif len(headings) > 1:
            if prev_idx >= 0 and self.points[prev_idx].heading is None:
                self.points[prev_idx].heading = headings[0]
            self.points[curr_idx].heading = headings[-1]

    def _insert_split_flags(self, splits: int) -> None:
        prev_idx = len(self.points) - 2
        curr_idx = len(self.points) - 1
        if splits == 1:
            self._add_segment(curr_idx)
        elif splits > 1:
            if prev_idx < 0 or self.points[prev_idx].is_last:
                self._add_empty_segment()
            else:
                self._add_segment(prev_idx)
            for _ in range(splits - 2):
                self._add_empty_segment()
            self._add_segment(curr_idx)

    def step(self, t: float, final: bool = False) -> None:
        samples = self.samples
        integral = t * self.arc_length

        headings: List[float] = []
        splits = 0

        while samples[self.closest_idx].integral <= integral and self.closest_idx + 1 < len(samples):
            self.closest_idx += 1
            sample = samples[self.closest_idx]
            if sample.heading is not None:
                headings.append(sample.heading)
            if sample.is_last:
                splits += 1
                # A boundary sitting exactly on the target closes on this point;
                # the final pass folds whatever is left
                if not final and sample.integral == integral:
                    break

        p1: SamplePoint = samples[self.closest_idx - 1]
        p2: SamplePoint = samples[self.closest_idx]
        span = p2.integral - p1.integral
        ratio = (integral - p1.integral) / span if span != 0 else math.nan

        if math.isfinite(ratio):
            p3 = Point(p1.x + (p2.x - p1.x) * ratio, p1.y + (p2.y - p1.y) * ratio, sample_ref=p2.ref, sample_t=p2.t)
        else:
            # p1 and p2 coincide
            p3 = Point(p1.x, p1.y, sample_ref=p2.ref, sample_t=p2.t)

        c = curvature(p3.sample_ref, p3.sample_t) / self.density.unit.value
        p3.bent_rate = 0.0 if math.isnan(c) else abs(c)

        self.points.append(p3)

        self._insert_headings(headings)
        self._insert_split_flags(splits)

    def run(self) -> UniformCalculationResult:
        if len(self.samples) < 2:
            return UniformCalculationResult(points=[], segment_indexes=[])

        num_of_steps = self.arc_length / self.density.value if self.density.value != 0 else math.nan
        # At least one step, even for a zero-length path
        if not math.isfinite(num_of_steps) or num_of_steps < 1:
            num_of_steps = 1
        target_interval = 1 / num_of_steps

        t = 0.0
        while t < 1:
            self.step(t)
            t += target_interval
        if self.closest_idx + 1 != len(self.samples):
            self.step(1, final=True)

        # The cursor starts at 1, so the first sample's heading is never collected
        self.points[0].heading = self.samples[0].heading
        self.points[-1].set_xy(self.samples[-1])

        return UniformCalculationResult(points=self.points, segment_indexes=self.segment_indexes)


def compute_uniform_points(
    sample_result: SampleCalculationResult,
    density: Union[Quantity, float]
) -> UniformCalculationResult:
    """Resample path samples into points spaced evenly by arc length.

    Args:
        sample_result: Output of :func:`pathengine.sampling.sample_path`. Fewer
            than 2 samples (an empty path) give an empty result.
        density: Distance between consecutive uniform points.

    Returns:
        At least one point for a non-empty path, and exactly one
        :class:`IndexBoundary` per sampled segment. The first point has the
        first sample's heading and the last point sits exactly on the last
        sample. A boundary that lands exactly on a step closes on that step's
        point, so a zero-length first segment closes on the first point.

    Note:
        If several headings are sampled between two uniform points, only the
        first (on the previous point, if free) and the last are kept.
    """
    return _UniformSampler(sample_result, as_quantity(density)).run()
