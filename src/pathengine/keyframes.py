"""Keyframe indexing and processing over uniform points."""

from __future__ import annotations

import math
from typing import List, Sequence

from .config import PathConfig
from .models import IndexBoundary, KeyframeIndexing, Point, Segment

KEYFRAME_KEYS = ("speed", "lookahead")


def get_keyframe_indexes(
    segments: Sequence[Segment],
    segment_indexes: Sequence[IndexBoundary],
    key: str
) -> List[KeyframeIndexing]:
    """Map per-segment keyframes onto absolute uniform point indexes.

    Args:
        segments: Segments of the path, in order.
        segment_indexes: One boundary per segment, as returned by the
            uniform resampler.
        key: ``"speed"`` or ``"lookahead"``, the keyframe list to read.

    Returns:
        Indexings ordered by segment, then by ``x_pos``. Segments that
        produced no points are skipped.
    """
    if key not in KEYFRAME_KEYS:
        raise ValueError(f"Unknown keyframe key: {key!r}. Supported: {KEYFRAME_KEYS}")

    ikf: List[KeyframeIndexing] = []
    for segment, boundary in zip(segments, segment_indexes):
        if boundary.from_ == boundary.to:
            continue
        for kf in getattr(segment, key):
            point_idx = boundary.from_ + math.floor((boundary.to - boundary.from_) * kf.x_pos)
            ikf.append(KeyframeIndexing(point_idx, segment, kf))

    return ikf


def process_keyframes(pc: PathConfig, points: List[Point], keyframes: Sequence[KeyframeIndexing]) -> None:
    """Let each keyframe write its values from its own index up to the next keyframe's."""
    for i, current in enumerate(keyframes):
        nxt = keyframes[i + 1] if i + 1 < len(keyframes) else None
        to = len(points) if nxt is None else nxt.index
        current.keyframe.process(pc, points[current.index:to], nxt.keyframe if nxt is not None else None)
