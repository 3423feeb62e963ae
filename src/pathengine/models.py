"""Path data model: controls, keyframes, segments, paths and calculation results.

Controls are owned by a :class:`ControlArena` and referenced by uid. Two
chained segments hold the same uid at the joint, so they resolve to the very
same :class:`Control` object and moving the joint moves both segment ends.
"""

from __future__ import annotations

import bisect
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence

from .config import NumberRange, PathConfig
from .geometry import Vector, bound_heading


def make_id() -> str:
    return uuid.uuid4().hex[:10]


# -------------------- Controls --------------------

class ControlKind(str, Enum):
    CONTROL = "control"
    END = "end-point"


class Control(Vector):
    """A control point of a segment.

    End controls (``kind == ControlKind.END``) start and finish segments and
    carry a heading in ``[0, 360)``; plain controls are cubic handles and have
    no heading.
    """

    def __init__(
        self,
        x: float,
        y: float,
        kind: ControlKind = ControlKind.CONTROL,
        heading: Optional[float] = None,
        uid: Optional[str] = None
    ):
        super().__init__(x, y)
        self.kind = kind
        self.uid = uid or make_id()
        self.lock = False
        self.visible = True
        self._heading: Optional[float] = None
        if kind is ControlKind.END:
            self.heading = 0.0 if heading is None else heading
        elif heading is not None:
            raise ValueError("Only end controls carry a heading")

    @property
    def heading(self) -> Optional[float]:
        return self._heading

    @heading.setter
    def heading(self, value: float) -> None:
        if self.kind is not ControlKind.END:
            raise ValueError("Only end controls carry a heading")
        self._heading = bound_heading(value)

    @property
    def is_end(self) -> bool:
        return self.kind is ControlKind.END

    def set_xy(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    # Controls are entities: equal only to themselves.
    __eq__ = object.__eq__
    __hash__ = object.__hash__

    def __repr__(self) -> str:
        if self.is_end:
            return f"EndControl(x={self.x!r}, y={self.y!r}, heading={self.heading!r}, uid={self.uid!r})"
        return f"Control(x={self.x!r}, y={self.y!r}, uid={self.uid!r})"


def make_end_control(x: float, y: float, heading: float = 0.0) -> Control:
    return Control(x, y, ControlKind.END, heading)


def make_control(x: float, y: float) -> Control:
    return Control(x, y, ControlKind.CONTROL)


class ControlArena:
    """Owns controls by uid."""

    def __init__(self) -> None:
        self._controls: Dict[str, Control] = {}

    def add(self, control: Control) -> str:
        existing = self._controls.get(control.uid)
        if existing is not None and existing is not control:
            raise ValueError(f"Duplicate control uid: {control.uid}")
        self._controls[control.uid] = control
        return control.uid

    def get(self, uid: str) -> Control:
        return self._controls[uid]

    def remove(self, uid: str) -> None:
        del self._controls[uid]

    def __contains__(self, uid: object) -> bool:
        return uid in self._controls

    def __len__(self) -> int:
        return len(self._controls)

    def __iter__(self) -> Iterator[Control]:
        return iter(self._controls.values())


# -------------------- Keyframes --------------------

@dataclass(eq=False)
class Keyframe:
    """A value placed at a normalized position along a segment.

    Attributes:
        x_pos: Position within the owning segment, ``[0, 1)``.
        y_pos: Normalized value, ``[0, 1]``, mapped onto a physical limit.
        follow_bent_rate: Cap the value by the path's bent rate.
    """

    x_pos: float
    y_pos: float
    follow_bent_rate: bool = True
    uid: str = field(default_factory=make_id)

    # Name of the Point attribute written by process()
    target = "speed"

    def limit(self, pc: PathConfig) -> NumberRange:
        return pc.speed_limit

    def process(self, pc: PathConfig, responsible: Sequence[Point], next_frame: Optional[Keyframe] = None) -> None:
        """Write this keyframe's value onto the points it is responsible for.

        The value ramps linearly from this keyframe's ``y_pos`` towards the
        next keyframe's ``y_pos`` (stepping ``i / len`` so the next keyframe's
        value is reached only at its own point). With ``follow_bent_rate`` the
        value is capped by the point's bent rate; straight points
        (``bent_rate == 0``) are never capped.
        """
        limit = self.limit(pc)
        bent_range = pc.bent_rate_applicable_range

        limit_from = limit.from_
        limit_to = limit.to
        limit_diff = limit_to - limit_from

        application_diff = bent_range.to - bent_range.from_
        use_ratio = limit_diff != 0 and application_diff != 0
        application_ratio = limit_diff / application_diff if application_diff != 0 else 0.0

        y_from = self.y_pos
        y_to = next_frame.y_pos if next_frame is not None else y_from
        y_diff = y_to - y_from

        length = len(responsible)
        for i, point in enumerate(responsible):
            y = y_from + y_diff * i / length
            value = limit_from + limit_diff * y

            if self.follow_bent_rate:
                bent_rate = point.bent_rate
                if bent_rate < bent_range.from_ and bent_rate != 0:
                    value = min(value, limit_from)
                elif bent_rate > bent_range.to:
                    value = min(value, limit_to)
                elif use_ratio and bent_rate != 0:
                    value = min(value, limit_from + (bent_rate - bent_range.from_) * application_ratio)

            setattr(point, self.target, value)


@dataclass(eq=False)
class SpeedKeyframe(Keyframe):
    pass


@dataclass(eq=False)
class LookaheadKeyframe(Keyframe):
    target = "lookahead"

    def limit(self, pc: PathConfig) -> NumberRange:
        return pc.lookahead_limit


# -------------------- Segments & Paths --------------------

class SegmentVariant(str, Enum):
    LINEAR = "linear"
    CUBIC = "cubic"


class Segment:
    """One Bezier piece of a path, holding control uids into an arena."""

    def __init__(self, arena: ControlArena, *control_ids: str):
        if len(control_ids) not in (2, 4):
            raise ValueError(f"A segment needs 2 or 4 controls, got {len(control_ids)}")
        controls = [arena.get(uid) for uid in control_ids]
        if not (controls[0].is_end and controls[-1].is_end):
            raise ValueError("A segment must start and end with end controls")
        if any(c.is_end for c in controls[1:-1]):
            raise ValueError("Cubic handles must be plain controls")

        self.arena = arena
        self.control_ids: List[str] = list(control_ids)
        self.speed: List[SpeedKeyframe] = []
        self.lookahead: List[LookaheadKeyframe] = []
        self.uid = make_id()

    @property
    def controls(self) -> List[Control]:
        return [self.arena.get(uid) for uid in self.control_ids]

    @property
    def first(self) -> Control:
        return self.arena.get(self.control_ids[0])

    @property
    def last(self) -> Control:
        return self.arena.get(self.control_ids[-1])

    @property
    def variant(self) -> SegmentVariant:
        return SegmentVariant.LINEAR if len(self.control_ids) == 2 else SegmentVariant.CUBIC

    def is_linear(self) -> bool:
        return self.variant is SegmentVariant.LINEAR

    def is_cubic(self) -> bool:
        return self.variant is SegmentVariant.CUBIC

    def is_locked(self) -> bool:
        return any(c.lock for c in self.controls)

    def is_visible(self) -> bool:
        return any(c.visible for c in self.controls)

    def add_speed_keyframe(self, keyframe: SpeedKeyframe) -> None:
        bisect.insort(self.speed, keyframe, key=lambda kf: kf.x_pos)

    def add_lookahead_keyframe(self, keyframe: LookaheadKeyframe) -> None:
        bisect.insort(self.lookahead, keyframe, key=lambda kf: kf.x_pos)

    def __repr__(self) -> str:
        return f"Segment({self.variant.value}, uid={self.uid!r})"


class Path:
    """An ordered chain of segments plus the config used to annotate it.

    Segment ``i + 1`` always starts with segment ``i``'s last control uid.
    """

    def __init__(self, pc: Optional[PathConfig] = None, name: str = "Path"):
        self.pc = pc if pc is not None else PathConfig()
        self.name = name
        self.uid = make_id()
        self.arena = ControlArena()
        self.segments: List[Segment] = []

    def _start_uid(self, start: Optional[Control]) -> str:
        if self.segments:
            joint = self.segments[-1].last
            if start is not None and start is not joint:
                raise ValueError("A new segment must start at the last control of the path")
            return joint.uid
        if start is None:
            raise ValueError("The first segment needs a start control")
        return self.arena.add(start)

    def add_linear_segment(self, end: Control, start: Optional[Control] = None) -> Segment:
        first = self._start_uid(start)
        segment = Segment(self.arena, first, self.arena.add(end))
        self.segments.append(segment)
        return segment

    def add_cubic_segment(
        self,
        handle1: Control,
        handle2: Control,
        end: Control,
        start: Optional[Control] = None
    ) -> Segment:
        first = self._start_uid(start)
        segment = Segment(
            self.arena, first, self.arena.add(handle1), self.arena.add(handle2), self.arena.add(end)
        )
        self.segments.append(segment)
        return segment

    @property
    def controls(self) -> List[Control]:
        if not self.segments:
            return []
        rtn = [self.segments[0].first]
        for segment in self.segments:
            rtn.extend(segment.controls[1:])
        return rtn

    def is_chained(self) -> bool:
        return all(
            prev.control_ids[-1] == curr.control_ids[0]
            for prev, curr in zip(self.segments, self.segments[1:])
        )


# -------------------- Calculation Results --------------------

@dataclass(eq=False)
class SamplePoint(Vector):
    """A dense, non-uniform sample along a segment.

    ``delta`` is the (rescaled) step from the previous sample and
    ``integral`` the exact cumulative arc length from the path start.
    """

    delta: float = 0.0
    integral: float = 0.0
    ref: Optional[Segment] = None
    t: float = 0.0
    heading: Optional[float] = None
    is_last: bool = False


@dataclass(eq=False)
class Point(Vector):
    """A uniform output point.

    ``heading`` is only set at the first point and at segment boundaries.
    """

    sample_ref: Optional[Segment] = None
    sample_t: float = 0.0
    speed: float = 0.0
    heading: Optional[float] = None
    is_last: bool = False
    bent_rate: float = 0.0
    lookahead: float = 0.0

    def set_xy(self, other: Vector) -> None:
        self.x = other.x
        self.y = other.y


@dataclass
class IndexBoundary:
    """Half-open range ``[from_, to)`` of uniform point indexes produced by segment ``index``."""

    index: int
    from_: int
    to: int


@dataclass
class KeyframeIndexing:
    index: int
    segment: Optional[Segment]
    keyframe: Keyframe


@dataclass
class SampleCalculationResult:
    arc_length: float
    points: List[SamplePoint]


@dataclass
class UniformCalculationResult:
    points: List[Point]
    segment_indexes: List[IndexBoundary]


@dataclass
class PointCalculationResult:
    arc_length: float
    points: List[Point]
    segment_indexes: List[IndexBoundary]
    speed_keyframe_indexes: List[KeyframeIndexing]
    lookahead_keyframe_indexes: List[KeyframeIndexing]
