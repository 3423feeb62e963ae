import pytest
from pathengine.config import PathConfig
from pathengine.models import (
    Control,
    ControlArena,
    ControlKind,
    LookaheadKeyframe,
    Path,
    Point,
    Segment,
    SegmentVariant,
    SpeedKeyframe,
    make_control,
    make_end_control,
)
from pathengine.units import Quantity, UnitConverter, UnitOfLength, as_quantity

# --------------------- Units ---------------------

def test_quantity_conversion():
    assert Quantity(1, UnitOfLength.INCH).to(UnitOfLength.CENTIMETER) == pytest.approx(2.54)
    assert Quantity(1, UnitOfLength.TILE).to(UnitOfLength.INCH) == pytest.approx(24)
    assert Quantity(250, UnitOfLength.MILLIMETER).to(UnitOfLength.METER) == pytest.approx(0.25)

def test_unit_converter_both_ways():
    uc = UnitConverter(UnitOfLength.FOOT, UnitOfLength.INCH)
    assert uc.from_a_to_b(1) == pytest.approx(12)
    assert uc.from_b_to_a(24) == pytest.approx(2)

def test_plain_numbers_are_centimetres():
    q = as_quantity(2)
    assert q == Quantity(2.0, UnitOfLength.CENTIMETER)
    assert as_quantity(q) is q

# --------------------- Controls ---------------------

def test_end_control_heading_is_bounded():
    c = make_end_control(0, 0, -90)
    assert c.heading == 270
    c.heading = 360
    assert c.heading == 0
    assert c.kind is ControlKind.END

def test_plain_control_has_no_heading():
    c = make_control(1, 2)
    assert c.heading is None
    with pytest.raises(ValueError):
        c.heading = 10
    with pytest.raises(ValueError):
        Control(0, 0, ControlKind.CONTROL, heading=5)

def test_controls_compare_by_identity():
    a = make_end_control(1, 1, 0)
    b = make_end_control(1, 1, 0)
    assert a != b
    assert a == a
    assert len({a, b}) == 2

def test_arena_rejects_duplicate_uid():
    arena = ControlArena()
    arena.add(make_control(0, 0))
    twin = Control(1, 1, uid=next(iter(arena)).uid)
    with pytest.raises(ValueError, match="Duplicate"):
        arena.add(twin)

# --------------------- Segments ---------------------

def test_segment_requires_two_or_four_controls():
    arena = ControlArena()
    ids = [arena.add(make_end_control(0, 0)), arena.add(make_control(1, 1)), arena.add(make_end_control(2, 2))]
    with pytest.raises(ValueError, match="2 or 4"):
        Segment(arena, *ids)

def test_segment_requires_end_controls_at_both_ends():
    arena = ControlArena()
    with pytest.raises(ValueError):
        Segment(arena, arena.add(make_control(0, 0)), arena.add(make_end_control(1, 1)))

def test_segment_variant():
    path = Path()
    linear = path.add_linear_segment(make_end_control(1, 0), start=make_end_control(0, 0))
    cubic = path.add_cubic_segment(make_control(2, 0), make_control(3, 1), make_end_control(3, 2))
    assert linear.variant is SegmentVariant.LINEAR and linear.is_linear()
    assert cubic.variant is SegmentVariant.CUBIC and cubic.is_cubic()

def test_keyframes_stay_sorted():
    path = Path()
    seg = path.add_linear_segment(make_end_control(1, 0), start=make_end_control(0, 0))
    for x in (0.7, 0.1, 0.4):
        seg.add_speed_keyframe(SpeedKeyframe(x, 0.5))
        seg.add_lookahead_keyframe(LookaheadKeyframe(x, 0.5))
    assert [kf.x_pos for kf in seg.speed] == [0.1, 0.4, 0.7]
    assert [kf.x_pos for kf in seg.lookahead] == [0.1, 0.4, 0.7]

# --------------------- Paths ---------------------

def test_chained_segments_share_the_joint_control(mixed_path):
    """Moving the joint moves both neighbouring segments."""
    first, second, third = mixed_path.segments
    assert first.last is second.first
    assert second.last is third.first
    assert mixed_path.is_chained()

    first.last.set_xy(11, 1)
    assert second.first.x == 11 and second.first.y == 1

def test_path_controls_flatten_without_duplicates(mixed_path):
    controls = mixed_path.controls
    assert len(controls) == 6
    assert controls[0] is mixed_path.segments[0].first
    assert controls[-1] is mixed_path.segments[-1].last

def test_first_segment_needs_a_start():
    with pytest.raises(ValueError, match="start control"):
        Path().add_linear_segment(make_end_control(1, 1))

def test_new_segment_must_start_at_the_joint(line_path):
    with pytest.raises(ValueError, match="last control"):
        line_path.add_linear_segment(make_end_control(1, 1), start=make_end_control(0, 0))

def test_path_gets_default_config():
    assert Path().pc == PathConfig()

# --------------------- Keyframe.process ---------------------

def _points(*bent_rates):
    return [Point(i, 0, bent_rate=b) for i, b in enumerate(bent_rates)]

def test_keyframe_ramps_towards_next_keyframe():
    """y moves i/len of the way, so the next keyframe's value is not reached inside the slice."""
    pc = PathConfig()
    pts = _points(0, 0, 0, 0)
    SpeedKeyframe(0, 1, follow_bent_rate=False).process(pc, pts, SpeedKeyframe(0.5, 0))
    assert [p.speed for p in pts] == pytest.approx([1.0, 0.875, 0.75, 0.625])

def test_keyframe_without_next_holds_value():
    pc = PathConfig()
    pts = _points(0, 0, 0)
    LookaheadKeyframe(0, 0.5, follow_bent_rate=False).process(pc, pts)
    assert [p.lookahead for p in pts] == pytest.approx([505.0, 505.0, 505.0])
    assert all(p.speed == 0 for p in pts)

def test_keyframe_bent_rate_caps():
    pc = PathConfig(bent_rate_applicable_range={"from": 0.1, "to": 0.5})
    pts = _points(0.0, 0.05, 0.6, 0.3)
    SpeedKeyframe(0, 1, follow_bent_rate=True).process(pc, pts)

    assert pts[0].speed == 1.0               # straight, exempt
    assert pts[1].speed == 0.5               # below range -> limit.from
    assert pts[2].speed == 1.0               # above range -> limit.to
    assert pts[3].speed == pytest.approx(0.75)  # 0.5 + 0.2 * (0.5 / 0.4)

def test_keyframe_zero_bent_rate_never_capped():
    pc = PathConfig(bent_rate_applicable_range={"from": 0.5, "to": 0.6})
    pts = _points(0.0, 0.0)
    SpeedKeyframe(0, 1, follow_bent_rate=True).process(pc, pts)
    assert [p.speed for p in pts] == [1.0, 1.0]

def test_keyframe_ignores_bent_rate_when_disabled():
    pc = PathConfig(bent_rate_applicable_range={"from": 0.1, "to": 0.5})
    pts = _points(0.05)
    SpeedKeyframe(0, 1, follow_bent_rate=False).process(pc, pts)
    assert pts[0].speed == 1.0
