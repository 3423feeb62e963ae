import pytest
from pathengine.geometry import Vector
from pathengine.magnet import MagnetReference, find_closest_reference, magnet


@pytest.fixture
def cross():
    """A horizontal (heading 90) and a vertical (heading 0) line through the origin."""
    return MagnetReference(Vector(0, 0), 90), MagnetReference(Vector(0, 0), 0)


# --------------------- find_closest_reference ---------------------

def test_closest_reference_without_references():
    target = Vector(3, 4)
    pos, ref = find_closest_reference(target, [])
    assert pos is target
    assert ref is None

def test_closest_reference_tie_keeps_first():
    a = MagnetReference(Vector(0, 1), 90)
    b = MagnetReference(Vector(0, -1), 90)
    pos, ref = find_closest_reference(Vector(5, 0), [a, b])
    assert ref is a
    assert (pos.x, pos.y) == pytest.approx((5, 1))

# --------------------- magnet ---------------------

def test_magnet_without_references_returns_target():
    target = Vector(1, 2)
    pos, used = magnet(target, [], 5)
    assert pos is target
    assert used == []

def test_magnet_out_of_threshold(cross):
    horizontal, _ = cross
    target = Vector(4, 3)
    pos, used = magnet(target, [horizontal], 2)
    assert pos is target
    assert used == []

def test_magnet_snaps_to_intersection(cross):
    horizontal, vertical = cross
    pos, used = magnet(Vector(1, 0.5), [horizontal, vertical], 2)

    assert (pos.x, pos.y) == pytest.approx((0, 0))
    assert used[0] is horizontal
    assert used[1] is vertical

def test_magnet_intersection_too_far_snaps_to_line(cross):
    horizontal, vertical = cross
    pos, used = magnet(Vector(1, 0.5), [horizontal, vertical], 1)

    assert (pos.x, pos.y) == pytest.approx((1, 0))
    assert len(used) == 1 and used[0] is horizontal

def test_magnet_ignores_parallel_second_line(cross):
    horizontal, _ = cross
    opposite = MagnetReference(Vector(0, 0.2), 270)
    pos, used = magnet(Vector(1, 0.05), [horizontal, opposite], 1)

    assert (pos.x, pos.y) == pytest.approx((1, 0))
    assert len(used) == 1 and used[0] is horizontal

@pytest.mark.parametrize("ref, target", [
    (MagnetReference(Vector(2, 3), 90), Vector(7, 3.4)),
    (MagnetReference(Vector(2, 3), 0), Vector(2.4, -8)),
])
def test_magnet_is_idempotent(ref, target):
    """Snapping an already snapped point keeps it in place."""
    first, _ = magnet(target, [ref], 1)
    second, used = magnet(first, [ref], 1)

    assert (second.x, second.y) == pytest.approx((first.x, first.y))
    assert used == [ref]

def test_magnet_negative_heading_counts_as_parallel(cross):
    horizontal, _ = cross
    unbounded = MagnetReference(Vector(0, 0.2), -90)
    pos, used = magnet(Vector(1, 0.05), [horizontal, unbounded], 1)

    assert (pos.x, pos.y) == pytest.approx((1, 0))
    assert len(used) == 1 and used[0] is horizontal
