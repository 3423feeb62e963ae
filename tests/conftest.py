import pytest

from pathengine.models import Path, make_control, make_end_control
from pathengine.units import Quantity, UnitOfLength


@pytest.fixture
def density():
    """2 cm between uniform points."""
    return Quantity(2, UnitOfLength.CENTIMETER)


@pytest.fixture
def line_path():
    """A single 6 cm linear segment heading 0 -> 90."""
    path = Path()
    path.add_linear_segment(make_end_control(66, 60, 90), start=make_end_control(60, 60, 0))
    return path


@pytest.fixture
def mixed_path():
    """Linear, then cubic, then linear: 3 chained segments."""
    path = Path()
    path.add_linear_segment(make_end_control(10, 0, 90), start=make_end_control(0, 0, 90))
    path.add_cubic_segment(make_control(20, 0), make_control(30, 10), make_end_control(30, 20, 0))
    path.add_linear_segment(make_end_control(30, 40, 0))
    return path
