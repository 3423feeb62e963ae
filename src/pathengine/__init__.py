from .calculation import compute_path_points, discrete_points
from .config import GeneralConfig, PathConfig, PointCalculationOptions
from .magnet import MagnetReference, magnet
from .models import Path, make_control, make_end_control
from .sampling import sample_path
from .uniform import compute_uniform_points
from .units import Quantity, UnitOfLength

_general_config = None

def get_general_config() -> GeneralConfig:
    """Get the global editor config instance."""
    global _general_config
    if _general_config is None:
        _general_config = GeneralConfig()
    return _general_config

def calculate_path_points(path, options=None):
    """
    Convenience function to calculate a path at the global point density.
    Returns a PointCalculationResult.
    """
    gc = get_general_config()
    return compute_path_points(path, Quantity(gc.point_density, gc.uol), options)
