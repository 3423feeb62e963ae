"""Configuration models for path calculation.

Path settings follow the same preset approach as the rest of the project:
defaults live on the model, and a JSON preset file may override any subset of
the supported keys. Unknown keys are rejected instead of silently ignored.

Example:
    Loading a preset::

        from pathengine.config import load_path_config

        pc = load_path_config("fast.json")
        pc.speed_limit.to
"""

from __future__ import annotations

import json
from typing import ClassVar, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .units import UnitOfLength


class NumberRange(BaseModel):
    """A closed ``[from, to]`` range. ``from`` is exposed as ``from_`` in Python."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    from_: float = Field(alias="from")
    to: float


class PathConfig(BaseModel):
    """Per-path limits used by the keyframe processor.

    Attributes:
        speed_limit: Physical speed range a keyframe ``y_pos`` of 0..1 maps onto.
        lookahead_limit: Physical lookahead range for lookahead keyframes.
        bent_rate_applicable_range: Bent rates inside this range scale the
            speed cap linearly between the limits.
        max_deceleration_rate: If set, speeds are capped so the robot can stop
            at the end of the path with this deceleration. ``None`` disables it.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    speed_limit: NumberRange = Field(default_factory=lambda: NumberRange(from_=0.5, to=1.0))
    lookahead_limit: NumberRange = Field(default_factory=lambda: NumberRange(from_=10, to=1000))
    bent_rate_applicable_range: NumberRange = Field(default_factory=lambda: NumberRange(from_=0, to=0.1))
    max_deceleration_rate: Optional[float] = Field(default=None, ge=0.05, le=10)

    # Keys that are accepted in preset files
    PRESET_KEYS: ClassVar[Tuple[str, ...]] = (
        'speed_limit', 'lookahead_limit', 'bent_rate_applicable_range', 'max_deceleration_rate'
    )


class PointCalculationOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    default_follow_bent_rate: bool = False


class GeneralConfig(BaseModel):
    """Editor-wide settings: how dense the uniform points are, and in which unit."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    point_density: float = Field(default=2.0, gt=0)
    uol: UnitOfLength = UnitOfLength.CENTIMETER

    @model_validator(mode="after")
    def _check_density(self) -> GeneralConfig:
        # Below a hundredth of a millimetre the sampler step collapses.
        if self.point_density * self.uol.value < 0.001:
            raise ValueError("point_density is too small for the selected unit")
        return self


def load_path_config(filepath: str) -> PathConfig:
    """Load a path config preset from a JSON file.

    Args:
        filepath: Path to the JSON file.

    Returns:
        A validated :class:`PathConfig`; keys missing from the file keep
        their defaults.

    Raises:
        ValueError: If the file contains keys that are not supported, or a
            value fails validation (pydantic's ``ValidationError`` is a
            ``ValueError``).
    """
    with open(filepath, 'r') as f:
        data = json.load(f)

    supported = set(PathConfig.PRESET_KEYS)
    unknown = set(data.keys()) - supported
    if unknown:
        raise ValueError(f"Unknown parameters in preset file: {unknown}. Supported: {supported}")

    return PathConfig.model_validate(data)
