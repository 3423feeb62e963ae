"""Units of length and quantities.

Every unit is stored as its size in centimetres, so converting between two
units is a single ratio.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class UnitOfLength(float, Enum):
    CENTIMETER = 1.0
    MILLIMETER = 0.1
    METER = 100.0
    INCH = 2.54
    FOOT = 30.48
    TILE = 60.96


@dataclass(frozen=True)
class UnitConverter:
    alpha: UnitOfLength
    beta: UnitOfLength

    def from_a_to_b(self, a: float) -> float:
        return a * self.alpha.value / self.beta.value

    def from_b_to_a(self, b: float) -> float:
        return b * self.beta.value / self.alpha.value


@dataclass(frozen=True)
class Quantity:
    """A length value tagged with its unit."""

    value: float
    unit: UnitOfLength = UnitOfLength.CENTIMETER

    def to(self, unit: UnitOfLength) -> float:
        return UnitConverter(self.unit, unit).from_a_to_b(self.value)


def as_quantity(density: Union[Quantity, float]) -> Quantity:
    """Plain numbers are taken as centimetres."""
    if isinstance(density, Quantity):
        return density
    return Quantity(float(density), UnitOfLength.CENTIMETER)
