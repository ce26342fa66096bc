"""Analytic phantom shape descriptors.

Shapes are handed to the external phantom builder, which rasterizes them
onto a voxel grid.  Each shape carries the HU value it is filled with.

All dimensions in mm, angles in radian.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class ShapeType(Enum):
    CYLINDER = "cylinder"
    CUBOID = "cuboid"


Vec3 = tuple[float, float, float]


@dataclass(frozen=True)
class Cylinder:
    """Elliptic cylinder.

    Attributes:
        name: Shape label (e.g. "heart").
        center_mm: Center (x, y, z) [mm].
        width_mm: x radius, y radius, half height [mm].
        angles_rad: Rotation angles [radian].
        value: Fill value [HU].
    """
    name: str
    center_mm: Vec3
    width_mm: Vec3
    angles_rad: Vec3
    value: float

    @property
    def type(self) -> ShapeType:
        return ShapeType.CYLINDER


@dataclass(frozen=True)
class Cuboid:
    """Rectangular box.

    Attributes:
        name: Shape label (e.g. "spine2").
        center_mm: Center (x, y, z) [mm].
        width_mm: Half widths along x, y, z [mm].
        angles_rad: Rotation angles [radian].
        value: Fill value [HU].
    """
    name: str
    center_mm: Vec3
    width_mm: Vec3
    angles_rad: Vec3
    value: float

    @property
    def type(self) -> ShapeType:
        return ShapeType.CUBOID


Shape = Union[Cylinder, Cuboid]
