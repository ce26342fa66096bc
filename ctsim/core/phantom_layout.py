"""QRM thorax phantom layout — shapes filled with material HU values.

Builds the analytic description of a thorax phantom (elliptic thorax,
two tilted lungs, heart, three-part spine) with nine coronary calcium
inserts: small / medium / large, each at 200, 400 and 800 mg/cm³.

The returned shapes are the input of the external phantom builder;
rasterization is not done here.  All lengths in mm.
"""

from __future__ import annotations

import math
from collections.abc import Mapping

import numpy as np
from numpy.typing import NDArray

from ctsim.constants import CALCIUM_INSERT_DENSITIES_G_CM3
from ctsim.core.hu_pipeline import insert_id
from ctsim.models.phantom import Cuboid, Cylinder, Shape

THORAX_WIDTH_MM = (150.0, 100.0, 15.0)
_NO_ROTATION = (0.0, 0.0, 0.0)
_SPINE_ROTATION = (3 * math.pi / 2, 0.0, 0.0)

# (label, half width, center spacing) per insert size
_INSERT_SIZES = (
    ("small", (0.5, 0.5, 1.0), 5.0),
    ("medium", (1.5, 1.5, 3.0), 10.0),
    ("large", (2.5, 2.5, 5.0), 15.0),
)


def _insert_centers(spacing: float) -> list[tuple[float, float, float]]:
    """Low, medium and high density insert positions for one size."""
    return [
        (spacing, spacing, 0.0),
        (-spacing, spacing, 0.0),
        (0.0, -spacing, 0.0),
    ]


def qrm_thorax(hu_values: Mapping[str, float]) -> list[Shape]:
    """Shapes of the QRM thorax phantom.

    Args:
        hu_values: HU per phantom material id ("soft_tissue", "lung",
            "myocardium", "bone", "insert_200", "insert_400", "insert_800").

    Returns:
        Shapes in painting order (later shapes overwrite earlier ones).

    Raises:
        KeyError: If a required material is missing from *hu_values*.
    """
    def value(material_id: str) -> float:
        try:
            return float(hu_values[material_id])
        except KeyError:
            raise KeyError(f"No HU value for phantom material {material_id!r}")

    z = 0.0
    shapes: list[Shape] = [
        Cylinder("thorax", (0.0, 0.0, z), THORAX_WIDTH_MM, _NO_ROTATION, value("soft_tissue")),
        Cylinder("left_lung", (-82.5, -15.0, z), (27.5, 60.0, 15.0),
                 (math.pi / 7, 0.0, 0.0), value("lung")),
        Cylinder("right_lung", (82.5, -15.0, z), (27.5, 60.0, 15.0),
                 (-math.pi / 7, 0.0, 0.0), value("lung")),
        Cylinder("heart", (0.0, 0.0, z), (40.0, 40.0, 15.0), _NO_ROTATION, value("myocardium")),
        Cylinder("spine1", (0.0, -57.0, 0.0), (15.0, 15.0, 15.0), _NO_ROTATION, value("bone")),
        Cuboid("spine2", (0.0, -87.0, 0.0), (22.0, 8.0, 15.0), _SPINE_ROTATION, value("bone")),
        Cuboid("spine3", (0.0, -74.0, 0.0), (4.0, 35.0, 15.0), _SPINE_ROTATION, value("bone")),
    ]

    for size, width, spacing in _INSERT_SIZES:
        for center, density in zip(_insert_centers(spacing), CALCIUM_INSERT_DENSITIES_G_CM3):
            mid = insert_id(density)
            shapes.append(
                Cylinder(f"{size}_{mid}", center, width, _NO_ROTATION, value(mid))
            )
    return shapes


def groundtruth_axes(
    width_mm: tuple[float, float, float] = THORAX_WIDTH_MM,
    deltas_mm: tuple[float, float, float] = (0.5, 0.5, 0.25),
    offset_mm: float = 5.0,
) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """Symmetric sampling axes covering the phantom plus a margin.

    Each axis runs from −(w + offset) to +(w + offset) in steps of Δ.
    """
    axes = []
    for w, delta in zip(width_mm, deltas_mm):
        if delta <= 0:
            raise ValueError(f"Axis spacing must be positive, got {delta}")
        half = w + offset_mm
        n = int(math.floor(2 * half / delta + 1e-9)) + 1
        axes.append(-half + delta * np.arange(n, dtype=np.float64))
    return tuple(axes)
