"""HU converter — water-normalized Hounsfield units.

HU = 1000 × (μ_material / μ_water − 1)

Numerator and denominator must be evaluated at the identical energy.
No clamping: air lands near −1000, dense calcium inserts can exceed +2000.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike

from ctsim.constants import HU_SCALE
from ctsim.core.errors import EnergyMismatch
from ctsim.models.material import EffectiveAttenuation, HUTable, MaterialLAC


def hu(material_lac: ArrayLike, water_lac: ArrayLike):
    """Hounsfield value(s) of a LAC relative to water's LAC.

    Works on scalars or element-wise on arrays.  Both arguments must have
    been evaluated at the same energy; use ``effective_hu`` or
    ``convert_hu`` to have that checked.

    Raises:
        ValueError: If a water LAC is zero or negative.
    """
    water = np.asarray(water_lac, dtype=np.float64)
    if np.any(water <= 0):
        raise ValueError(f"Water LAC must be positive, got {water_lac!r}")
    result = HU_SCALE * (np.asarray(material_lac, dtype=np.float64) / water - 1.0)
    if result.ndim == 0:
        return float(result)
    return result


def effective_hu(
    material: EffectiveAttenuation,
    water: EffectiveAttenuation,
) -> float:
    """HU of one energy-tagged LAC against water at the same energy.

    Raises:
        EnergyMismatch: If the two values carry different energies.
    """
    if material.energy_keV != water.energy_keV:
        raise EnergyMismatch(
            material.material_id, material.energy_keV, water.energy_keV,
        )
    return hu(material.lac, water.lac)


def convert_hu(material_lac: MaterialLAC, water_lac: MaterialLAC) -> HUTable:
    """HU table of a material curve against water, energy by energy.

    Raises:
        EnergyMismatch: If the curves are sampled at different energies.
    """
    if not np.array_equal(material_lac.energies_keV, water_lac.energies_keV):
        raise EnergyMismatch(
            material_lac.material_id,
            material_lac.energies_keV.tolist(),
            water_lac.energies_keV.tolist(),
        )
    return HUTable(
        material_id=material_lac.material_id,
        energies_keV=material_lac.energies_keV,
        hu=hu(material_lac.lac, water_lac.lac),
    )
