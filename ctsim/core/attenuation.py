"""Material attenuation evaluator — LAC at an arbitrary (effective) energy.

Linear interpolation over the tabulated (energy, LAC) samples.  Outside
the table the boundary value is held constant; attenuation tables are
never extrapolated linearly.
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np

from ctsim.models.material import EffectiveAttenuation, MaterialLAC


def _check_table(material_lac: MaterialLAC) -> None:
    energies = material_lac.energies_keV
    if energies.size == 0:
        raise ValueError(f"No attenuation samples for {material_lac.material_id!r}")
    if np.any(np.diff(energies) <= 0):
        raise ValueError(
            f"{material_lac.material_id}: attenuation energies must be strictly increasing"
        )


def evaluate_lac(material_lac: MaterialLAC, energy_keV: float) -> EffectiveAttenuation:
    """LAC of a material at *energy_keV*.

    Args:
        material_lac: Tabulated attenuation curve.
        energy_keV: Evaluation energy [keV].

    Returns:
        EffectiveAttenuation tagged with *energy_keV*.
    """
    _check_table(material_lac)
    value = np.interp(energy_keV, material_lac.energies_keV, material_lac.lac)
    return EffectiveAttenuation(
        material_id=material_lac.material_id,
        energy_keV=float(energy_keV),
        lac=float(value),
    )


def evaluate_lacs(
    material_lac: MaterialLAC,
    energies_keV: Iterable[float],
) -> list[EffectiveAttenuation]:
    """LAC of a material at each of *energies_keV*."""
    return [evaluate_lac(material_lac, e) for e in energies_keV]
