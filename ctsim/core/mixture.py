"""Mixture law — volumetric blending of attenuation curves.

For an insert at mass concentration C in a host of reference density D:

    f_insert = C / D,   f_host = 1 − C / D
    μ_mix(E) = f_insert · μ_insert(E) + f_host · μ_host(E)

Linear (Bragg additivity) mixing of LACs at the same photon energy.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from ctsim.core.errors import EnergyMismatch, InvalidMixtureFraction
from ctsim.models.material import MaterialLAC, MixtureSpec


def volume_fractions(mixture: MixtureSpec) -> tuple[float, float]:
    """(insert, host) volume fractions of a mixture.

    Raises:
        InvalidMixtureFraction: Unless 0 <= C/D <= 1.
    """
    c = mixture.concentration_g_cm3
    d = mixture.reference_density_g_cm3
    if math.isnan(c) or math.isnan(d) or d <= 0 or c < 0 or c > d:
        raise InvalidMixtureFraction(c, d)
    return mixture.insert_fraction, mixture.host_fraction


def _check_same_energies(reference: MaterialLAC, other: MaterialLAC) -> None:
    if not np.array_equal(reference.energies_keV, other.energies_keV):
        raise EnergyMismatch(
            other.material_id,
            other.energies_keV.tolist(),
            reference.energies_keV.tolist(),
        )


def mixture_lac(
    insert_lac: MaterialLAC,
    host_lac: MaterialLAC,
    mixture: MixtureSpec,
    material_id: str | None = None,
) -> MaterialLAC:
    """LAC curve of an insert-in-host mixture.

    Args:
        insert_lac: Pure insert curve (e.g. calcium).
        host_lac: Pure host curve (e.g. myocardium), same energies.
        mixture: Concentration and reference density.
        material_id: Id of the result; derived from the mixture if None.

    Raises:
        InvalidMixtureFraction: Unless 0 <= C/D <= 1.
        EnergyMismatch: If the curves are sampled at different energies.
    """
    f_insert, f_host = volume_fractions(mixture)
    _check_same_energies(host_lac, insert_lac)
    if material_id is None:
        material_id = (
            f"{mixture.insert_id}_{mixture.concentration_g_cm3:g}"
            f"_in_{mixture.host_id}"
        )
    return MaterialLAC(
        material_id=material_id,
        energies_keV=host_lac.energies_keV,
        lac=f_insert * insert_lac.lac + f_host * host_lac.lac,
    )


def blend_lacs(
    material_id: str,
    components: Sequence[tuple[float, MaterialLAC]],
) -> MaterialLAC:
    """Fixed-fraction blend of several curves (e.g. lung = air + lung tissue).

    Args:
        material_id: Id of the result.
        components: (volume_fraction, curve) pairs on identical energies.

    Raises:
        ValueError: If no components are given or the fractions do not
            lie in [0, 1] and sum to 1.
        EnergyMismatch: If the curves are sampled at different energies.
    """
    if not components:
        raise ValueError(f"{material_id}: blend needs at least one component")
    fractions = [f for f, _ in components]
    if any(f < 0 or f > 1 for f in fractions) or not math.isclose(
        sum(fractions), 1.0, rel_tol=0.0, abs_tol=1e-9,
    ):
        raise ValueError(
            f"{material_id}: blend fractions {fractions} must lie in [0, 1] "
            f"and sum to 1"
        )
    reference = components[0][1]
    total = np.zeros_like(reference.lac)
    for fraction, curve in components:
        _check_same_energies(reference, curve)
        total = total + fraction * curve.lac
    return MaterialLAC(
        material_id=material_id,
        energies_keV=reference.energies_keV,
        lac=total,
    )
