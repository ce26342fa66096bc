"""HU pipeline — Hounsfield values of the thorax phantom materials.

Monoenergetic mode evaluates every material directly at a few discrete
energies.  Polyenergetic mode runs the spectral pipeline:

    load → resample → integrate → evaluate LAC at E_eff → HU

Water is always taken through exactly the same path as the material it
normalizes, so the two LACs share an energy.

Materials are independent; ``max_workers > 1`` evaluates them on a
thread pool.  Output order always follows ``PHANTOM_MATERIALS``.
"""

from __future__ import annotations

import logging
import pathlib
from collections.abc import Callable, Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

import numpy as np

from ctsim.constants import (
    CALCIUM_INSERT_DENSITIES_G_CM3,
    LUNG_AIR_FRACTION,
    MONO_ENERGIES_KEV,
    MYOCARDIUM_DENSITY_G_CM3,
    WATER_ID,
)
from ctsim.core.attenuation import evaluate_lacs
from ctsim.core.hounsfield import convert_hu, effective_hu
from ctsim.core.mixture import blend_lacs, mixture_lac
from ctsim.core.spectral_integrator import summarize_spectra
from ctsim.core.spectrum_loader import load_spectra
from ctsim.core.spectrum_resampler import resample_spectra
from ctsim.models.material import HUTable, MaterialLAC, MixtureSpec
from ctsim.models.results import MonoenergeticResult, PolyenergeticResult
from ctsim.models.spectrum import SpectralSummary

logger = logging.getLogger(__name__)

LacLookup = Callable[[str, Sequence[float]], MaterialLAC]

_T = TypeVar("_T")
_R = TypeVar("_R")

# Catalog materials fetched from the physics lookup
PURE_MATERIALS = (
    WATER_ID, "air", "lung_tissue", "myocardium",
    "cortical_bone", "soft_tissue", "calcium",
)


def insert_id(concentration_g_cm3: float) -> str:
    """Phantom material id of a calcium insert, e.g. 0.2 → ``insert_200``."""
    return f"insert_{round(concentration_g_cm3 * 1000):d}"


PHANTOM_MATERIALS = (
    WATER_ID, "air", "lung", "myocardium", "bone", "soft_tissue",
    *(insert_id(c) for c in CALCIUM_INSERT_DENSITIES_G_CM3),
)


def _map(fn: Callable[[_T], _R], items: Iterable[_T], max_workers: int) -> list[_R]:
    items = list(items)
    if max_workers <= 1 or len(items) <= 1:
        return [fn(item) for item in items]
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(fn, items))


def _relabel(curve: MaterialLAC, material_id: str) -> MaterialLAC:
    return MaterialLAC(
        material_id=material_id, energies_keV=curve.energies_keV, lac=curve.lac,
    )


def material_lacs(
    lookup: LacLookup,
    energies_keV: Sequence[float],
    max_workers: int = 1,
) -> dict[str, MaterialLAC]:
    """LAC curve of every phantom material on one energy set.

    Calls *lookup* once per pure material, then derives the lung blend
    (air + lung tissue) and the calcium-in-myocardium inserts.

    Args:
        lookup: ``lookup_lac(material_id, energies) -> MaterialLAC``.
        energies_keV: Energies to sample [keV].
        max_workers: Thread-pool size for the lookups (1 = sequential).

    Returns:
        Dict keyed by the ids in ``PHANTOM_MATERIALS``.
    """
    energies = [float(e) for e in energies_keV]
    curves = _map(lambda mid: lookup(mid, energies), PURE_MATERIALS, max_workers)
    pure = dict(zip(PURE_MATERIALS, curves))

    lacs: dict[str, MaterialLAC] = {
        WATER_ID: pure[WATER_ID],
        "air": pure["air"],
        "lung": blend_lacs("lung", [
            (LUNG_AIR_FRACTION, pure["air"]),
            (1.0 - LUNG_AIR_FRACTION, pure["lung_tissue"]),
        ]),
        "myocardium": pure["myocardium"],
        "bone": _relabel(pure["cortical_bone"], "bone"),
        "soft_tissue": pure["soft_tissue"],
    }
    for c in CALCIUM_INSERT_DENSITIES_G_CM3:
        mid = insert_id(c)
        lacs[mid] = mixture_lac(
            pure["calcium"],
            pure["myocardium"],
            MixtureSpec(c, MYOCARDIUM_DENSITY_G_CM3),
            material_id=mid,
        )
    return lacs


def monoenergetic_hu_tables(
    lookup: LacLookup,
    energies_keV: Sequence[float] = MONO_ENERGIES_KEV,
    max_workers: int = 1,
) -> MonoenergeticResult:
    """HU tables of all phantom materials at discrete energies."""
    energies = tuple(float(e) for e in energies_keV)
    lacs = material_lacs(lookup, energies, max_workers)
    water = lacs[WATER_ID]
    tables = {mid: convert_hu(lacs[mid], water) for mid in PHANTOM_MATERIALS}
    return MonoenergeticResult(energies_keV=energies, lacs=lacs, tables=tables)


def polyenergetic_hu_tables(
    lookup: LacLookup,
    summary: SpectralSummary,
    max_workers: int = 1,
) -> tuple[dict[str, MaterialLAC], dict[str, HUTable]]:
    """HU of every phantom material at each kVp's effective energy.

    LAC curves are looked up on the shared spectrum axis and evaluated at
    the effective energies with flat extrapolation.

    Returns:
        (lacs, tables) keyed by the ids in ``PHANTOM_MATERIALS``.
    """
    lacs = material_lacs(lookup, summary.energies_keV, max_workers)
    e_eff = summary.effective_energies_keV
    water = evaluate_lacs(lacs[WATER_ID], e_eff)

    def _table(mid: str) -> HUTable:
        values = evaluate_lacs(lacs[mid], e_eff)
        return HUTable(
            material_id=mid,
            energies_keV=e_eff,
            hu=[effective_hu(v, w) for v, w in zip(values, water)],
            kvps=summary.kvps,
        )

    tables = dict(zip(PHANTOM_MATERIALS, _map(_table, PHANTOM_MATERIALS, max_workers)))
    return lacs, tables


def run_polyenergetic(
    directory: str | pathlib.Path,
    kvps: Sequence[int],
    lookup: LacLookup,
    max_workers: int = 1,
) -> PolyenergeticResult:
    """Full spectral pipeline from spectrum tables to HU tables."""
    resampled = resample_spectra(load_spectra(directory, kvps))
    summary = summarize_spectra(resampled)
    lacs, tables = polyenergetic_hu_tables(lookup, summary, max_workers)
    return PolyenergeticResult(
        resampled=resampled, summary=summary, lacs=lacs, tables=tables,
    )


def validate_water_reference(
    *tables: Mapping[str, HUTable],
    atol: float = 1e-9,
) -> None:
    """Check that water is 0 HU in every independently computed table set.

    Raises:
        KeyError: If a table set has no water entry.
        ValueError: If water deviates from 0 HU by more than *atol*.
    """
    for table_set in tables:
        water = table_set[WATER_ID]
        off = np.flatnonzero(np.abs(water.hu) > atol)
        if off.size:
            i = int(off[0])
            raise ValueError(
                f"Water is {water.hu[i]:g} HU at {water.energies_keV[i]:g} keV; "
                f"expected 0"
            )


def reference_hu_values(
    tables: Mapping[str, HUTable],
    energy_keV: float | None = None,
    kvp: int | None = None,
) -> dict[str, float]:
    """Scalar HU per material for the phantom builder.

    Exactly one of *energy_keV* (monoenergetic tables) or *kvp*
    (polyenergetic tables) selects the entry.
    """
    if (energy_keV is None) == (kvp is None):
        raise ValueError("Specify exactly one of energy_keV or kvp")
    if kvp is not None:
        return {mid: t.for_kvp(kvp) for mid, t in tables.items()}
    return {mid: t.at(energy_keV) for mid, t in tables.items()}
