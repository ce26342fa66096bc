"""Shared fixtures: tabulated attenuation lookup and spectrum table writer.

The tabulated lookup stands in for the xraylib-backed MaterialService so
pipeline tests run on fixed reference numbers.
"""

import pathlib

import numpy as np
import pytest

from ctsim.core.spectrum_loader import clear_spectrum_cache
from ctsim.models.material import MaterialLAC

TABLE_ENERGIES_KEV = np.array(
    [20, 30, 40, 50, 60, 70, 80, 90, 100, 110, 120, 130, 140, 150],
    dtype=np.float64,
)

# material_id: (density g/cm³, μ/ρ cm²/g at TABLE_ENERGIES_KEV)
MU_RHO_TABLE = {
    "water": (1.0, [
        0.804, 0.376, 0.268, 0.227, 0.206, 0.193, 0.184, 0.177,
        0.171, 0.166, 0.163, 0.160, 0.157, 0.155,
    ]),
    "air": (0.001205, [
        0.778, 0.387, 0.241, 0.177, 0.145, 0.127, 0.116, 0.109,
        0.103, 0.099, 0.096, 0.093, 0.091, 0.089,
    ]),
    "lung_tissue": (1.05, [
        0.810, 0.380, 0.269, 0.226, 0.205, 0.192, 0.183, 0.176,
        0.171, 0.166, 0.162, 0.159, 0.156, 0.154,
    ]),
    "myocardium": (1.05, [
        0.820, 0.385, 0.271, 0.228, 0.206, 0.193, 0.184, 0.177,
        0.171, 0.167, 0.163, 0.160, 0.157, 0.155,
    ]),
    "cortical_bone": (1.85, [
        2.867, 0.990, 0.511, 0.330, 0.248, 0.204, 0.178, 0.161,
        0.150, 0.142, 0.136, 0.131, 0.127, 0.124,
    ]),
    "soft_tissue": (1.06, [
        0.810, 0.380, 0.269, 0.226, 0.205, 0.192, 0.183, 0.176,
        0.171, 0.166, 0.162, 0.159, 0.156, 0.154,
    ]),
    "calcium": (1.55, [
        6.040, 2.230, 1.050, 0.600, 0.400, 0.297, 0.238, 0.202,
        0.177, 0.160, 0.147, 0.138, 0.130, 0.124,
    ]),
}


class TabulatedLookup:
    """``lookup_lac`` over MU_RHO_TABLE with call counting."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[float, ...]]] = []

    def __call__(self, material_id, energies_keV) -> MaterialLAC:
        density, mu_rho = MU_RHO_TABLE[material_id]
        energies = np.asarray(energies_keV, dtype=np.float64)
        self.calls.append((material_id, tuple(energies.tolist())))
        lac = np.interp(energies, TABLE_ENERGIES_KEV, np.array(mu_rho)) * density
        return MaterialLAC(material_id=material_id, energies_keV=energies, lac=lac)


@pytest.fixture
def lookup() -> TabulatedLookup:
    return TabulatedLookup()


def write_spectrum_csv(
    directory: pathlib.Path,
    kvp: int,
    rows,
    header: str | None = "energy,weight",
) -> pathlib.Path:
    """Write a ``spectra_<kvp>.csv`` table and return its path."""
    path = directory / f"spectra_{kvp}.csv"
    lines = [header] if header else []
    lines += [",".join(str(v) for v in row) for row in rows]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def kramers_rows(kvp: int, step: float = 1.0, start: float = 10.0, zero_pad: int = 0):
    """(energy, weight) rows of a simple Kramers-like spectrum up to *kvp*.

    *zero_pad* extra zero-weight rows past *kvp* make linear extrapolation
    continue at zero.
    """
    energies = np.arange(start, kvp + step / 2 + zero_pad * step, step)
    weights = np.maximum(kvp - energies, 0.0) / energies
    return list(zip(energies.tolist(), weights.tolist()))


@pytest.fixture
def spectra_dir(tmp_path: pathlib.Path):
    """Spectra for 80, 100 and 140 kVp; 140 kVp reaches the highest energy."""
    clear_spectrum_cache()
    for kvp in (80, 100, 140):
        write_spectrum_csv(tmp_path, kvp, kramers_rows(kvp, step=2.0, zero_pad=2))
    yield tmp_path
    clear_spectrum_cache()
