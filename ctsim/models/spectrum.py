"""Spectrum data models.

Defines per-kVp tube spectra, the common-axis resampled set, and the
spectral summary (effective energies and integrals).

All energies in keV; weights are relative photon fluence.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray


def _frozen(values, ndim: int) -> NDArray[np.float64]:
    """Copy *values* into a read-only float64 array of the given rank."""
    arr = np.array(values, dtype=np.float64)
    if arr.ndim != ndim:
        raise ValueError(f"Expected a {ndim}-D array, got shape {arr.shape}")
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True)
class EnergySpectrum:
    """Tube spectrum for a single kVp setting.

    Attributes:
        kvp: Tube voltage [kVp].
        energies_keV: Strictly increasing sample energies [keV].
        weights: Non-negative relative photon fluence at each energy.
    """
    kvp: int
    energies_keV: NDArray[np.float64]
    weights: NDArray[np.float64]

    def __post_init__(self) -> None:
        energies = _frozen(self.energies_keV, 1)
        weights = _frozen(self.weights, 1)
        if energies.shape != weights.shape:
            raise ValueError(
                f"{self.kvp} kVp: {energies.size} energies but "
                f"{weights.size} weights"
            )
        if energies.size and np.any(np.diff(energies) <= 0):
            raise ValueError(f"{self.kvp} kVp: energies must be strictly increasing")
        if np.any(weights < 0):
            raise ValueError(f"{self.kvp} kVp: weights must be non-negative")
        object.__setattr__(self, "energies_keV", energies)
        object.__setattr__(self, "weights", weights)

    @property
    def max_energy_keV(self) -> float:
        return float(self.energies_keV[-1])


@dataclass(frozen=True)
class ResampledSpectrumSet:
    """All spectra sampled on one shared energy axis.

    Attributes:
        energies_keV: Shared axis, N samples [keV].
        weights: N×M matrix, one column per kVp setting.
        kvps: The M kVp settings, in input order.
    """
    energies_keV: NDArray[np.float64]
    weights: NDArray[np.float64]
    kvps: tuple[int, ...]

    def __post_init__(self) -> None:
        energies = _frozen(self.energies_keV, 1)
        weights = _frozen(self.weights, 2)
        kvps = tuple(int(k) for k in self.kvps)
        if weights.shape != (energies.size, len(kvps)):
            raise ValueError(
                f"Weights shape {weights.shape} does not match "
                f"({energies.size}, {len(kvps)})"
            )
        object.__setattr__(self, "energies_keV", energies)
        object.__setattr__(self, "weights", weights)
        object.__setattr__(self, "kvps", kvps)

    def column(self, kvp: int) -> NDArray[np.float64]:
        """Resampled weights of one kVp setting.

        Raises:
            KeyError: If *kvp* is not part of the set.
        """
        try:
            return self.weights[:, self.kvps.index(kvp)]
        except ValueError:
            raise KeyError(f"Unknown kVp setting: {kvp!r}")


@dataclass(frozen=True)
class SpectralSummary:
    """Effective energy and integral of every resampled spectrum.

    Attributes:
        kvps: kVp settings, same order as the resampled set.
        energies_keV: Shared energy axis [keV].
        differential: N×M differential spectrum (first row zero).
        integrals: Spectrum integral per setting.
        effective_energies_keV: Photon-weighted mean energy per setting [keV].
        spectrum_at_effective_energy: Resampled spectrum value at each
            effective energy (zero outside the axis).
    """
    kvps: tuple[int, ...]
    energies_keV: NDArray[np.float64]
    differential: NDArray[np.float64]
    integrals: NDArray[np.float64]
    effective_energies_keV: NDArray[np.float64]
    spectrum_at_effective_energy: NDArray[np.float64]

    def __post_init__(self) -> None:
        object.__setattr__(self, "kvps", tuple(int(k) for k in self.kvps))
        object.__setattr__(self, "energies_keV", _frozen(self.energies_keV, 1))
        object.__setattr__(self, "differential", _frozen(self.differential, 2))
        for name in (
            "integrals", "effective_energies_keV", "spectrum_at_effective_energy",
        ):
            arr = _frozen(getattr(self, name), 1)
            if arr.size != len(self.kvps):
                raise ValueError(f"{name} has {arr.size} entries, expected {len(self.kvps)}")
            object.__setattr__(self, name, arr)

    def effective_energy(self, kvp: int) -> float:
        """Effective energy of one kVp setting [keV].

        Raises:
            KeyError: If *kvp* is not part of the summary.
        """
        try:
            return float(self.effective_energies_keV[self.kvps.index(kvp)])
        except ValueError:
            raise KeyError(f"Unknown kVp setting: {kvp!r}")
