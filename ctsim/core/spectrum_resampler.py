"""Spectrum resampler — aligns per-kVp spectra onto one energy axis.

The shared axis is the sample grid of the spectrum reaching the highest
energy, so no spectrum is truncated at the top.  Other spectra are
interpolated linearly inside their own domain and extrapolated linearly
along the boundary slope outside it (never clamped).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
from scipy.interpolate import interp1d

from ctsim.models.spectrum import EnergySpectrum, ResampledSpectrumSet

logger = logging.getLogger(__name__)


def select_shared_axis(spectra: Sequence[EnergySpectrum]) -> int:
    """Index of the spectrum whose maximum energy is largest.

    Ties resolve to the first spectrum in input order.
    """
    if not spectra:
        raise ValueError("No spectra to resample")
    max_energies = [s.max_energy_keV for s in spectra]
    return int(np.argmax(max_energies))


def resample_spectrum(
    spectrum: EnergySpectrum,
    energies_keV: np.ndarray,
) -> np.ndarray:
    """Evaluate *spectrum* on *energies_keV* with linear extrapolation."""
    f = interp1d(
        spectrum.energies_keV,
        spectrum.weights,
        kind="linear",
        bounds_error=False,
        fill_value="extrapolate",
        assume_sorted=True,
    )
    return np.asarray(f(energies_keV), dtype=np.float64)


def resample_spectra(spectra: Sequence[EnergySpectrum]) -> ResampledSpectrumSet:
    """Resample all spectra onto the shared axis.

    Args:
        spectra: One EnergySpectrum per kVp setting, in output column order.

    Returns:
        ResampledSpectrumSet with an N×M weight matrix.

    Raises:
        ValueError: If *spectra* is empty.
    """
    ref = select_shared_axis(spectra)
    axis = spectra[ref].energies_keV
    logger.debug(
        "Shared energy axis from %d kVp spectrum (%d samples, max %.1f keV)",
        spectra[ref].kvp, axis.size, axis[-1],
    )

    columns = []
    for spectrum in spectra:
        if spectrum.energies_keV.shape == axis.shape and np.array_equal(
            spectrum.energies_keV, axis,
        ):
            columns.append(np.array(spectrum.weights))
            continue
        outside = (axis < spectrum.energies_keV[0]) | (axis > spectrum.energies_keV[-1])
        if np.any(outside):
            logger.warning(
                "%d kVp spectrum extrapolated linearly at %d of %d samples",
                spectrum.kvp, int(outside.sum()), axis.size,
            )
        columns.append(resample_spectrum(spectrum, axis))

    return ResampledSpectrumSet(
        energies_keV=axis,
        weights=np.column_stack(columns),
        kvps=tuple(s.kvp for s in spectra),
    )
