"""Spectral integrator — effective energy and integral of each spectrum.

Differential spectrum:  Ide[i, m] = sp[i, m] * (E[i] - E[i-1]),  Ide[0, m] = 0
Spectrum integral:      I[m]      = Σ_i Ide[i, m]
Effective energy:       E_eff[m]  = Σ_i E[i] * Ide[i, m] / I[m]

E_eff is the first moment of the differential spectrum, i.e. the
photon-fluence-weighted mean energy.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray

from ctsim.core.errors import DegenerateSpectrum
from ctsim.models.spectrum import ResampledSpectrumSet, SpectralSummary

logger = logging.getLogger(__name__)


def differential_spectrum(resampled: ResampledSpectrumSet) -> NDArray[np.float64]:
    """Weights times the forward energy step; the first bin is zero."""
    steps = np.concatenate(([0.0], np.diff(resampled.energies_keV)))
    return resampled.weights * steps[:, np.newaxis]


def summarize_spectra(resampled: ResampledSpectrumSet) -> SpectralSummary:
    """Compute effective energies and integrals of all resampled spectra.

    Args:
        resampled: Spectra on a shared energy axis.

    Returns:
        SpectralSummary, one entry per kVp setting.

    Raises:
        DegenerateSpectrum: If a setting's spectrum integral is zero.
    """
    en = resampled.energies_keV
    ide = differential_spectrum(resampled)
    integrals = ide.sum(axis=0)

    for kvp, total in zip(resampled.kvps, integrals):
        if total == 0:
            raise DegenerateSpectrum(kvp)

    eff_mean = (en @ ide) / integrals

    at_eff = np.array([
        np.interp(e, en, resampled.weights[:, m], left=0.0, right=0.0)
        for m, e in enumerate(eff_mean)
    ])

    for kvp, e in zip(resampled.kvps, eff_mean):
        logger.info("%d kVp effective energy: %.2f keV", kvp, e)

    return SpectralSummary(
        kvps=resampled.kvps,
        energies_keV=en,
        differential=ide,
        integrals=integrals,
        effective_energies_keV=eff_mean,
        spectrum_at_effective_energy=at_eff,
    )
