"""Pipeline result data models.

Bundles returned by the HU pipeline for inspection, export and the
phantom builder.
"""

from dataclasses import dataclass, field

from ctsim.models.material import HUTable, MaterialLAC
from ctsim.models.spectrum import ResampledSpectrumSet, SpectralSummary


@dataclass(frozen=True)
class MonoenergeticResult:
    """HU tables at discrete monoenergetic energies.

    Attributes:
        energies_keV: Evaluation energies [keV].
        lacs: LAC curve per phantom material.
        tables: HU table per phantom material.
    """
    energies_keV: tuple[float, ...]
    lacs: dict[str, MaterialLAC] = field(default_factory=dict)
    tables: dict[str, HUTable] = field(default_factory=dict)


@dataclass(frozen=True)
class PolyenergeticResult:
    """Spectral pipeline output with per-kVp effective HU tables.

    Attributes:
        resampled: Spectra on the shared energy axis.
        summary: Effective energies and integrals.
        lacs: LAC curve per phantom material on the shared axis.
        tables: HU table per phantom material, one entry per kVp.
    """
    resampled: ResampledSpectrumSet
    summary: SpectralSummary
    lacs: dict[str, MaterialLAC] = field(default_factory=dict)
    tables: dict[str, HUTable] = field(default_factory=dict)
