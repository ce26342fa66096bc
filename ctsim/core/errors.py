"""Error taxonomy for the spectral and materials pipelines.

All errors are precondition failures detected before a result is produced.
Each carries the context needed to diagnose it (kVp setting, material id,
offending energy) as attributes and in its message.
"""

from __future__ import annotations

import pathlib


class CTSimError(Exception):
    """Base class for all pipeline errors."""


class MissingSpectrumFile(CTSimError, FileNotFoundError):
    """No spectrum table exists for a requested kVp setting.

    Attributes:
        kvp: Requested tube voltage [kVp].
        path: Expected file location.
    """

    def __init__(self, kvp: int, path: str | pathlib.Path) -> None:
        self.kvp = kvp
        self.path = pathlib.Path(path)
        super().__init__(f"No spectrum file for {kvp} kVp: {self.path}")

    def __str__(self) -> str:
        return self.args[0]


class MalformedSpectrumTable(CTSimError, ValueError):
    """Spectrum table has missing columns or non-monotonic energies.

    Attributes:
        kvp: Tube voltage of the table [kVp].
        path: Table file location.
        reason: Human-readable description of the defect.
    """

    def __init__(
        self, kvp: int, path: str | pathlib.Path, reason: str,
    ) -> None:
        self.kvp = kvp
        self.path = pathlib.Path(path)
        self.reason = reason
        super().__init__(
            f"Malformed spectrum table for {kvp} kVp ({self.path}): {reason}"
        )


class DegenerateSpectrum(CTSimError, ValueError):
    """Spectrum integral is zero, so the mean energy is undefined.

    Attributes:
        kvp: Tube voltage of the offending column [kVp].
    """

    def __init__(self, kvp: int) -> None:
        self.kvp = kvp
        super().__init__(
            f"Spectrum for {kvp} kVp has zero integral; "
            f"effective energy is undefined"
        )


class InvalidMixtureFraction(CTSimError, ValueError):
    """Insert volume fraction C/D falls outside [0, 1].

    Attributes:
        concentration: Insert mass concentration [g/cm³].
        reference_density: Host reference density [g/cm³].
        fraction: Resulting volume fraction C/D.
    """

    def __init__(
        self, concentration: float, reference_density: float,
    ) -> None:
        self.concentration = concentration
        self.reference_density = reference_density
        self.fraction = (
            concentration / reference_density
            if reference_density
            else float("inf")
        )
        super().__init__(
            f"Invalid mixture: concentration {concentration:g} g/cm³ over "
            f"reference density {reference_density:g} g/cm³ gives volume "
            f"fraction {self.fraction:g} (must lie in [0, 1])"
        )


class EnergyMismatch(CTSimError, ValueError):
    """Two attenuation values were evaluated at different energies.

    Attributes:
        material_id: Material on the numerator side.
        energy_keV: Energy (or energy samples) of the material LAC.
        reference_energy_keV: Energy (or energy samples) of the reference LAC.
    """

    def __init__(
        self,
        material_id: str,
        energy_keV: object,
        reference_energy_keV: object,
    ) -> None:
        self.material_id = material_id
        self.energy_keV = energy_keV
        self.reference_energy_keV = reference_energy_keV
        super().__init__(
            f"Energy mismatch for {material_id!r}: evaluated at "
            f"{energy_keV} keV, reference evaluated at "
            f"{reference_energy_keV} keV"
        )
