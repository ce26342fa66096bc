"""Material data models.

Defines catalog entries for the physics lookup, tabulated attenuation
curves, energy-tagged attenuation values, mixtures, and HU tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from ctsim.constants import MYOCARDIUM_DENSITY_G_CM3


class MaterialSource(Enum):
    NIST_COMPOUND = "nist"
    ELEMENT = "element"


@dataclass(frozen=True)
class MaterialDefinition:
    """Catalog entry resolving a material id to physics data.

    Attributes:
        id: Unique identifier ("water", "calcium", etc.).
        name: Display name.
        source: NIST compound table or pure element.
        key: xraylib compound name or element symbol.
        density: Density override [g/cm³]; tabulated density if None.
    """
    id: str
    name: str
    source: MaterialSource
    key: str
    density: float | None = None


def _readonly(values) -> NDArray[np.float64]:
    arr = np.array(values, dtype=np.float64)
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True)
class MaterialLAC:
    """Monoenergetic linear attenuation curve of a material.

    Attributes:
        material_id: Material identifier.
        energies_keV: Sample energies [keV].
        lac: Linear attenuation coefficient at each energy [cm⁻¹].
    """
    material_id: str
    energies_keV: NDArray[np.float64]
    lac: NDArray[np.float64]

    def __post_init__(self) -> None:
        energies = _readonly(np.atleast_1d(self.energies_keV))
        lac = _readonly(np.atleast_1d(self.lac))
        if energies.ndim != 1 or energies.shape != lac.shape:
            raise ValueError(
                f"{self.material_id}: energies {energies.shape} and "
                f"LAC {lac.shape} must be matching 1-D arrays"
            )
        object.__setattr__(self, "energies_keV", energies)
        object.__setattr__(self, "lac", lac)

    def at(self, energy_keV: float) -> float:
        """LAC at an exactly tabulated energy [cm⁻¹].

        Raises:
            KeyError: If *energy_keV* is not a sample energy.
        """
        idx = np.flatnonzero(self.energies_keV == energy_keV)
        if idx.size == 0:
            raise KeyError(
                f"{self.material_id}: no sample at {energy_keV} keV"
            )
        return float(self.lac[idx[0]])


@dataclass(frozen=True)
class EffectiveAttenuation:
    """A single LAC value tagged with the energy it was evaluated at.

    Attributes:
        material_id: Material identifier.
        energy_keV: Evaluation energy [keV].
        lac: Linear attenuation coefficient [cm⁻¹].
    """
    material_id: str
    energy_keV: float
    lac: float


@dataclass(frozen=True)
class MixtureSpec:
    """Volumetric insert-in-host mixture (e.g. calcium in myocardium).

    Attributes:
        concentration_g_cm3: Insert mass concentration [g/cm³].
        reference_density_g_cm3: Host tissue reference density [g/cm³].
        insert_id: Insert material id.
        host_id: Host material id.
    """
    concentration_g_cm3: float
    reference_density_g_cm3: float = MYOCARDIUM_DENSITY_G_CM3
    insert_id: str = "calcium"
    host_id: str = "myocardium"

    @property
    def insert_fraction(self) -> float:
        return self.concentration_g_cm3 / self.reference_density_g_cm3

    @property
    def host_fraction(self) -> float:
        return 1.0 - self.insert_fraction


@dataclass(frozen=True)
class HUTable:
    """Hounsfield values of one material.

    Monoenergetic tables are indexed by energy; polyenergetic tables also
    carry the kVp setting each effective energy belongs to.

    Attributes:
        material_id: Material identifier.
        energies_keV: Evaluation energies [keV].
        hu: Hounsfield value at each energy.
        kvps: kVp setting per entry (polyenergetic mode only).
    """
    material_id: str
    energies_keV: NDArray[np.float64]
    hu: NDArray[np.float64]
    kvps: tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        energies = _readonly(np.atleast_1d(self.energies_keV))
        hu = _readonly(np.atleast_1d(self.hu))
        if energies.shape != hu.shape:
            raise ValueError(
                f"{self.material_id}: {energies.size} energies but {hu.size} HU values"
            )
        kvps = tuple(int(k) for k in self.kvps)
        if kvps and len(kvps) != hu.size:
            raise ValueError(
                f"{self.material_id}: {len(kvps)} kVp labels for {hu.size} HU values"
            )
        object.__setattr__(self, "energies_keV", energies)
        object.__setattr__(self, "hu", hu)
        object.__setattr__(self, "kvps", kvps)

    @property
    def is_polyenergetic(self) -> bool:
        return bool(self.kvps)

    def at(self, energy_keV: float) -> float:
        """HU at an exactly tabulated energy.

        Raises:
            KeyError: If *energy_keV* is not one of the table energies.
        """
        idx = np.flatnonzero(self.energies_keV == energy_keV)
        if idx.size == 0:
            raise KeyError(
                f"{self.material_id}: no HU value at {energy_keV} keV"
            )
        return float(self.hu[idx[0]])

    def for_kvp(self, kvp: int) -> float:
        """HU at the effective energy of one kVp setting.

        Raises:
            KeyError: If the table has no entry for *kvp*.
        """
        try:
            return float(self.hu[self.kvps.index(kvp)])
        except ValueError:
            raise KeyError(f"{self.material_id}: no HU value for {kvp} kVp")
