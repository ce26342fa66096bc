"""Material database service — monoenergetic LAC lookup backed by xraylib.

Resolves material ids from a small catalog to xraylib data: NIST compound
tables for tissues, water and air, elemental cross sections for pure
elements (calcium inserts).  Provides ``lookup_lac`` returning the
linear attenuation coefficient curve at a set of energies.

All returned μ/ρ values are in cm²/g, μ in cm⁻¹.
Energy inputs are in keV (core units).
"""

import logging
from collections.abc import Iterable, Sequence

import numpy as np
import xraylib

from ctsim.core.units import mass_to_linear_attenuation
from ctsim.models.material import MaterialDefinition, MaterialLAC, MaterialSource

logger = logging.getLogger(__name__)

# Material ID → xraylib data source
_CATALOG: tuple[MaterialDefinition, ...] = (
    MaterialDefinition("water", "Water", MaterialSource.NIST_COMPOUND, "Water, Liquid"),
    MaterialDefinition("air", "Air", MaterialSource.NIST_COMPOUND, "Air, Dry (near sea level)"),
    MaterialDefinition("lung_tissue", "Lung tissue", MaterialSource.NIST_COMPOUND, "Lung"),
    MaterialDefinition("myocardium", "Myocardium", MaterialSource.NIST_COMPOUND, "Muscle, Skeletal"),
    MaterialDefinition("cortical_bone", "Cortical bone", MaterialSource.NIST_COMPOUND, "Bone, Cortical"),
    MaterialDefinition("soft_tissue", "Soft tissue", MaterialSource.NIST_COMPOUND, "Tissue, Soft (ICRP)"),
    MaterialDefinition("calcium", "Calcium", MaterialSource.ELEMENT, "Ca"),
)


class MaterialService:
    """Service for material lookup and monoenergetic attenuation queries.

    Curves returned by ``lookup_lac`` are cached per (material, energies)
    for the lifetime of the service and never mutated.

    Args:
        extra_materials: Additional catalog entries; an entry with an
            existing id replaces the built-in one.
    """

    def __init__(
        self, extra_materials: Iterable[MaterialDefinition] = (),
    ) -> None:
        self._materials: dict[str, MaterialDefinition] = {m.id: m for m in _CATALOG}
        for mat in extra_materials:
            self._materials[mat.id] = mat
        self._nist_names: dict[str, str] = {}
        self._cache: dict[tuple[str, tuple[float, ...]], MaterialLAC] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_all_materials(self) -> list[MaterialDefinition]:
        """Return all catalog entries."""
        return list(self._materials.values())

    def get_material(self, material_id: str) -> MaterialDefinition:
        """Return a single catalog entry by ID.

        Raises:
            KeyError: If *material_id* is not found.
        """
        try:
            return self._materials[material_id]
        except KeyError:
            raise KeyError(f"Unknown material: {material_id!r}")

    def get_density(self, material_id: str) -> float:
        """Material density [g/cm³] (catalog override or tabulated)."""
        mat = self.get_material(material_id)
        if mat.density is not None:
            return mat.density
        if mat.source is MaterialSource.ELEMENT:
            return float(xraylib.ElementDensity(self._atomic_number(mat)))
        data = xraylib.GetCompoundDataNISTByName(self._nist_name(mat))
        return float(data["density"])

    def get_mu_rho(self, material_id: str, energy_keV: float) -> float:
        """Total mass attenuation coefficient (coherent included) [cm²/g]."""
        if energy_keV <= 0:
            raise ValueError(f"Energy must be positive, got {energy_keV} keV")
        mat = self.get_material(material_id)
        if mat.source is MaterialSource.ELEMENT:
            return float(xraylib.CS_Total(self._atomic_number(mat), float(energy_keV)))
        return float(xraylib.CS_Total_CP(self._nist_name(mat), float(energy_keV)))

    def lookup_lac(
        self,
        material_id: str,
        energies_keV: Sequence[float],
    ) -> MaterialLAC:
        """Linear attenuation curve of a material at the given energies.

        μ [cm⁻¹] = (μ/ρ) [cm²/g] × ρ [g/cm³]

        Args:
            material_id: Material identifier.
            energies_keV: Photon energies [keV], all positive.

        Returns:
            MaterialLAC sampled at *energies_keV*.
        """
        key = (material_id, tuple(float(e) for e in energies_keV))
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("LAC cache hit: %s (%d energies)", material_id, len(key[1]))
            return cached

        density = self.get_density(material_id)
        lac = np.array([
            mass_to_linear_attenuation(self.get_mu_rho(material_id, e), density)
            for e in key[1]
        ])
        curve = MaterialLAC(material_id=material_id, energies_keV=key[1], lac=lac)
        self._cache[key] = curve
        logger.debug(
            "Looked up %s LAC at %d energies (density %.4g g/cm3)",
            material_id, len(key[1]), density,
        )
        return curve

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _atomic_number(mat: MaterialDefinition) -> int:
        return int(xraylib.SymbolToAtomicNumber(mat.key))

    def _nist_name(self, mat: MaterialDefinition) -> str:
        """Resolve a catalog key to an xraylib NIST compound name.

        Exact names win; otherwise the first NIST entry starting with the
        key (case-insensitive) is used.
        """
        name = self._nist_names.get(mat.key)
        if name is not None:
            return name
        available = list(xraylib.GetCompoundDataNISTList())
        if mat.key in available:
            name = mat.key
        else:
            prefix = mat.key.lower()
            matches = [n for n in available if n.lower().startswith(prefix)]
            if not matches:
                raise KeyError(
                    f"No NIST compound matching {mat.key!r} for material {mat.id!r}"
                )
            name = matches[0]
            logger.debug("Resolved NIST compound %r -> %r", mat.key, name)
        self._nist_names[mat.key] = name
        return name
