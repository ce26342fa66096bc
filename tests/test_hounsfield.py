"""Tests for the HU converter."""

import numpy as np
import pytest

from ctsim.constants import MONO_ENERGIES_KEV
from ctsim.core.errors import EnergyMismatch
from ctsim.core.hounsfield import convert_hu, effective_hu, hu
from ctsim.models.material import EffectiveAttenuation, MaterialLAC


class TestHu:
    def test_water_is_zero(self):
        assert hu(0.1707, 0.1707) == 0.0

    def test_vacuum_is_minus_1000(self):
        assert hu(0.0, 0.2) == pytest.approx(-1000.0)

    def test_twice_water(self):
        assert hu(0.4, 0.2) == pytest.approx(1000.0)

    def test_scalar_returns_float(self):
        assert isinstance(hu(0.3, 0.2), float)

    def test_elementwise(self):
        np.testing.assert_allclose(
            hu(np.array([0.1, 0.2, 0.3]), np.array([0.2, 0.2, 0.2])),
            [-500.0, 0.0, 500.0],
        )

    def test_not_clamped(self):
        assert hu(1.0, 0.2) == pytest.approx(4000.0)

    @pytest.mark.parametrize("water", [0.0, -0.1])
    def test_non_positive_water(self, water):
        with pytest.raises(ValueError, match="Water LAC must be positive"):
            hu(0.2, water)


class TestEffectiveHu:
    def test_same_energy(self):
        bone = EffectiveAttenuation("bone", 65.0, 0.5)
        water = EffectiveAttenuation("water", 65.0, 0.2)
        assert effective_hu(bone, water) == pytest.approx(1500.0)

    def test_energy_mismatch(self):
        bone = EffectiveAttenuation("bone", 65.0, 0.5)
        water = EffectiveAttenuation("water", 70.0, 0.2)
        with pytest.raises(EnergyMismatch) as exc_info:
            effective_hu(bone, water)
        assert exc_info.value.material_id == "bone"
        assert exc_info.value.energy_keV == 65.0
        assert exc_info.value.reference_energy_keV == 70.0


class TestConvertHu:
    def test_water_exactly_zero_at_mono_energies(self, lookup):
        water = lookup("water", MONO_ENERGIES_KEV)
        table = convert_hu(water, water)
        np.testing.assert_array_equal(table.hu, np.zeros(len(MONO_ENERGIES_KEV)))
        assert not table.is_polyenergetic

    def test_table_lookup_by_energy(self, lookup):
        energies = [80.0, 100.0]
        table = convert_hu(lookup("cortical_bone", energies), lookup("water", energies))
        assert table.material_id == "cortical_bone"
        assert table.at(100.0) == pytest.approx(1000 * (0.150 * 1.85 / 0.171 - 1))
        with pytest.raises(KeyError):
            table.at(90.0)

    def test_mismatched_energies(self):
        a = MaterialLAC("bone", [80.0, 100.0], [0.3, 0.27])
        w = MaterialLAC("water", [80.0, 120.0], [0.184, 0.163])
        with pytest.raises(EnergyMismatch):
            convert_hu(a, w)
