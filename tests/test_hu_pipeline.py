"""Tests for the HU pipeline (monoenergetic and polyenergetic modes)."""

import numpy as np
import pytest

from ctsim.constants import MONO_ENERGIES_KEV
from ctsim.core.errors import MissingSpectrumFile
from ctsim.core.hu_pipeline import (
    PHANTOM_MATERIALS,
    PURE_MATERIALS,
    insert_id,
    material_lacs,
    monoenergetic_hu_tables,
    polyenergetic_hu_tables,
    reference_hu_values,
    run_polyenergetic,
    validate_water_reference,
)
from ctsim.core.spectral_integrator import summarize_spectra
from ctsim.core.spectrum_loader import load_spectra
from ctsim.core.spectrum_resampler import resample_spectra
from ctsim.models.material import HUTable


class TestMaterialIds:
    def test_insert_ids(self):
        assert insert_id(0.2) == "insert_200"
        assert insert_id(0.4) == "insert_400"
        assert insert_id(0.8) == "insert_800"

    def test_phantom_materials(self):
        assert PHANTOM_MATERIALS == (
            "water", "air", "lung", "myocardium", "bone", "soft_tissue",
            "insert_200", "insert_400", "insert_800",
        )


class TestMaterialLacs:
    def test_one_lookup_per_pure_material(self, lookup):
        material_lacs(lookup, [80.0, 100.0])
        assert sorted(mid for mid, _ in lookup.calls) == sorted(PURE_MATERIALS)
        assert all(energies == (80.0, 100.0) for _, energies in lookup.calls)

    def test_derived_materials(self, lookup):
        lacs = material_lacs(lookup, [100.0])
        assert set(lacs) == set(PHANTOM_MATERIALS)
        air = lookup("air", [100.0]).lac[0]
        tissue = lookup("lung_tissue", [100.0]).lac[0]
        assert lacs["lung"].at(100.0) == pytest.approx(0.75 * air + 0.25 * tissue)
        assert lacs["bone"].material_id == "bone"
        assert lacs["bone"].at(100.0) == pytest.approx(0.150 * 1.85)

    def test_parallel_matches_sequential(self, lookup):
        sequential = material_lacs(lookup, MONO_ENERGIES_KEV, max_workers=1)
        parallel = material_lacs(lookup, MONO_ENERGIES_KEV, max_workers=4)
        assert list(parallel) == list(sequential)
        for mid in sequential:
            np.testing.assert_array_equal(parallel[mid].lac, sequential[mid].lac)


class TestMonoenergetic:
    def test_tables_for_all_materials(self, lookup):
        result = monoenergetic_hu_tables(lookup)
        assert result.energies_keV == MONO_ENERGIES_KEV
        assert list(result.tables) == list(PHANTOM_MATERIALS)
        for table in result.tables.values():
            np.testing.assert_array_equal(table.energies_keV, MONO_ENERGIES_KEV)

    def test_water_exactly_zero(self, lookup):
        result = monoenergetic_hu_tables(lookup)
        np.testing.assert_array_equal(result.tables["water"].hu, 0.0)
        validate_water_reference(result.tables)

    def test_expected_ordering(self, lookup):
        tables = monoenergetic_hu_tables(lookup).tables
        at_100 = {mid: t.at(100.0) for mid, t in tables.items()}
        assert at_100["air"] < at_100["lung"] < at_100["water"]
        assert at_100["water"] < at_100["insert_200"] < at_100["insert_400"]
        assert at_100["insert_400"] < at_100["insert_800"]
        assert at_100["air"] == pytest.approx(-1000.0, abs=5.0)

    def test_inserts_brighter_at_low_energy(self, lookup):
        table = monoenergetic_hu_tables(lookup).tables["insert_800"]
        assert table.at(80.0) > table.at(135.0)


class TestPolyenergetic:
    @pytest.fixture
    def summary(self, spectra_dir):
        return summarize_spectra(
            resample_spectra(load_spectra(spectra_dir, [80, 100, 140])),
        )

    def test_lookup_on_shared_axis(self, lookup, summary):
        polyenergetic_hu_tables(lookup, summary)
        axis = tuple(summary.energies_keV.tolist())
        assert all(energies == axis for _, energies in lookup.calls)

    def test_tables_labelled_by_kvp(self, lookup, summary):
        _, tables = polyenergetic_hu_tables(lookup, summary)
        for table in tables.values():
            assert table.is_polyenergetic
            assert table.kvps == (80, 100, 140)
            np.testing.assert_array_equal(
                table.energies_keV, summary.effective_energies_keV,
            )

    def test_water_zero_for_every_kvp(self, lookup, summary):
        _, tables = polyenergetic_hu_tables(lookup, summary)
        for kvp in (80, 100, 140):
            assert tables["water"].for_kvp(kvp) == 0.0

    def test_calcium_hu_falls_with_kvp(self, lookup, summary):
        _, tables = polyenergetic_hu_tables(lookup, summary)
        insert = tables["insert_800"]
        assert insert.for_kvp(80) > insert.for_kvp(100) > insert.for_kvp(140)

    def test_parallel_matches_sequential(self, lookup, summary):
        _, sequential = polyenergetic_hu_tables(lookup, summary, max_workers=1)
        _, parallel = polyenergetic_hu_tables(lookup, summary, max_workers=3)
        assert list(parallel) == list(sequential)
        for mid in sequential:
            np.testing.assert_array_equal(parallel[mid].hu, sequential[mid].hu)

    def test_run_end_to_end(self, lookup, spectra_dir):
        result = run_polyenergetic(spectra_dir, [80, 100, 140], lookup)
        assert result.resampled.kvps == (80, 100, 140)
        assert result.summary.kvps == (80, 100, 140)
        assert set(result.tables) == set(PHANTOM_MATERIALS)
        validate_water_reference(result.tables)

    def test_run_missing_spectrum(self, lookup, spectra_dir):
        with pytest.raises(MissingSpectrumFile):
            run_polyenergetic(spectra_dir, [80, 120], lookup)
        assert lookup.calls == []


class TestWaterReference:
    def test_accepts_zero(self):
        ok = {"water": HUTable("water", [80.0, 100.0], [0.0, 0.0])}
        validate_water_reference(ok, ok)

    def test_rejects_offset(self):
        off = {"water": HUTable("water", [80.0, 100.0], [0.0, 0.5])}
        with pytest.raises(ValueError, match="100 keV"):
            validate_water_reference(off)

    def test_missing_water(self):
        with pytest.raises(KeyError):
            validate_water_reference({"air": HUTable("air", [80.0], [-1000.0])})


class TestReferenceValues:
    def test_by_energy(self, lookup):
        tables = monoenergetic_hu_tables(lookup).tables
        values = reference_hu_values(tables, energy_keV=100.0)
        assert set(values) == set(PHANTOM_MATERIALS)
        assert values["water"] == 0.0
        assert values["bone"] == pytest.approx(tables["bone"].at(100.0))

    def test_by_kvp(self, lookup, spectra_dir):
        tables = run_polyenergetic(spectra_dir, [80, 100, 140], lookup).tables
        values = reference_hu_values(tables, kvp=100)
        assert values["insert_400"] == pytest.approx(tables["insert_400"].for_kvp(100))

    @pytest.mark.parametrize("kwargs", [{}, {"energy_keV": 100.0, "kvp": 100}])
    def test_requires_exactly_one_selector(self, lookup, kwargs):
        tables = monoenergetic_hu_tables(lookup).tables
        with pytest.raises(ValueError, match="exactly one"):
            reference_hu_values(tables, **kwargs)

    def test_unknown_energy(self, lookup):
        tables = monoenergetic_hu_tables(lookup).tables
        with pytest.raises(KeyError):
            reference_hu_values(tables, energy_keV=90.0)
