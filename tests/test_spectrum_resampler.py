"""Tests for the spectrum resampler.

Covers: shared-axis selection (incl. ties), linear extrapolation beyond
each source domain, idempotence, and the end-to-end 80/100/140 kVp load.
"""

import numpy as np
import pytest

from conftest import kramers_rows, write_spectrum_csv
from ctsim.core.spectrum_loader import clear_spectrum_cache, load_spectra
from ctsim.core.spectrum_resampler import (
    resample_spectra,
    resample_spectrum,
    select_shared_axis,
)
from ctsim.models.spectrum import EnergySpectrum


def _spectrum(kvp, energies, weights) -> EnergySpectrum:
    return EnergySpectrum(kvp=kvp, energies_keV=energies, weights=weights)


class TestSharedAxis:
    def test_largest_max_energy_wins(self):
        spectra = [
            _spectrum(80, [10, 20, 80], [1, 2, 0]),
            _spectrum(140, [10, 50, 140], [1, 2, 0]),
            _spectrum(100, [10, 20, 100], [1, 2, 0]),
        ]
        assert select_shared_axis(spectra) == 1
        resampled = resample_spectra(spectra)
        np.testing.assert_array_equal(resampled.energies_keV, [10, 50, 140])
        assert resampled.kvps == (80, 140, 100)
        assert resampled.weights.shape == (3, 3)

    def test_tie_selects_first(self):
        spectra = [
            _spectrum(120, [10, 60, 150], [1, 1, 1]),
            _spectrum(140, [20, 100, 150], [1, 1, 1]),
        ]
        assert select_shared_axis(spectra) == 0
        np.testing.assert_array_equal(
            resample_spectra(spectra).energies_keV, [10, 60, 150],
        )

    def test_empty_input(self):
        with pytest.raises(ValueError, match="No spectra"):
            resample_spectra([])


class TestExtrapolation:
    def test_linear_extrapolation_above_domain(self):
        s = _spectrum(80, [10, 20, 30], [1.0, 3.0, 5.0])
        values = resample_spectrum(s, np.array([40.0, 50.0]))
        np.testing.assert_allclose(values, [7.0, 9.0])

    def test_linear_extrapolation_below_domain(self):
        s = _spectrum(80, [10, 20, 30], [1.0, 3.0, 5.0])
        values = resample_spectrum(s, np.array([5.0]))
        np.testing.assert_allclose(values, [0.0])

    def test_interpolation_inside_domain(self):
        s = _spectrum(80, [10, 20, 30], [1.0, 3.0, 2.0])
        np.testing.assert_allclose(
            resample_spectrum(s, np.array([15.0, 25.0])), [2.0, 2.5],
        )

    def test_not_clamped_and_finite(self):
        s = _spectrum(80, [10, 20], [4.0, 2.0])
        values = resample_spectrum(s, np.array([40.0]))
        assert np.isfinite(values).all()
        assert values[0] == pytest.approx(-2.0)


class TestIdempotence:
    def test_common_axis_set_unchanged(self):
        axis = [10.0, 20.0, 30.0, 40.0]
        spectra = [
            _spectrum(80, axis, [1.0, 2.0, 0.5, 0.0]),
            _spectrum(100, axis, [2.0, 3.0, 1.5, 0.25]),
        ]
        first = resample_spectra(spectra)
        again = resample_spectra([
            _spectrum(kvp, first.energies_keV, first.column(kvp))
            for kvp in first.kvps
        ])
        np.testing.assert_allclose(again.weights, first.weights, rtol=0, atol=1e-12)
        np.testing.assert_allclose(first.column(100), [2.0, 3.0, 1.5, 0.25])

    def test_unknown_column(self):
        resampled = resample_spectra([_spectrum(80, [10, 20], [1, 1])])
        with pytest.raises(KeyError, match="Unknown kVp"):
            resampled.column(120)


class TestEndToEnd:
    def test_80_100_140_shared_axis_and_top_extrapolation(self, tmp_path):
        clear_spectrum_cache()
        for kvp in (80, 100, 140):
            write_spectrum_csv(tmp_path, kvp, kramers_rows(kvp, step=5.0))
        spectra = load_spectra(tmp_path, [80, 100, 140])
        resampled = resample_spectra(spectra)

        np.testing.assert_array_equal(resampled.energies_keV, spectra[2].energies_keV)

        top = resampled.energies_keV[-1]
        for s in spectra[:2]:
            e, w = s.energies_keV, s.weights
            slope = (w[-1] - w[-2]) / (e[-1] - e[-2])
            expected = w[-1] + slope * (top - e[-1])
            value = resampled.column(s.kvp)[-1]
            assert np.isfinite(value)
            assert value == pytest.approx(expected)
            assert value != 0.0
        clear_spectrum_cache()
