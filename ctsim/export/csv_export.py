"""CSV export — resampled spectra, spectral summary and HU tables.

BOM UTF-8 encoding for Excel compatibility.
"""

from __future__ import annotations

import csv

from ctsim.models.material import HUTable
from ctsim.models.spectrum import ResampledSpectrumSet, SpectralSummary


class CsvExporter:
    """CSV file export operations."""

    def export_spectra(
        self, resampled: ResampledSpectrumSet, output_path: str,
    ) -> None:
        """Export resampled spectra as CSV.

        Columns: Energy (keV), then one weight column per kVp.

        Args:
            resampled: Spectra on the shared energy axis.
            output_path: Destination file path (.csv).
        """
        with open(output_path, "w", newline="", encoding="utf-8-sig") as f:
            writer = csv.writer(f)
            writer.writerow(
                ["Energy (keV)"] + [f"{kvp} kVp" for kvp in resampled.kvps]
            )
            for i, energy in enumerate(resampled.energies_keV):
                writer.writerow(
                    [f"{energy:.4f}"]
                    + [f"{w:.6g}" for w in resampled.weights[i]]
                )

    def export_spectral_summary(
        self, summary: SpectralSummary, output_path: str,
    ) -> None:
        """Export effective energy and integral per kVp.

        Args:
            summary: Spectral summary.
            output_path: Destination file path (.csv).
        """
        with open(output_path, "w", newline="", encoding="utf-8-sig") as f:
            writer = csv.writer(f)
            writer.writerow([
                "kVp", "Effective energy (keV)", "Spectrum integral",
                "Spectrum at effective energy",
            ])
            for kvp, e, total, at in zip(
                summary.kvps,
                summary.effective_energies_keV,
                summary.integrals,
                summary.spectrum_at_effective_energy,
            ):
                writer.writerow([kvp, f"{e:.4f}", f"{total:.6g}", f"{at:.6g}"])

    def export_hu_tables(
        self,
        tables: dict[str, HUTable],
        output_path: str,
    ) -> None:
        """Export HU tables, one row per material and energy.

        Columns: Material, kVp (empty for monoenergetic tables),
        Energy (keV), HU.

        Args:
            tables: HU table per material id.
            output_path: Destination file path (.csv).
        """
        with open(output_path, "w", newline="", encoding="utf-8-sig") as f:
            writer = csv.writer(f)
            writer.writerow(["Material", "kVp", "Energy (keV)", "HU"])
            for mid, table in tables.items():
                kvps = table.kvps or ("",) * table.hu.size
                for kvp, energy, value in zip(kvps, table.energies_keV, table.hu):
                    writer.writerow([mid, kvp, f"{energy:.4f}", f"{value:.3f}"])
