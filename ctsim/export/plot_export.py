"""Plot export — PNG figures of the spectra and HU tables.

Uses matplotlib ``Figure`` objects directly (no pyplot state), so it
runs headless.
"""

from __future__ import annotations

from matplotlib.figure import Figure

from ctsim.models.material import HUTable
from ctsim.models.spectrum import ResampledSpectrumSet, SpectralSummary


class PlotExporter:
    """PNG figure export operations."""

    def export_spectra_png(
        self,
        resampled: ResampledSpectrumSet,
        output_path: str,
        summary: SpectralSummary | None = None,
        dpi: int = 150,
    ) -> None:
        """Plot every resampled spectrum, marking effective energies.

        Args:
            resampled: Spectra on the shared energy axis.
            output_path: Destination file path (.png).
            summary: If given, effective energies are drawn as dashed lines.
            dpi: Output resolution.
        """
        fig = Figure(figsize=(8, 5))
        ax = fig.add_subplot(1, 1, 1)
        for m, kvp in enumerate(resampled.kvps):
            line, = ax.plot(
                resampled.energies_keV, resampled.weights[:, m],
                label=f"{kvp} kVp Spectrum",
            )
            if summary is not None:
                ax.axvline(
                    summary.effective_energy(kvp),
                    color=line.get_color(), linestyle="--", linewidth=0.8,
                )
        ax.set_title("X-ray Spectra")
        ax.set_xlabel("Energy (keV)")
        ax.set_ylabel("Photons / mAs-sr per energy bin")
        ax.legend()
        fig.tight_layout()
        fig.savefig(output_path, dpi=dpi)

    def export_hu_png(
        self,
        tables: dict[str, HUTable],
        output_path: str,
        dpi: int = 150,
    ) -> None:
        """Plot HU against evaluation energy for every material.

        Args:
            tables: HU table per material id.
            output_path: Destination file path (.png).
            dpi: Output resolution.
        """
        fig = Figure(figsize=(8, 5))
        ax = fig.add_subplot(1, 1, 1)
        for mid, table in tables.items():
            ax.plot(table.energies_keV, table.hu, marker="o", label=mid)
        ax.axhline(0.0, color="gray", linewidth=0.5)
        ax.set_title("Material Hounsfield Units")
        ax.set_xlabel("Energy (keV)")
        ax.set_ylabel("HU")
        ax.legend(fontsize="small", ncol=2)
        fig.tight_layout()
        fig.savefig(output_path, dpi=dpi)
