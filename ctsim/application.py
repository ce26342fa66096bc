"""Application setup — logging, command-line parsing and the pipeline run."""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys

from ctsim.constants import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_KVPS,
    MONO_ENERGIES_KEV,
    REFERENCE_ENERGY_KEV,
)
from ctsim.core.errors import CTSimError
from ctsim.core.hu_pipeline import (
    monoenergetic_hu_tables,
    reference_hu_values,
    run_polyenergetic,
    validate_water_reference,
)
from ctsim.core.line_integrals import material_integral_samples
from ctsim.core.material_database import MaterialService
from ctsim.core.phantom_layout import qrm_thorax
from ctsim.export import CsvExporter, JsonExporter, PlotExporter
from ctsim.models.geometry import CANON_AQUILION_ONE, GE_LIGHTSPEED, ImageGeometry

logger = logging.getLogger(__name__)

SCANNERS = {
    "ge_lightspeed": GE_LIGHTSPEED,
    "canon_aquilion_one": CANON_AQUILION_ONE,
}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging to stdout."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ctsim",
        description=f"{APP_NAME} {APP_VERSION} — phantom material HU tables",
    )
    parser.add_argument(
        "--spectra-dir", type=pathlib.Path, default=None,
        help="directory with spectra_<kvp>.csv tables (enables polyenergetic mode)",
    )
    parser.add_argument(
        "--kvp", type=int, nargs="+", default=list(DEFAULT_KVPS),
        help="tube voltage settings to load",
    )
    parser.add_argument(
        "--energy", type=float, nargs="+", default=list(MONO_ENERGIES_KEV),
        help="monoenergetic evaluation energies [keV]",
    )
    parser.add_argument(
        "--reference-energy", type=float, default=REFERENCE_ENERGY_KEV,
        help="energy [keV] whose HU values fill the phantom",
    )
    parser.add_argument(
        "--reference-kvp", type=int, default=None,
        help="fill the phantom with polyenergetic HU values of this kVp",
    )
    parser.add_argument(
        "--scanner", choices=sorted(SCANNERS), default="ge_lightspeed",
    )
    parser.add_argument(
        "--output-dir", type=pathlib.Path, default=None,
        help="write CSV/JSON/PNG diagnostics here",
    )
    parser.add_argument("--workers", type=int, default=1)
    parser.add_argument("--no-plots", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def run(args: argparse.Namespace) -> int:
    """Run the HU pipeline; returns the process exit status."""
    if any(kvp <= 0 for kvp in args.kvp):
        logger.error("--kvp values must be positive, got %s", args.kvp)
        return 2
    if any(e <= 0 for e in (*args.energy, args.reference_energy)):
        logger.error(
            "--energy and --reference-energy must be positive, got %s and %g",
            args.energy, args.reference_energy,
        )
        return 2
    if args.workers < 1:
        logger.error("--workers must be at least 1, got %d", args.workers)
        return 2
    if args.reference_energy not in args.energy:
        args.energy = sorted({*args.energy, args.reference_energy})
    if args.reference_kvp is not None:
        if args.spectra_dir is None:
            logger.error("--reference-kvp requires --spectra-dir")
            return 2
        if args.reference_kvp not in args.kvp:
            logger.error("--reference-kvp %d is not in --kvp %s", args.reference_kvp, args.kvp)
            return 2

    service = MaterialService()
    try:
        mono = monoenergetic_hu_tables(service.lookup_lac, args.energy, args.workers)
        poly = None
        if args.spectra_dir is not None:
            poly = run_polyenergetic(
                args.spectra_dir, args.kvp, service.lookup_lac, args.workers,
            )
            validate_water_reference(mono.tables, poly.tables)
        else:
            validate_water_reference(mono.tables)
    except (CTSimError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    if poly is not None and args.reference_kvp is not None:
        hu_values = reference_hu_values(poly.tables, kvp=args.reference_kvp)
        logger.info("Phantom filled with %d kVp effective HU values", args.reference_kvp)
    else:
        hu_values = reference_hu_values(mono.tables, energy_keV=args.reference_energy)
        logger.info("Phantom filled with %.0f keV HU values", args.reference_energy)

    for mid, value in hu_values.items():
        logger.info("  %-12s %9.1f HU", mid, value)

    shapes = qrm_thorax(hu_values)

    if args.output_dir is not None:
        out = args.output_dir
        out.mkdir(parents=True, exist_ok=True)
        csv_exporter = CsvExporter()
        csv_exporter.export_hu_tables(mono.tables, str(out / "hu_mono.csv"))
        if poly is not None:
            csv_exporter.export_spectra(poly.resampled, str(out / "spectra.csv"))
            csv_exporter.export_spectral_summary(poly.summary, str(out / "spectral_summary.csv"))
            csv_exporter.export_hu_tables(poly.tables, str(out / "hu_poly.csv"))
        JsonExporter().export_summary(
            str(out / "summary.json"),
            scanner=SCANNERS[args.scanner],
            image=ImageGeometry(),
            tables=poly.tables if poly is not None else mono.tables,
            summary=poly.summary if poly is not None else None,
            shapes=shapes,
            sampling=material_integral_samples(),
        )
        if not args.no_plots:
            plots = PlotExporter()
            plots.export_hu_png(mono.tables, str(out / "hu_mono.png"))
            if poly is not None:
                plots.export_spectra_png(poly.resampled, str(out / "spectra.png"), poly.summary)
        logger.info("Diagnostics written to %s", out)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    return run(args)
