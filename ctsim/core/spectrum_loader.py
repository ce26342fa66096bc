"""Spectrum loader — reads tabulated tube spectra, one CSV per kVp setting.

Each ``spectra_<kvp>.csv`` file holds two numeric columns: energy [keV]
and relative photon weight.  An optional non-numeric header row is
skipped.  The tabulated (Wilderman/Sukovic) spectra are stored per unit
energy, so every weight is multiplied by its energy on load.

Loaded spectra are kept in a process-wide read cache, one entry per file,
replaced when the file modification time changes.
``clear_spectrum_cache()`` drops the whole cache.
"""

from __future__ import annotations

import csv
import logging
import pathlib
from collections.abc import Iterable

import numpy as np

from ctsim.constants import SPECTRUM_FILENAME
from ctsim.core.errors import MalformedSpectrumTable, MissingSpectrumFile
from ctsim.models.spectrum import EnergySpectrum

logger = logging.getLogger(__name__)

# Module-level cache: resolved path -> (mtime_ns, spectrum)
_SPECTRA: dict[pathlib.Path, tuple[int, EnergySpectrum]] = {}


def spectrum_path(directory: str | pathlib.Path, kvp: int) -> pathlib.Path:
    """Expected location of the spectrum table for *kvp*."""
    return pathlib.Path(directory) / SPECTRUM_FILENAME.format(kvp=kvp)


def load_spectrum(directory: str | pathlib.Path, kvp: int) -> EnergySpectrum:
    """Load the spectrum of one kVp setting.

    Args:
        directory: Directory holding ``spectra_<kvp>.csv`` files.
        kvp: Tube voltage [kVp], positive integer.

    Returns:
        EnergySpectrum with weights already scaled by energy.

    Raises:
        ValueError: If *kvp* is not a positive integer.
        MissingSpectrumFile: If no table exists for *kvp*.
        MalformedSpectrumTable: If the table is incomplete or not
            strictly increasing in energy.
    """
    if isinstance(kvp, bool) or int(kvp) != kvp or kvp <= 0:
        raise ValueError(f"kVp must be a positive integer, got {kvp!r}")
    kvp = int(kvp)

    path = spectrum_path(directory, kvp)
    if not path.is_file():
        raise MissingSpectrumFile(kvp, path)

    resolved = path.resolve()
    mtime = resolved.stat().st_mtime_ns
    cached = _SPECTRA.get(resolved)
    if cached is not None and cached[0] == mtime:
        logger.debug("Spectrum cache hit: %s", resolved)
        return cached[1]

    energies, weights = _read_table(kvp, resolved)
    spectrum = EnergySpectrum(kvp=kvp, energies_keV=energies, weights=weights * energies)
    _SPECTRA[resolved] = (mtime, spectrum)
    logger.info(
        "Loaded %d kVp spectrum: %d samples, %.1f-%.1f keV",
        kvp, energies.size, energies[0], energies[-1],
    )
    return spectrum


def load_spectra(
    directory: str | pathlib.Path,
    kvps: Iterable[int],
) -> list[EnergySpectrum]:
    """Load one spectrum per kVp setting, preserving the requested order."""
    kvps = list(kvps)
    if not kvps:
        raise ValueError("At least one kVp setting is required")
    return [load_spectrum(directory, kvp) for kvp in kvps]


def clear_spectrum_cache() -> None:
    """Drop every cached spectrum."""
    _SPECTRA.clear()


# ── Internal helpers ────────────────────────────────────────────────

def _read_table(
    kvp: int, path: pathlib.Path,
) -> tuple[np.ndarray, np.ndarray]:
    """Parse and validate a two-column (energy, weight) table."""
    rows: list[tuple[float, float]] = []
    header_seen = False
    with open(path, newline="", encoding="utf-8-sig") as f:
        for line_no, row in enumerate(csv.reader(f), start=1):
            cells = [c.strip() for c in row]
            if not any(cells):
                continue
            if not rows and cells[0] and not _is_number(cells[0]):
                if header_seen:
                    raise MalformedSpectrumTable(
                        kvp, path, f"line {line_no}: non-numeric value in {cells[:2]}",
                    )
                header_seen = True
                continue
            if len(cells) < 2 or not cells[0] or not cells[1]:
                raise MalformedSpectrumTable(
                    kvp, path, f"line {line_no}: expected energy and weight columns",
                )
            try:
                energy, weight = float(cells[0]), float(cells[1])
            except ValueError:
                raise MalformedSpectrumTable(
                    kvp, path, f"line {line_no}: non-numeric value in {cells[:2]}",
                )
            if not (np.isfinite(energy) and np.isfinite(weight)):
                raise MalformedSpectrumTable(
                    kvp, path, f"line {line_no}: non-finite value in {cells[:2]}",
                )
            rows.append((energy, weight))

    table = _drop_duplicate_rows(kvp, path, rows)
    if len(table) < 2:
        raise MalformedSpectrumTable(
            kvp, path, f"need at least 2 samples, found {len(table)}",
        )

    energies = np.array([r[0] for r in table], dtype=np.float64)
    weights = np.array([r[1] for r in table], dtype=np.float64)

    if energies[0] <= 0:
        raise MalformedSpectrumTable(
            kvp, path, f"energies must be positive, first is {energies[0]:g} keV",
        )
    bad = np.flatnonzero(np.diff(energies) <= 0)
    if bad.size:
        i = int(bad[0])
        raise MalformedSpectrumTable(
            kvp, path,
            f"energies not strictly increasing at {energies[i]:g} -> "
            f"{energies[i + 1]:g} keV",
        )
    if np.any(weights < 0):
        i = int(np.flatnonzero(weights < 0)[0])
        raise MalformedSpectrumTable(
            kvp, path, f"negative weight at {energies[i]:g} keV",
        )
    return energies, weights


def _drop_duplicate_rows(
    kvp: int,
    path: pathlib.Path,
    rows: list[tuple[float, float]],
) -> list[tuple[float, float]]:
    """Remove consecutive exact duplicates; conflicting repeats are malformed."""
    table: list[tuple[float, float]] = []
    for energy, weight in rows:
        if table and table[-1][0] == energy:
            if table[-1][1] != weight:
                raise MalformedSpectrumTable(
                    kvp, path,
                    f"duplicate energy {energy:g} keV with conflicting weights",
                )
            logger.debug("%d kVp: dropping duplicate row at %g keV", kvp, energy)
            continue
        table.append((energy, weight))
    return table


def _is_number(cell: str) -> bool:
    try:
        float(cell)
    except ValueError:
        return False
    return True
