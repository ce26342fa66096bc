"""Material-integral sampling grid for polyenergetic forward tables.

A material integral s_l is the density-weighted path length [g/cm²] of
basis material l along a ray.  Forward tables of the polyenergetic
projection are sampled on a regular grid of these integrals.

Defaults cover two basis materials: soft tissue up to 50 cm × 1 g/cm³
and bone up to 15 cm × 2 g/cm³.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

_DEFAULT_COUNTS = (45, 43)
_DEFAULT_MIN = (0.0, 0.0)
_DEFAULT_MAX = (50.0, 30.0)


@dataclass(frozen=True)
class IntegralSampling:
    """Per-material sample grids of the material integrals.

    Attributes:
        samples: One sample array per basis material [g/cm²].
        counts: Number of samples per material.
        minima: Smallest sample per material [g/cm²].
        maxima: Largest sample per material [g/cm²].
    """
    samples: tuple[NDArray[np.float64], ...]
    counts: tuple[int, ...]
    minima: tuple[float, ...]
    maxima: tuple[float, ...]


def material_integral_samples(
    samples: Sequence[Sequence[float]] | None = None,
    s_n: Sequence[int] | None = None,
    s_min: Sequence[float] | None = None,
    s_max: Sequence[float] | None = None,
) -> IntegralSampling:
    """Build the material-integral grid.

    Explicit *samples* define counts and bounds; otherwise each material
    gets ``linspace(s_min, s_max, s_n)`` using the defaults for any
    argument left as None.
    """
    if samples:
        grids = tuple(np.asarray(s, dtype=np.float64) for s in samples)
        if any(g.size == 0 for g in grids):
            raise ValueError("Material integral samples must not be empty")
        return IntegralSampling(
            samples=grids,
            counts=tuple(int(g.size) for g in grids),
            minima=tuple(float(g.min()) for g in grids),
            maxima=tuple(float(g.max()) for g in grids),
        )

    counts = tuple(int(n) for n in (s_n if s_n is not None else _DEFAULT_COUNTS))
    minima = tuple(float(v) for v in (s_min if s_min is not None else _DEFAULT_MIN))
    maxima = tuple(float(v) for v in (s_max if s_max is not None else _DEFAULT_MAX))
    if not len(counts) == len(minima) == len(maxima):
        raise ValueError("s_n, s_min and s_max must have one entry per material")
    if any(n < 1 for n in counts):
        raise ValueError(f"Sample counts must be positive, got {counts}")
    if any(lo > hi for lo, hi in zip(minima, maxima)):
        raise ValueError("s_min must not exceed s_max")

    return IntegralSampling(
        samples=tuple(
            np.linspace(lo, hi, n) for n, lo, hi in zip(counts, minima, maxima)
        ),
        counts=counts,
        minima=minima,
        maxima=maxima,
    )
