"""Serialization utilities — dataclass ↔ JSON-safe dict conversion.

Handles Enum fields, NumPy arrays, tuples and the phantom shape union.
Used by the JSON exporter for run summaries and geometry records.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any

import numpy as np

from ctsim.models.geometry import FanArcGeometry, ImageGeometry
from ctsim.models.material import HUTable
from ctsim.models.phantom import Cuboid, Cylinder, Shape, ShapeType
from ctsim.models.spectrum import SpectralSummary


# =====================================================================
# Generic helpers
# =====================================================================


def _serialize_value(val: Any) -> Any:
    """Convert a value to a JSON-safe type."""
    if val is None:
        return None
    if isinstance(val, Enum):
        return val.value
    if isinstance(val, np.ndarray):
        return val.tolist()
    if isinstance(val, np.generic):
        return val.item()
    if dataclasses.is_dataclass(val) and not isinstance(val, type):
        return _dataclass_to_dict(val)
    if isinstance(val, (list, tuple)):
        return [_serialize_value(v) for v in val]
    if isinstance(val, dict):
        return {str(k): _serialize_value(v) for k, v in val.items()}
    if isinstance(val, (int, float, str, bool)):
        return val
    return str(val)


def _dataclass_to_dict(obj: Any) -> dict:
    """Recursively convert a dataclass to a JSON-safe dict."""
    result = {}
    for f in dataclasses.fields(obj):
        val = getattr(obj, f.name)
        result[f.name] = _serialize_value(val)
    return result


# =====================================================================
# Geometry serialization
# =====================================================================


def geometry_to_dict(scanner: FanArcGeometry, image: ImageGeometry) -> dict:
    """Serialize scanner and image geometry records."""
    return {
        "scanner": _dataclass_to_dict(scanner),
        "image": _dataclass_to_dict(image),
    }


def dict_to_geometry(data: dict) -> tuple[FanArcGeometry, ImageGeometry]:
    """Deserialize scanner and image geometry records.

    Missing fields fall back to the dataclass defaults.
    """
    scanner_fields = {f.name for f in dataclasses.fields(FanArcGeometry)}
    scanner = FanArcGeometry(**{
        k: v for k, v in data.get("scanner", {}).items() if k in scanner_fields
    })
    img = data.get("image", {})
    kwargs = {}
    if "dims" in img:
        kwargs["dims"] = tuple(int(n) for n in img["dims"])
    if "deltas_mm" in img:
        kwargs["deltas_mm"] = tuple(float(d) for d in img["deltas_mm"])
    return scanner, ImageGeometry(**kwargs)


# =====================================================================
# Phantom / results serialization
# =====================================================================


def shape_to_dict(shape: Shape) -> dict:
    """Serialize a phantom shape with a ``_shape_type`` discriminator."""
    d = _dataclass_to_dict(shape)
    d["_shape_type"] = shape.type.value
    return d


def dict_to_shape(data: dict) -> Shape:
    """Deserialize a phantom shape tagged with ``_shape_type``."""
    cls = Cuboid if data.get("_shape_type") == ShapeType.CUBOID.value else Cylinder
    return cls(
        name=data["name"],
        center_mm=tuple(data["center_mm"]),
        width_mm=tuple(data["width_mm"]),
        angles_rad=tuple(data["angles_rad"]),
        value=float(data["value"]),
    )


def summary_to_dict(summary: SpectralSummary) -> dict:
    """Per-kVp effective energies and integrals (differential omitted)."""
    return {
        str(kvp): {
            "effective_energy_keV": float(e),
            "integral": float(total),
            "spectrum_at_effective_energy": float(at),
        }
        for kvp, e, total, at in zip(
            summary.kvps,
            summary.effective_energies_keV,
            summary.integrals,
            summary.spectrum_at_effective_energy,
        )
    }


def hu_tables_to_dict(tables: dict[str, HUTable]) -> dict:
    """HU tables keyed by material id."""
    return {mid: _dataclass_to_dict(table) for mid, table in tables.items()}
