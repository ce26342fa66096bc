"""JSON run summary export and geometry import.

Writes the scanner/image geometry, spectral summary, HU tables and
phantom shapes of one pipeline run as formatted JSON.
"""

from __future__ import annotations

import json

from ctsim.constants import SUMMARY_SCHEMA_VERSION
from ctsim.core.line_integrals import IntegralSampling
from ctsim.core.serializers import (
    dict_to_geometry,
    dict_to_shape,
    geometry_to_dict,
    hu_tables_to_dict,
    shape_to_dict,
    summary_to_dict,
)
from ctsim.models.geometry import FanArcGeometry, ImageGeometry
from ctsim.models.material import HUTable
from ctsim.models.phantom import Shape
from ctsim.models.spectrum import SpectralSummary


class JsonExporter:
    """JSON run summary file operations."""

    def export_summary(
        self,
        output_path: str,
        scanner: FanArcGeometry,
        image: ImageGeometry,
        tables: dict[str, HUTable],
        summary: SpectralSummary | None = None,
        shapes: list[Shape] | None = None,
        sampling: IntegralSampling | None = None,
    ) -> None:
        """Write a run summary as formatted JSON.

        Args:
            output_path: Destination file path (.json).
            scanner: Scanner geometry record.
            image: Image geometry record.
            tables: HU table per material id.
            summary: Spectral summary (polyenergetic runs only).
            shapes: Phantom shapes handed to the phantom builder.
            sampling: Material-integral grid bounds.
        """
        data = {"schema_version": SUMMARY_SCHEMA_VERSION}
        data.update(geometry_to_dict(scanner, image))
        if summary is not None:
            data["spectra"] = summary_to_dict(summary)
        data["hu_tables"] = hu_tables_to_dict(tables)
        if shapes is not None:
            data["phantom"] = [shape_to_dict(s) for s in shapes]
        if sampling is not None:
            data["material_integrals"] = {
                "counts": list(sampling.counts),
                "minima": list(sampling.minima),
                "maxima": list(sampling.maxima),
            }
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def import_geometry(
        self, input_path: str,
    ) -> tuple[FanArcGeometry, ImageGeometry]:
        """Read scanner and image geometry from a summary or geometry file.

        Args:
            input_path: Source file path (.json).

        Returns:
            (scanner, image) geometry records.
        """
        with open(input_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return dict_to_geometry(data)

    def import_phantom(self, input_path: str) -> list[Shape]:
        """Read the phantom shapes of a run summary.

        Args:
            input_path: Source file path (.json).

        Returns:
            Shapes in painting order (empty if the summary has none).
        """
        with open(input_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [dict_to_shape(d) for d in data.get("phantom", [])]
