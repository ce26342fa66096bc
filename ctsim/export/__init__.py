"""Export — diagnostic data export (CSV, JSON, PNG)."""

from ctsim.export.csv_export import CsvExporter
from ctsim.export.json_export import JsonExporter
from ctsim.export.plot_export import PlotExporter

__all__ = [
    "CsvExporter",
    "JsonExporter",
    "PlotExporter",
]
