"""
Exporters module for IntentGuard.
"""

from .results_exporter import CSV_COLUMNS, EXPORT_FORMATS, ResultsExporter

__all__ = ["CSV_COLUMNS", "EXPORT_FORMATS", "ResultsExporter"]
