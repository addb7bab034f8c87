"""
ResultsExporter class for exporting stored test runs.
Handles verbatim JSON export and one-row-per-utterance CSV export.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from ..config import Config

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "Utterance",
    "Expected Intent",
    "Recognized Intent",
    "Intent Match",
    "Confidence",
    "Expected Slots",
    "Recognized Slots",
    "Slots Match",
    "Overall Match",
]

EXPORT_FORMATS = ("json", "csv")


def _yes_no(value: Any) -> str:
    return "Yes" if value else "No"


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class ResultsExporter:
    """Handles exporting test runs to JSON and CSV."""

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize ResultsExporter with configuration.

        Args:
            config: Configuration object with output settings
        """
        self.config = config
        self.logger = logger

    @staticmethod
    def filename(test_id: str, export_format: str) -> str:
        return f"test-results-{test_id}.{export_format}"

    def export_to_json(self, record: Dict[str, Any]) -> str:
        """Serialize a stored test run verbatim."""
        return json.dumps(record, indent=2, ensure_ascii=False)

    def to_rows(self, record: Dict[str, Any]) -> List[Dict[str, Any]]:
        rows = []
        for result in record.get("results") or []:
            rows.append({
                "Utterance": result.get("utterance") or "",
                "Expected Intent": result.get("expected_intent") or "",
                "Recognized Intent": result.get("recognized_intent") or "",
                "Intent Match": _yes_no(result.get("intent_match")),
                "Confidence": result.get("confidence") or 0,
                "Expected Slots": _compact_json(result.get("expected_slots") or {}),
                "Recognized Slots": _compact_json(result.get("slots") or []),
                "Slots Match": _yes_no(result.get("slots_match")),
                "Overall Match": _yes_no(result.get("overall_match")),
            })
        return rows

    def export_to_csv(self, record: Dict[str, Any]) -> str:
        """
        Export a test run to CSV format.

        Fields containing commas, quotes or newlines are quoted, embedded quotes doubled.

        Args:
            record: Serialized TestRun

        Returns:
            CSV content
        """
        df = pd.DataFrame(self.to_rows(record), columns=CSV_COLUMNS)
        return df.to_csv(index=False, lineterminator="\n")

    def export(self, record: Dict[str, Any], export_format: str = "json") -> str:
        if export_format == "csv":
            return self.export_to_csv(record)
        return self.export_to_json(record)
