import json
import logging
import os
from logging import Logger
from typing import Any, Dict, List, Optional

from ..base import BaseDatastore
from ...utils import is_safe_filename


class FileSystemService(BaseDatastore):
    """
    File-based datastore for test runs.
    Each run is one `<testId>.json` file in the base directory. Failures are
    logged and degrade to False / None / [] instead of propagating.
    """

    def __init__(self, base_path: str = "data/test-results", logger: Optional[Logger] = None):
        """
        Initialize the FileSystemService with a base directory to read/write files.

        Args:
            base_path (str): Directory where test-run files are stored.
            logger (Optional[Logger]): Logger to report I/O failures on.
        """
        self.base_path = base_path
        self.logger = logger or logging.getLogger(__name__)
        os.makedirs(self.base_path, exist_ok=True)

    def _get_path(self, test_id: str) -> Optional[str]:
        """
        Build the file path for a test id, or None if the id is not a plain file name.

        Args:
            test_id (str): Test-run identifier.

        Returns:
            Optional[str]: Path under the base directory.
        """
        if not is_safe_filename(test_id):
            return None
        return os.path.join(self.base_path, f"{test_id}.json")

    def save_test_run(self, test_id: str, record: Dict[str, Any]) -> bool:
        path = self._get_path(test_id)
        if path is None:
            self.logger.error(f"[FileSystemService] Refusing to save unsafe test id: {test_id!r}")
            return False
        try:
            os.makedirs(self.base_path, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2)
        except (OSError, TypeError, ValueError) as e:
            self.logger.error(f"[FileSystemService] Failed to save {path}: {e}")
            return False
        self.logger.info(f"[FileSystemService] Saved test run {test_id}")
        return True

    def fetch_test_run(self, test_id: str) -> Optional[Dict[str, Any]]:
        path = self._get_path(test_id)
        if path is None or not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            self.logger.error(f"[FileSystemService] Failed to read {path}: {e}")
            return None

    def list_test_runs(self) -> List[str]:
        try:
            names = os.listdir(self.base_path)
        except OSError as e:
            self.logger.error(f"[FileSystemService] Failed to list {self.base_path}: {e}")
            return []
        return sorted(name[:-len(".json")] for name in names if name.endswith(".json"))
