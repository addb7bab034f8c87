from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class BaseDatastore(ABC):

    @abstractmethod
    def save_test_run(self, test_id: str, record: Dict[str, Any]) -> bool:
        """
        Persist a test-run record, overwriting any previous one with the same id.

        Args:
            test_id (str): Test-run identifier.
            record (Dict[str, Any]): Serialized TestRun.

        Returns:
            bool: True when the record was written.
        """
        pass

    @abstractmethod
    def fetch_test_run(self, test_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve a stored test-run record.

        Args:
            test_id (str): Test-run identifier.

        Returns:
            Optional[Dict[str, Any]]: The record, or None when it cannot be read.
        """
        pass

    @abstractmethod
    def list_test_runs(self) -> List[str]:
        """
        List stored test-run ids in lexicographic order.

        Returns:
            List[str]: Sorted ids; chronological for ids generated by the batch runner.
        """
        pass
