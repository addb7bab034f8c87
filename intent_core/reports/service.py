"""
'reports/service.py': Locate stored test runs for the report and export endpoints.

Lookup order for a test id:
    1. the session's test results keyed by id
    2. the session's last test run, if its id matches
    3. the result store by id
    4. any run whose language equals the requested id (newest first)
    5. the newest stored run
"""
import logging
from logging import Logger
from typing import Any, Dict, List, Optional

from ..datastore.base import BaseDatastore
from ..exceptions import NotFoundError
from ..sessions.schemas import Session

Record = Dict[str, Any]


def summarize(test_id: str, record: Record) -> Dict[str, Any]:
    return {
        "test_id": test_id,
        "timestamp": record.get("timestamp"),
        "language": record.get("language"),
        "flowId": record.get("flowId"),
        "summary": record.get("summary"),
    }


class ReportService:
    def __init__(self, datastore: BaseDatastore, logger: Optional[Logger] = None):
        self.datastore = datastore
        self.logger = logger or logging.getLogger(__name__)

    def _from_session(self, test_id: str, session: Optional[Session]) -> Optional[Record]:
        if session is None:
            return None
        run = session.test_results.get(test_id)
        if run is None and session.last_test_results is not None and session.last_test_results.id == test_id:
            run = session.last_test_results
        if run is None:
            return None
        record = run.to_record()
        # Session-only runs are written through so they outlive the session
        if self.datastore.fetch_test_run(test_id) is None:
            self.datastore.save_test_run(test_id, record)
        return record

    def _by_language(self, language: str, session: Optional[Session]) -> Optional[Record]:
        candidates: Dict[str, Record] = {}
        if session is not None:
            for run in session.test_results.values():
                if run.language == language:
                    candidates[run.id] = run.to_record()
        for stored_id in self.datastore.list_test_runs():
            if stored_id in candidates:
                continue
            record = self.datastore.fetch_test_run(stored_id)
            if record and record.get("language") == language:
                candidates[stored_id] = record
        if not candidates:
            return None
        return candidates[max(candidates)]

    def _latest_stored(self) -> Optional[Record]:
        for stored_id in reversed(self.datastore.list_test_runs()):
            record = self.datastore.fetch_test_run(stored_id)
            if record:
                return record
        return None

    def get_report(self, test_id: str, session: Optional[Session] = None) -> Record:
        """
        Find a test run by id, falling back to language and then to the newest run.

        Raises:
            NotFoundError: When every fallback is exhausted.
        """
        record = self._from_session(test_id, session)
        if record is None:
            record = self.datastore.fetch_test_run(test_id)
        if record is None:
            record = self._by_language(test_id, session)
            if record is not None:
                self.logger.info(f"[ReportService] '{test_id}' resolved as a language code")
        if record is None:
            record = self._latest_stored()
            if record is not None:
                self.logger.info(f"[ReportService] '{test_id}' not found, using most recent run {record.get('id')}")
        if record is None:
            raise NotFoundError(f"Test report with ID {test_id} not found")
        return record

    def list_reports(self, session: Optional[Session] = None) -> List[Dict[str, Any]]:
        """Summaries of the session's runs, or of the stored runs when the session has none."""
        if session is not None and session.test_results:
            return [summarize(run_id, run.to_record()) for run_id, run in session.test_results.items()]

        summaries = []
        for stored_id in self.datastore.list_test_runs():
            record = self.datastore.fetch_test_run(stored_id)
            if record:
                summaries.append(summarize(stored_id, record))
        if not summaries:
            raise NotFoundError("No test results found in session or storage")
        return summaries

    @staticmethod
    def session_log(session: Session) -> Dict[str, Any]:
        info = session.public_info()
        return {
            "session_id": session.session_id,
            "created_at": info["createdAt"],
            "last_activity": info["lastActivity"],
            "organization": (session.org_info or {}).get("name") or "Unknown",
            "selected_flow": session.selected_flow,
            "test_runs": [
                {
                    "test_id": run_id,
                    "timestamp": run.timestamp,
                    "language": run.language,
                    "summary": run.summary.model_dump(),
                }
                for run_id, run in session.test_results.items()
            ],
        }
