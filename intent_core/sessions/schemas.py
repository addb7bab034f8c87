from datetime import datetime
from typing import Any, Dict, List, Optional

import arrow
from pydantic import BaseModel, Field

from ..batch.schemas import TestRun, Utterance


def _utcnow() -> datetime:
    return arrow.utcnow().datetime


class Session(BaseModel):
    """One authenticated browser session. Lives in memory only."""

    session_id: str
    token: str
    region: str
    created_at: datetime = Field(default_factory=_utcnow)
    last_activity: datetime = Field(default_factory=_utcnow)
    org_info: Optional[Dict[str, Any]] = None
    test_results: Dict[str, TestRun] = Field(default_factory=dict)
    last_test_results: Optional[TestRun] = None
    test_data: Dict[str, List[Utterance]] = Field(default_factory=dict)
    selected_flow: Optional[Dict[str, Any]] = None

    def age_seconds(self, now: Optional[datetime] = None) -> float:
        return ((now or _utcnow()) - self.created_at).total_seconds()

    def record_test_run(self, run: TestRun) -> None:
        self.test_results[run.id] = run
        self.last_test_results = run

    def remember_utterances(self, language: str, utterances: List[Utterance]) -> None:
        self.test_data[language] = list(utterances)

    def public_info(self) -> Dict[str, Any]:
        """Session details safe to hand to the browser (no token)."""
        return {
            "createdAt": arrow.get(self.created_at).isoformat(),
            "lastActivity": arrow.get(self.last_activity).isoformat(),
            "orgInfo": self.org_info,
            "region": self.region,
            "hasValidToken": bool(self.token),
        }
