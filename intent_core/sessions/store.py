"""
'sessions/store.py': In-process session store with age-based expiry.
"""
import logging
import secrets
from datetime import datetime
from logging import Logger
from typing import Callable, Dict, Optional

import arrow

from ..utils import mask_token, strip_bearer
from .schemas import Session

SESSION_TTL_HOURS = 24


class SessionStore:
    """
    Owns every Session of the process, keyed by session id.

    Concurrent mutation of one session is last-write-wins; there is no locking.
    """

    def __init__(
        self,
        ttl_hours: float = SESSION_TTL_HOURS,
        logger: Optional[Logger] = None,
        clock: Callable[[], datetime] = lambda: arrow.utcnow().datetime,
    ):
        self.ttl_seconds = ttl_hours * 3600
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def _new_id(self) -> str:
        return secrets.token_urlsafe(16)

    def create(self, token: str, region: str) -> str:
        """Store a new session for `token` and return its id."""
        session_id = self._new_id()
        now = self.clock()
        self._sessions[session_id] = Session(
            session_id=session_id,
            token=strip_bearer(token),
            region=region,
            created_at=now,
            last_activity=now,
        )
        self.logger.info(f"[SessionStore] Created session {session_id[:8]}... for token {mask_token(token)} in {region}")
        return session_id

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def touch(self, session_id: str) -> None:
        session = self._sessions.get(session_id)
        if session:
            session.last_activity = self.clock()

    def is_expired(self, session: Session) -> bool:
        return session.age_seconds(self.clock()) > self.ttl_seconds

    def expire(self, session_id: str) -> bool:
        """Remove the session if it outlived the TTL. Returns True when removed."""
        session = self._sessions.get(session_id)
        if session is None or not self.is_expired(session):
            return False
        del self._sessions[session_id]
        self.logger.info(f"[SessionStore] Session {session_id[:8]}... expired")
        return True

    def purge_expired(self) -> int:
        expired = [session_id for session_id, session in self._sessions.items() if self.is_expired(session)]
        for session_id in expired:
            self._sessions.pop(session_id, None)
        if expired:
            self.logger.info(f"[SessionStore] Purged {len(expired)} expired session(s)")
        return len(expired)
