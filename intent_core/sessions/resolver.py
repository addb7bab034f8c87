"""
'sessions/resolver.py': Turn request credentials into an authenticated session.

Priority rules:
    session id    cookie > x-session-id header > query parameter
    bearer token  Authorization header > body `token` > query `token`
    region        query > body > process-wide default
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import Logger
from typing import Optional

from ..platform.client import PlatformClient
from ..platform.exceptions import PlatformAPIError
from ..utils import mask_token, strip_bearer
from .schemas import Session
from .store import SessionStore


@dataclass
class AuthCandidates:
    session_id: Optional[str] = None
    token: Optional[str] = None
    region: Optional[str] = None


@dataclass
class ResolvedSession:
    session: Session
    created: bool = False


class TokenValidator(ABC):
    """Decides whether a bearer token may open a new session."""

    @abstractmethod
    async def validate(self, token: str, region: str) -> bool:
        raise NotImplementedError


class PassthroughTokenValidator(TokenValidator):
    """Accepts every non-empty token. The platform rejects bad ones on first use."""

    async def validate(self, token: str, region: str) -> bool:
        return bool(token)


class PlatformTokenValidator(TokenValidator):
    """Checks the token with a lightweight permissions call on the platform."""

    def __init__(self, client: PlatformClient, logger: Optional[Logger] = None):
        self.client = client
        self.logger = logger or logging.getLogger(__name__)

    async def validate(self, token: str, region: str) -> bool:
        try:
            return await self.client.check_token(region, token)
        except PlatformAPIError as err:
            self.logger.warning(f"[PlatformTokenValidator] Could not validate token {mask_token(token)}: {err}")
            return False


class SessionResolver:
    def __init__(self, store: SessionStore, validator: TokenValidator, default_region: str, logger: Optional[Logger] = None):
        self.store = store
        self.validator = validator
        self.default_region = default_region
        self.logger = logger or logging.getLogger(__name__)

    async def resolve(self, candidates: AuthCandidates) -> Optional[ResolvedSession]:
        """
        Resolve a live session or open one for a valid token.

        Returns:
            ResolvedSession, `created` set when a new session was opened; None if unauthenticated.
        """
        if candidates.session_id:
            self.store.expire(candidates.session_id)
            session = self.store.get(candidates.session_id)
            if session:
                self.store.touch(session.session_id)
                return ResolvedSession(session=session)

        token = strip_bearer(candidates.token)
        if not token:
            return None

        region = candidates.region or self.default_region
        if not await self.validator.validate(token, region):
            self.logger.warning(f"[SessionResolver] Token {mask_token(token)} rejected")
            return None

        session_id = self.store.create(token, region)
        return ResolvedSession(session=self.store.get(session_id), created=True)
