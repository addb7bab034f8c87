from .resolver import (
    AuthCandidates,
    PassthroughTokenValidator,
    PlatformTokenValidator,
    ResolvedSession,
    SessionResolver,
    TokenValidator,
)
from .schemas import Session
from .store import SessionStore

__all__ = [
    "AuthCandidates",
    "PassthroughTokenValidator",
    "PlatformTokenValidator",
    "ResolvedSession",
    "Session",
    "SessionResolver",
    "SessionStore",
    "TokenValidator",
]
