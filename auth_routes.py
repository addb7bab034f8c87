"""
Authentication routes: health check and bearer-token relay.
"""
from typing import Any, Dict

import arrow
from fastapi import APIRouter, Depends, Response

from dependencies import get_config, get_resolver, read_json_body, set_session_cookie
from intent_core.config import Config
from intent_core.exceptions import AuthenticationError, RequestValidationFailed
from intent_core.sessions import SessionResolver
from intent_core.utils import strip_bearer

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


@auth_router.get("/health")
async def health():
    return {
        "success": True,
        "message": "Auth service is healthy",
        "timestamp": arrow.utcnow().isoformat(),
    }


@auth_router.post("/relay-token")
async def relay_token(
    response: Response,
    body: Dict[str, Any] = Depends(read_json_body),
    resolver: SessionResolver = Depends(get_resolver),
    config: Config = Depends(get_config),
):
    """Store the browser's platform token in a new server session."""
    token = body.get("token")
    token = strip_bearer(token) if isinstance(token, str) else None
    if not token:
        raise RequestValidationFailed("No token provided")

    region = body.get("region") or config.default_region
    if not await resolver.validator.validate(token, region):
        raise AuthenticationError("Invalid token - authentication failed")

    session_id = resolver.store.create(token, region)
    set_session_cookie(response, session_id, config)
    return {
        "success": True,
        "message": "Token received and stored successfully",
        "sessionId": session_id,
    }
