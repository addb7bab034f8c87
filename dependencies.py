"""
Shared FastAPI dependencies: service lookup and session resolution.
"""
from typing import Any, Dict, Optional

from fastapi import Depends, Request, Response

from intent_core.batch.service import BatchTestRunner
from intent_core.config import Config
from intent_core.exceptions import AuthenticationError
from intent_core.exporters import ResultsExporter
from intent_core.generators import UtteranceGenerator
from intent_core.platform import PlatformClient
from intent_core.reports import ReportService
from intent_core.sessions import AuthCandidates, ResolvedSession, Session, SessionResolver, SessionStore
from intent_core.utils import bearer_credentials

SESSION_COOKIE = "sessionId"
SESSION_HEADER = "x-session-id"


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_resolver(request: Request) -> SessionResolver:
    return request.app.state.session_resolver


def get_platform_client(request: Request) -> PlatformClient:
    return request.app.state.platform_client


def get_batch_runner(request: Request) -> BatchTestRunner:
    return request.app.state.batch_runner


def get_report_service(request: Request) -> ReportService:
    return request.app.state.report_service


def get_exporter(request: Request) -> ResultsExporter:
    return request.app.state.exporter


def get_utterance_generator(request: Request) -> UtteranceGenerator:
    return request.app.state.utterance_generator


async def read_json_body(request: Request) -> Dict[str, Any]:
    """Request body as a dict; empty for GET, non-JSON or non-object bodies."""
    if request.method in ("GET", "HEAD"):
        return {}
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def extract_candidates(request: Request, body: Dict[str, Any]) -> AuthCandidates:
    """Pick session id, token and region from the request by priority."""
    session_id = (
        request.cookies.get(SESSION_COOKIE)
        or request.headers.get(SESSION_HEADER)
        or request.query_params.get("sessionId")
    )
    token = (
        bearer_credentials(request.headers.get("authorization"))
        or body.get("token")
        or request.query_params.get("token")
    )
    region = request.query_params.get("region") or body.get("region")
    return AuthCandidates(
        session_id=session_id,
        token=token if isinstance(token, str) else None,
        region=region if isinstance(region, str) else None,
    )


def set_session_cookie(response: Response, session_id: str, config: Config) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session_id,
        httponly=True,
        secure=config.cookie_secure,
        max_age=int(config.session_ttl_hours * 3600),
    )


async def get_auth_context(
    request: Request,
    response: Response,
    body: Dict[str, Any] = Depends(read_json_body),
    resolver: SessionResolver = Depends(get_resolver),
    config: Config = Depends(get_config),
) -> Optional[ResolvedSession]:
    resolved = await resolver.resolve(extract_candidates(request, body))
    if resolved is not None and resolved.created:
        set_session_cookie(response, resolved.session.session_id, config)
    return resolved


async def require_auth(auth: Optional[ResolvedSession] = Depends(get_auth_context)) -> ResolvedSession:
    if auth is None:
        raise AuthenticationError("Authentication required. Please provide a valid token.")
    return auth


async def require_session(auth: ResolvedSession = Depends(require_auth)) -> Session:
    return auth.session


def resolve_region(request: Request, body: Dict[str, Any], session: Optional[Session], config: Config) -> str:
    """query > body > session > process-wide default."""
    return (
        request.query_params.get("region")
        or body.get("region")
        or (session.region if session else None)
        or config.default_region
    )
