"""
User routes: platform user/org details and session info.
"""
from fastapi import APIRouter, Depends, Request

from dependencies import get_platform_client, require_session
from intent_core.platform import PlatformClient
from intent_core.sessions import Session

user_router = APIRouter(prefix="/user", tags=["User"])


@user_router.get("/org")
async def get_org(
    request: Request,
    session: Session = Depends(require_session),
    client: PlatformClient = Depends(get_platform_client),
):
    """Fetch the current user from the platform and cache it on the session."""
    region = request.query_params.get("region") or session.region
    session.region = region
    user = await client.get_current_user(region, session.token)
    session.org_info = user
    return {"success": True, "data": user}


@user_router.get("/session")
async def get_session_info(session: Session = Depends(require_session)):
    return {"success": True, "data": session.public_info()}
