"""
Bot flow routes: listing, details and NLU configuration.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request

from dependencies import get_config, get_platform_client, require_session, resolve_region
from intent_core.config import Config
from intent_core.exceptions import RequestValidationFailed
from intent_core.platform import PlatformClient
from intent_core.sessions import Session

flow_router = APIRouter(prefix="/flows", tags=["Flows"])


def _require_flow_id(flow_id: Optional[str]) -> str:
    if not flow_id:
        raise RequestValidationFailed("Flow ID is required")
    return flow_id


@flow_router.get("/list")
async def list_flows(
    request: Request,
    session: Session = Depends(require_session),
    client: PlatformClient = Depends(get_platform_client),
    config: Config = Depends(get_config),
):
    region = resolve_region(request, {}, session, config)
    listing = await client.list_flows(region, session.token)
    payload = {"success": True, "data": listing.flows}
    if listing.flow_type == "legacy":
        payload["flowType"] = "legacy"
    return payload


@flow_router.get("/details")
async def get_flow_details(
    request: Request,
    flowId: Optional[str] = None,
    flowType: Optional[str] = None,
    session: Session = Depends(require_session),
    client: PlatformClient = Depends(get_platform_client),
    config: Config = Depends(get_config),
):
    """Flow metadata plus the intents, entities and languages of its NLU model."""
    flow_id = _require_flow_id(flowId)
    region = resolve_region(request, {}, session, config)
    details = await client.get_flow_details(flow_id, region, session.token)
    session.selected_flow = {"id": flow_id, "name": details.get("name"), "type": flowType or details.get("type")}
    return {"success": True, "data": details}


@flow_router.get("/configuration")
async def get_flow_configuration(
    request: Request,
    flowId: Optional[str] = None,
    session: Session = Depends(require_session),
    client: PlatformClient = Depends(get_platform_client),
    config: Config = Depends(get_config),
):
    flow_id = _require_flow_id(flowId)
    region = resolve_region(request, {}, session, config)
    data = await client.get_flow_configuration(flow_id, region, session.token)
    return {"success": True, "data": data}
