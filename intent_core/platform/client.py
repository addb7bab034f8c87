"""
'platform/client.py': Outbound calls to the contact-center platform API.

Absorbs the differences between digital and legacy bot flows so that callers
see one normalized contract.
"""
import json
import logging
from logging import Logger
from typing import Any, Dict, List, Optional

import httpx

from .exceptions import PlatformAPIError, PlatformAuthError
from .schemas import DetectedIntent, DetectionResponse, FlowListing

DEFAULT_TIMEOUT = 10.0


def _payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _entities(response: httpx.Response) -> List[Dict[str, Any]]:
    data = _payload(response)
    return (data.get("entities") if isinstance(data, dict) else None) or []


def _upstream_message(payload: Any) -> str:
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return "Unknown error"


def parse_raw_nlu(raw_nlu: Any) -> Dict[str, Any]:
    """Decode the JSON string the platform embeds under `nluMetaData.rawNlu`."""
    if isinstance(raw_nlu, dict):
        return raw_nlu
    try:
        data = json.loads(raw_nlu or "{}")
    except (TypeError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _summarize_intents(intents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "name": intent.get("name"),
            "entityReferences": intent.get("entityNameReferences") or [],
            "utterances": len(intent.get("utterances") or []),
        }
        for intent in intents
    ]


def normalize_flow_configuration(flow_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Reduce a `latestConfiguration` payload to the fields the orchestrator and UI use.

    Args:
        flow_id (str): The flow the configuration belongs to.
        data (Dict[str, Any]): Raw upstream configuration.

    Returns:
        Dict[str, Any]: {flowId, nluData, domainId, domainVersionId, botFlowSettings, manifest}
    """
    nlu_meta = data.get("nluMetaData") or {}
    bot_flow_settings = data.get("botFlowSettings") or {}
    manifest = data.get("manifest") or {}
    nlu = parse_raw_nlu(nlu_meta.get("rawNlu"))

    return {
        "flowId": flow_id,
        "nluData": {
            "intents": _summarize_intents(nlu.get("intents") or []),
            "entities": [
                {"name": entity.get("name"), "type": entity.get("type")}
                for entity in nlu.get("entities") or []
            ],
            "entityTypes": [
                {"name": entity_type.get("name"), "mechanism": (entity_type.get("mechanism") or {}).get("type", "unknown")}
                for entity_type in nlu.get("entityTypes") or []
            ],
            "language": nlu.get("language") or "en-us",
        },
        "domainId": bot_flow_settings.get("nluDomainId") or nlu_meta.get("domainId"),
        "domainVersionId": bot_flow_settings.get("nluDomainVersionId") or nlu_meta.get("domainVersionId"),
        "botFlowSettings": bot_flow_settings,
        "manifest": {"nluDomain": manifest.get("nluDomain") or {}},
    }


def build_flow_details(flow_id: str, flow: Dict[str, Any], config: Dict[str, Any]) -> Dict[str, Any]:
    """Merge flow metadata with its NLU model; list-typed entities carry their enumerated values."""
    nlu_meta = config.get("nluMetaData") or {}
    bot_flow_settings = config.get("botFlowSettings") or {}
    nlu = parse_raw_nlu(nlu_meta.get("rawNlu"))
    entity_types = nlu.get("entityTypes") or []
    types_by_name = {entity_type.get("name"): entity_type for entity_type in entity_types}

    entities = []
    for entity in nlu.get("entities") or []:
        mechanism = (types_by_name.get(entity.get("type")) or {}).get("mechanism") or {}
        values: List[Any] = []
        if mechanism.get("type") == "List" and isinstance(mechanism.get("items"), list):
            values = [item.get("value") for item in mechanism["items"]]
        entities.append({"name": entity.get("name"), "type": entity.get("type"), "values": values})

    return {
        "id": flow_id,
        "name": flow.get("name"),
        "description": flow.get("description") or "No description available",
        "type": flow.get("type"),
        "intents": _summarize_intents(nlu.get("intents") or []),
        "entities": entities,
        "entityTypes": [
            {
                "name": entity_type.get("name"),
                "mechanism": (entity_type.get("mechanism") or {}).get("type", "unknown"),
                "items": [
                    {"value": item.get("value"), "synonyms": item.get("synonyms") or []}
                    for item in (entity_type.get("mechanism") or {}).get("items") or []
                ],
            }
            for entity_type in entity_types
        ],
        "language": nlu.get("language") or "en-us",
        "supportedLanguages": config.get("supportedLanguages") or [],
        "nluDomainId": bot_flow_settings.get("nluDomainId") or nlu_meta.get("domainId"),
        "nluDomainVersionId": bot_flow_settings.get("nluDomainVersionId") or nlu_meta.get("domainVersionId"),
        "botFlowSettings": bot_flow_settings,
    }


class PlatformClient:
    """
    Thin async client for the contact-center platform.

    Every call targets `https://api.<region>` with the caller's bearer token and
    carries a bounded timeout.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[Logger] = None,
    ):
        self.timeout = timeout
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def base_url(region: str) -> str:
        return f"https://api.{region}"

    async def _request(
        self,
        method: str,
        region: str,
        token: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url(region), timeout=self.timeout, transport=self.transport
            ) as client:
                return await client.request(method, path, headers=headers, params=params, json=payload)
        except httpx.RequestError as req_err:
            self.logger.error(f"[PlatformClient] {method} {path} failed: {req_err!r}")
            raise PlatformAPIError(f"Request to platform failed: {req_err}", error=str(req_err), cause=req_err) from req_err

    def _raise_for_status(self, response: httpx.Response, action: str) -> None:
        if response.status_code < 400:
            return
        payload = _payload(response)
        self.logger.error(f"[PlatformClient] Failed to {action}: HTTP {response.status_code}")
        if response.status_code in (401, 403):
            raise PlatformAuthError(
                "Authentication failed. Please log in again.",
                status_code=response.status_code,
                error=payload,
            )
        raise PlatformAPIError(
            f"Failed to {action}: {_upstream_message(payload)}",
            status_code=response.status_code,
            error=payload,
        )

    async def list_flows(self, region: str, token: str) -> FlowListing:
        """List bot flows, falling back to the legacy botflows endpoint."""
        try:
            response = await self._request("GET", region, token, "/api/v2/flows", params={"type": "bot", "pageSize": 100})
            self._raise_for_status(response, "fetch flows")
            return FlowListing(flows=_entities(response), flow_type="digital")
        except PlatformAPIError as digital_err:
            self.logger.warning(f"[PlatformClient] Digital flow listing failed, trying legacy botflows: {digital_err}")

        response = await self._request("GET", region, token, "/api/v2/architect/botflows")
        self._raise_for_status(response, "fetch flows")
        return FlowListing(flows=_entities(response), flow_type="legacy")

    async def _get_raw_configuration(self, flow_id: str, region: str, token: str) -> Dict[str, Any]:
        response = await self._request(
            "GET", region, token, f"/api/v2/flows/{flow_id}/latestConfiguration", params={"deleted": "true"}
        )
        self._raise_for_status(response, "get flow configuration")
        data = _payload(response)
        return data if isinstance(data, dict) else {}

    async def get_flow_configuration(self, flow_id: str, region: str, token: str) -> Dict[str, Any]:
        data = await self._get_raw_configuration(flow_id, region, token)
        return normalize_flow_configuration(flow_id, data)

    async def get_flow_details(self, flow_id: str, region: str, token: str) -> Dict[str, Any]:
        response = await self._request("GET", region, token, f"/api/v2/flows/{flow_id}")
        self._raise_for_status(response, "get flow details")
        flow = _payload(response)
        config = await self._get_raw_configuration(flow_id, region, token)
        return build_flow_details(flow_id, flow if isinstance(flow, dict) else {}, config)

    async def detect_intent(
        self,
        domain_id: str,
        domain_version_id: str,
        text: str,
        language: str,
        region: str,
        token: str,
    ) -> DetectionResponse:
        """
        Run NLU detection for one utterance.

        Statuses below 500 are parsed, 4xx detail lands in `error`.

        Raises:
            PlatformAPIError: On transport failure, timeout or a 5xx answer.
        """
        path = f"/api/v2/languageunderstanding/domains/{domain_id}/versions/{domain_version_id}/detect"
        body = {"input": {"text": text, "language": language.lower()}}
        response = await self._request("POST", region, token, path, payload=body)
        data = _payload(response)

        if response.status_code >= 500:
            raise PlatformAPIError(
                f"NLU detection failed with HTTP {response.status_code}",
                status_code=response.status_code,
                error=data,
            )

        if response.status_code >= 400:
            self.logger.warning(f"[PlatformClient] Detect returned HTTP {response.status_code} for '{text}'")
            return DetectionResponse(
                status_code=response.status_code,
                raw=data,
                error=f"HTTP {response.status_code}: {_upstream_message(data)}",
            )

        output = data.get("output") if isinstance(data, dict) else None
        intents = [DetectedIntent.model_validate(intent) for intent in (output or {}).get("intents") or []]
        return DetectionResponse(status_code=response.status_code, intents=intents, raw=data)

    async def predict(self, flow_id: str, flow_type: Optional[str], text: str, language: str, region: str, token: str) -> Dict[str, Any]:
        """Single-utterance prediction against a flow (digital or legacy)."""
        if flow_type == "legacy":
            path = f"/api/v2/architect/botflows/{flow_id}/predict"
        else:
            path = f"/api/v2/flows/{flow_id}/predict"
        response = await self._request(
            "POST", region, token, path, payload={"input": {"text": text, "language": language.lower()}}
        )
        self._raise_for_status(response, "test utterance")
        data = _payload(response)
        intent = (data.get("intent") if isinstance(data, dict) else None) or {}
        return {
            "utterance": text,
            "language": language,
            "recognized_intent": intent.get("name") or "none",
            "confidence": intent.get("confidence") or 0,
            "slots": (data.get("slots") if isinstance(data, dict) else None) or {},
            "raw_response": data,
        }

    async def get_current_user(self, region: str, token: str) -> Dict[str, Any]:
        response = await self._request("GET", region, token, "/api/v2/users/me")
        self._raise_for_status(response, "fetch user details")
        return _payload(response)

    async def check_token(self, region: str, token: str) -> bool:
        """Lightweight permissions call; False only when the platform rejects the token."""
        response = await self._request(
            "GET", region, token, "/api/v2/authorization/permissions", params={"pageSize": 1}
        )
        if response.status_code in (401, 403):
            return False
        self._raise_for_status(response, "validate token")
        return True
