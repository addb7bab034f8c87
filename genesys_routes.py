"""
NLU testing routes: single-utterance prediction and batch tests.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from dependencies import get_batch_runner, get_config, get_platform_client, read_json_body, require_session, resolve_region
from intent_core.batch.schemas import BatchTestRequest
from intent_core.batch.service import BatchTestRunner
from intent_core.config import Config
from intent_core.exceptions import RequestValidationFailed
from intent_core.platform import PlatformClient
from intent_core.sessions import Session

genesys_router = APIRouter(prefix="/genesys", tags=["NLU Testing"])


@genesys_router.post("/test-utterance")
async def test_utterance(
    request: Request,
    body: Dict[str, Any] = Depends(read_json_body),
    session: Session = Depends(require_session),
    client: PlatformClient = Depends(get_platform_client),
    config: Config = Depends(get_config),
):
    utterance = body.get("utterance")
    language = body.get("language")
    flow_id = body.get("flowId")
    if not utterance or not language or not flow_id:
        raise RequestValidationFailed("Utterance, language, and flowId are required")

    region = resolve_region(request, body, session, config)
    result = await client.predict(flow_id, body.get("flowType"), utterance, language, region, session.token)
    return {"success": True, "data": result}


@genesys_router.post("/batch-test")
async def batch_test(
    request: Request,
    body: Dict[str, Any] = Depends(read_json_body),
    session: Session = Depends(require_session),
    runner: BatchTestRunner = Depends(get_batch_runner),
    config: Config = Depends(get_config),
):
    """Run every utterance against the flow's NLU model and store the TestRun."""
    batch_request = BatchTestRequest.from_payload(body)
    region = resolve_region(request, body, session, config)
    run = await runner.run_batch_test(batch_request, region, session.token, session=session)
    record = run.to_record()
    return {
        "success": True,
        "testId": run.id,
        "results": record["results"],
        "summary": record["summary"],
    }
