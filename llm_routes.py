"""
LLM routes: test utterance and bot description generation.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends

from dependencies import get_utterance_generator, read_json_body, require_session
from intent_core.exceptions import RequestValidationFailed
from intent_core.generators import UtteranceGenerator
from intent_core.sessions import Session

llm_router = APIRouter(prefix="/llm", tags=["LLM"])


def _require_intents_and_language(body: Dict[str, Any]):
    intents = body.get("intents")
    language = body.get("language")
    if not intents or not isinstance(intents, list) or not language:
        raise RequestValidationFailed("Intents and language are required")
    return intents, language


@llm_router.post("/generate-tests")
async def generate_tests(
    body: Dict[str, Any] = Depends(read_json_body),
    session: Session = Depends(require_session),
    generator: UtteranceGenerator = Depends(get_utterance_generator),
):
    intents, language = _require_intents_and_language(body)
    utterances = await generator.generate(intents, language)
    session.remember_utterances(language, utterances)
    return {"success": True, "data": [u.model_dump() for u in utterances]}


@llm_router.post("/generate-more-tests")
async def generate_more_tests(
    body: Dict[str, Any] = Depends(read_json_body),
    session: Session = Depends(require_session),
    generator: UtteranceGenerator = Depends(get_utterance_generator),
):
    intents, language = _require_intents_and_language(body)
    existing = body.get("existingUtterances")
    if not isinstance(existing, list) or not existing:
        raise RequestValidationFailed("Existing utterances are required and must be a non-empty array")

    utterances = await generator.generate_more(intents, language, [u for u in existing if isinstance(u, dict)])
    return {"success": True, "data": [u.model_dump() for u in utterances]}


@llm_router.post("/generate-description")
async def generate_description(
    body: Dict[str, Any] = Depends(read_json_body),
    session: Session = Depends(require_session),
    generator: UtteranceGenerator = Depends(get_utterance_generator),
):
    intents = body.get("intents")
    if not isinstance(intents, list):
        raise RequestValidationFailed("Intents array is required")

    entities = body.get("entities") if isinstance(body.get("entities"), list) else None
    description = await generator.generate_description(intents, entities)
    return {"success": True, "description": description}
