"""
'generators/utils.py': Parsing and repair of LLM output.
"""
import json
import logging
import re
from typing import Any, List

from ..batch.schemas import Utterance
from ..exceptions import LLMResponseError

logger = logging.getLogger(__name__)

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL)

MISSING_TEXT = "Missing text"
UNKNOWN_INTENT = "unknown"


def parse_json_content(content: str) -> Any:
    """
    Decode the model's JSON answer. Malformed JSON is terminal for the call.

    Raises:
        LLMResponseError: If the content is not valid JSON.
    """
    try:
        return json.loads(content)
    except (TypeError, ValueError) as e:
        logger.error(f"[generators] Malformed JSON from model: {str(content)[:200]!r}")
        raise LLMResponseError("Failed to parse LLM response", error=str(e), cause=e) from e


def normalize_utterances(parsed: Any) -> List[Utterance]:
    """
    Repair the model's output into a list of Utterances.

    A bare top-level array is wrapped. Items missing `text` or `expected_intent`
    borrow `utterance`/`intent`, else get a placeholder; nothing is dropped.

    Raises:
        LLMResponseError: If the output holds no utterance list at all.
    """
    if isinstance(parsed, list):
        items = parsed
    elif isinstance(parsed, dict) and isinstance(parsed.get("utterances"), list):
        items = parsed["utterances"]
    else:
        raise LLMResponseError("Failed to parse LLM response", error="Invalid response format from LLM")

    utterances = []
    for item in items:
        if not isinstance(item, dict):
            item = {"text": item} if isinstance(item, str) else {}
        text = item.get("text") or item.get("utterance") or MISSING_TEXT
        intent = item.get("expected_intent") or item.get("intent") or UNKNOWN_INTENT
        slots = item.get("expected_slots") or item.get("slots") or {}
        if not item.get("text") or not item.get("expected_intent"):
            logger.warning(f"[generators] Repaired incomplete utterance: {item}")
        utterances.append(Utterance(text=str(text), expected_intent=str(intent), expected_slots=slots))
    return utterances


def strip_thinking(text: str) -> str:
    """Remove <think>...</think> reasoning blocks some models emit."""
    return _THINK_BLOCK.sub("", text or "").strip()
