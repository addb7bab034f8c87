"""
'generators/utterance_generator.py': Test utterance and bot description generation.
"""
import logging
from logging import Logger
from typing import Any, Dict, List, Optional

from ..batch.schemas import Utterance
from .prompts import build_description_prompt, build_generation_prompt, build_more_prompt
from .service import GenerationService
from .utils import normalize_utterances, parse_json_content, strip_thinking

DESCRIPTION_MAX_TOKENS = 500


class UtteranceGenerator:
    def __init__(self, generation_service: GenerationService, provider: str = "groq", logger: Optional[Logger] = None):
        self.generation_service = generation_service
        self.provider = provider
        self.logger = logger or logging.getLogger(__name__)

    async def _complete_utterances(self, prompt: str) -> List[Utterance]:
        content = await self.generation_service.generate(
            provider=self.provider,
            messages=[{"role": "user", "content": prompt}],
            json_mode=True,
        )
        return normalize_utterances(parse_json_content(content))

    async def generate(self, intents: List[Dict[str, Any]], language: str) -> List[Utterance]:
        self.logger.info(f"[UtteranceGenerator] Generating utterances for {len(intents)} intent(s) in {language}")
        utterances = await self._complete_utterances(build_generation_prompt(intents, language))
        self.logger.info(f"[UtteranceGenerator] Model returned {len(utterances)} utterance(s)")
        return utterances

    async def generate_more(self, intents: List[Dict[str, Any]], language: str, existing_utterances: List[Dict[str, Any]]) -> List[Utterance]:
        """Additional utterances; the prompt asks for no duplicates but none are filtered here."""
        self.logger.info(
            f"[UtteranceGenerator] Generating more utterances in {language}, {len(existing_utterances)} existing"
        )
        return await self._complete_utterances(build_more_prompt(intents, language, existing_utterances))

    async def generate_description(self, intents: List[Dict[str, Any]], entities: Optional[List[Dict[str, Any]]] = None) -> str:
        content = await self.generation_service.generate(
            provider=self.provider,
            messages=[{"role": "user", "content": build_description_prompt(intents, entities)}],
            max_tokens=DESCRIPTION_MAX_TOKENS,
        )
        return strip_thinking(content)
