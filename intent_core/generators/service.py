"""
'generators/service.py': GenerationService handles text generation across providers.
Any OpenAI-compatible chat endpoint (Groq by default) is driven through LangChain.
"""
from typing import Dict, List, Optional
from logging import Logger

import openai
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..exceptions import LLMConfigurationError, LLMResponseError

TRANSIENT_ERRORS = (openai.APIConnectionError, openai.APITimeoutError)


class GenerationConfig(BaseModel):
    api_url: Optional[str] = None
    api_key: Optional[str] = None
    model_id: Optional[str] = None
    llm_config: Dict = {
        "temperature": 0.7,
        "max_tokens": 4000,
    }


class GenerationService:
    def __init__(self, logger: Logger):
        self.logger = logger
        self.configs: Dict[str, GenerationConfig] = {}

    def set_config(self, provider: str, config: GenerationConfig):
        self.configs[provider] = config

    def get_config(self, provider: str) -> GenerationConfig:
        cfg = self.configs.get(provider)
        if cfg is None or not cfg.api_key:
            raise LLMConfigurationError("LLM API key is not configured")
        return cfg

    def _build_llm(self, cfg: GenerationConfig, model: Optional[str], max_tokens: Optional[int], json_mode: bool):
        llm = ChatOpenAI(
            model=model or cfg.model_id,
            temperature=cfg.llm_config.get("temperature", 0.7),
            max_tokens=max_tokens or cfg.llm_config.get("max_tokens", 4000),
            api_key=cfg.api_key,
            base_url=cfg.api_url,
            max_retries=0,
        )
        if json_mode:
            return llm.bind(response_format={"type": "json_object"})
        return llm

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _invoke(self, llm, messages: List) -> str:
        resp = await llm.ainvoke(messages)
        return (resp.content or "").strip()

    async def generate(
        self,
        provider: str,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> str:
        """
        Run one chat completion and return the text content.

        Raises:
            LLMConfigurationError: No configuration or API key for `provider`.
            LLMResponseError: The provider failed; carries its HTTP status when known.
        """
        cfg = self.get_config(provider)

        lc_messages = []
        for m in messages:
            role = m.get("role")
            content = m.get("content", "")
            if role == "system":
                lc_messages.append(SystemMessage(content=content))
            elif role == "user":
                lc_messages.append(HumanMessage(content=content))

        llm = self._build_llm(cfg, model, max_tokens, json_mode)
        try:
            return await self._invoke(llm, lc_messages)
        except openai.APIStatusError as e:
            self.logger.error(f"[GenerationService] {provider} returned HTTP {e.status_code}: {e.message}")
            raise LLMResponseError("LLM request failed", status_code=e.status_code, error=e.body, cause=e) from e
        except openai.APIError as e:
            self.logger.error(f"[GenerationService] {provider} request failed: {e}")
            raise LLMResponseError("LLM request failed", error=str(e), cause=e) from e
