from __future__ import annotations

import json
import logging
import time
from typing import Any

from openai import OpenAI

from resume_ranker.llm.config import LLMConfig
from resume_ranker.llm.types import ChatMessage

logger = logging.getLogger(__name__)


class OpenAIJsonClient:
    """Chat completion client that only ever returns a parsed JSON object or None.

    Every failure mode (network, timeout, empty body, malformed JSON, non-object
    payload) is logged and reported as None so callers can fall back to
    deterministic logic.
    """

    def __init__(self, config: LLMConfig):
        if not config.is_configured:
            raise RuntimeError("OPENAI_API_KEY is missing or LLM_ENABLED is off")
        self._config = config
        self._client: OpenAI | None = None

    @property
    def model(self) -> str:
        return self._config.model

    def _openai(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(
                api_key=(self._config.api_key or "").strip(),
                base_url=self._config.base_url,
                timeout=self._config.timeout_s,
                max_retries=self._config.max_retries,
            )
        return self._client

    def complete_json(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        max_output_tokens: int = 900,
        purpose: str = "unknown",
    ) -> dict[str, Any] | None:
        started = time.perf_counter()
        messages = [
            ChatMessage(role="system", content=system_prompt),
            ChatMessage(role="user", content=user_prompt),
        ]
        try:
            response = self._openai().chat.completions.create(
                model=self._config.model,
                messages=[{"role": m.role, "content": m.content} for m in messages],
                temperature=self._config.temperature,
                response_format={"type": "json_object"},
                max_tokens=max_output_tokens,
            )
            content = response.choices[0].message.content if response.choices else ""
            if not content:
                self._log_run(purpose, "empty", started)
                return None
            parsed = json.loads(content)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "llm_json_failed purpose=%s model=%s prompt_len=%s: %s",
                purpose,
                self._config.model,
                len(user_prompt),
                exc,
            )
            self._log_run(purpose, "error", started)
            return None

        if not isinstance(parsed, dict):
            self._log_run(purpose, "invalid_schema", started)
            return None
        self._log_run(purpose, "success", started)
        return parsed

    def _log_run(self, purpose: str, status: str, started: float) -> None:
        logger.info(
            "llm_run purpose=%s model=%s status=%s latency_ms=%s",
            purpose,
            self._config.model,
            status,
            int((time.perf_counter() - started) * 1000),
        )


def build_llm_client(config: LLMConfig) -> OpenAIJsonClient | None:
    if not config.is_configured:
        logger.info("llm_client_skipped reason=llm_disabled")
        return None
    return OpenAIJsonClient(config)
