"""Anthropic API engine: single-turn requests, optional forced-tool schema."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass

import anthropic

from lifeos.engines.base import AgentResponse, EngineError

logger = logging.getLogger(__name__)

STRUCTURED_TOOL_NAME = "record_memory"


@dataclass
class AnthropicAPIEngine:
    """Direct Anthropic API via the `anthropic` SDK.

    Structured requests are sent as one forced tool call whose input schema is
    the requested response schema; the tool input comes back as JSON text.
    """

    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 4096
    timeout: int = 120
    api_key: str | None = None

    def __post_init__(self) -> None:
        # No retries: a failed call abandons the submission.
        self._client = anthropic.Anthropic(
            api_key=self.api_key,
            timeout=self.timeout,
            max_retries=0,
        )

    @property
    def name(self) -> str:
        return "anthropic_api"

    async def send(
        self,
        message: str,
        *,
        system_prompt: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        response_schema: dict | None = None,
    ) -> AgentResponse:
        kwargs: dict = {
            "model": model or self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": message}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt
        if temperature is not None:
            kwargs["temperature"] = temperature
        if response_schema is not None:
            kwargs["tools"] = [
                {
                    "name": STRUCTURED_TOOL_NAME,
                    "description": "Record the analyzed journal entry.",
                    "input_schema": response_schema,
                }
            ]
            kwargs["tool_choice"] = {"type": "tool", "name": STRUCTURED_TOOL_NAME}

        try:
            response = await asyncio.to_thread(self._client.messages.create, **kwargs)
        except anthropic.APIError as e:
            logger.error("Anthropic API error: %s", e)
            raise EngineError(f"Anthropic API error: {e}") from e

        text = self._extract_text(response, structured=response_schema is not None)
        usage = getattr(response, "usage", None)
        return AgentResponse(
            text=text,
            model=response.model,
            input_tokens=usage.input_tokens if usage else None,
            output_tokens=usage.output_tokens if usage else None,
            metadata={"stop_reason": getattr(response, "stop_reason", None)},
        )

    @staticmethod
    def _extract_text(response, structured: bool) -> str:
        blocks = response.content or []
        if structured:
            for block in blocks:
                if getattr(block, "type", None) == "tool_use":
                    return json.dumps(block.input, ensure_ascii=False)
            logger.warning("Structured request returned no tool_use block")
        return "".join(getattr(b, "text", "") for b in blocks if getattr(b, "type", None) == "text")

    async def health_check(self) -> bool:
        try:
            response = await asyncio.to_thread(
                self._client.messages.create,
                model=self.model,
                max_tokens=10,
                messages=[{"role": "user", "content": "ping"}],
            )
            return bool(response.content)
        except Exception:
            return False
