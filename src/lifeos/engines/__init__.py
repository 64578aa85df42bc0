"""Model engine backends.

Each engine implements the `Engine` protocol from `lifeos.engines.base`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lifeos.engines.base import AgentResponse, Engine, EngineError

if TYPE_CHECKING:
    from lifeos.config import EngineConfig

__all__ = ["AgentResponse", "Engine", "EngineError", "build_engine"]


def build_engine(config: EngineConfig) -> Engine:
    """Instantiate the engine named in config."""
    if config.name == "anthropic_api":
        from lifeos.engines.anthropic_api import AnthropicAPIEngine

        return AnthropicAPIEngine(
            model=config.retrieval_model,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
            api_key=config.api_key,
        )
    raise ValueError(f"Unknown engine: {config.name}")
