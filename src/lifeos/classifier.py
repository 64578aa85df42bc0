"""Input routing and model dispatch.

Every submission is either captured (stored as a new memory) or treated as a
retrieval query answered from prior memories. Routing is a plain keyword
match; everything else is delegated to the engine.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

from lifeos.models import CATEGORIES, DEFAULT_CATEGORY, Memory

if TYPE_CHECKING:
    from lifeos.config import EngineConfig
    from lifeos.engines.base import Engine

logger = logging.getLogger(__name__)

RETRIEVAL_KEYWORDS: tuple[str, ...] = (
    "remember when",
    "what did i say",
    "find my thoughts",
    "show patterns",
    "summarize my life",
    "what have i been consistent about",
    "what am i becoming",
    "search",
)

SYSTEM_PROMPT = """\
You are LIFE OS, a private cognitive operating system.
Your job is to capture, structure and retrieve the user's life data.

- Treat input as a memory by default: analyze and categorize it, and return it in the requested JSON format.
- If the input asks to retrieve something (e.g. "remember when", "what did I say about"), answer from the provided context.
- Be concise, objective and dense with insight.
"""

RETRIEVAL_INSTRUCTION = (
    "\nRespond only as a retrieval engine. "
    "Surface original phrasing, context, and evolution of thought."
)

CAPTURE_INSTRUCTION = "\nExtract the intent and facts. Categorize the input."

CAPTURE_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "category": {"type": "string", "enum": list(CATEGORIES)},
        "intent": {"type": "string"},
        "facts": {"type": "array", "items": {"type": "string"}},
        "emotions": {"type": "array", "items": {"type": "string"}},
        "importance": {"type": "number"},
        "tags": {"type": "array", "items": {"type": "string"}},
        "lifePhase": {"type": "string"},
    },
    "required": ["category", "intent"],
}

FALLBACK_INTENT = "General reflection"


def is_retrieval(text: str) -> bool:
    """True if the input contains any retrieval trigger phrase, ignoring case."""
    lowered = text.lower()
    return any(kw in lowered for kw in RETRIEVAL_KEYWORDS)


def input_mode(text: str) -> str:
    """Loose hint shown while typing; routing itself uses `is_retrieval`."""
    lowered = text.lower()
    if "remember" in lowered or "what" in lowered:
        return "RETRIEVAL"
    return "PASSIVE CAPTURE"


def build_retrieval_context(memories: list[Memory], window: int = 50) -> str:
    """Format up to `window` most recent memories, oldest first."""
    recent = sorted(memories, key=lambda m: m.timestamp)[-window:] if window > 0 else []
    return "\n".join(f"[{m.timestamp}] ({m.category}): {m.content}" for m in recent)


def build_retrieval_prompt(text: str, context: str) -> str:
    return f"Context: \n{context}\n\nUser Request: {text}"


# ── Capture decoding ─────────────────────────────────────────


@dataclass
class CaptureResult:
    """Decoded capture output. `valid` is False when the fallback was used."""

    category: str
    intent: str
    facts: list[str] = field(default_factory=list)
    emotions: list[str] = field(default_factory=list)
    importance: float | None = None
    tags: list[str] = field(default_factory=list)
    life_phase: str | None = None
    valid: bool = True

    @classmethod
    def fallback(cls) -> CaptureResult:
        return cls(
            category=DEFAULT_CATEGORY,
            intent=FALLBACK_INTENT,
            facts=[],
            emotions=[],
            importance=1,
            tags=[],
            valid=False,
        )


def _string_list(value) -> list[str] | None:
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return value
    return None


def parse_capture(text: str) -> CaptureResult:
    """Decode the model's capture JSON, substituting the fallback when malformed."""
    try:
        data = json.loads(text or "{}")
    except json.JSONDecodeError:
        logger.warning("Capture output is not valid JSON, using fallback: %.80s", text)
        return CaptureResult.fallback()

    if not isinstance(data, dict):
        logger.warning("Capture output is not a JSON object, using fallback")
        return CaptureResult.fallback()

    category = data.get("category")
    intent = data.get("intent")
    if category not in CATEGORIES or not isinstance(intent, str):
        logger.warning(
            "Capture output missing required fields (category=%r), using fallback", category
        )
        return CaptureResult.fallback()

    importance = data.get("importance")
    if isinstance(importance, bool) or not isinstance(importance, (int, float)):
        importance = None
    life_phase = data.get("lifePhase")

    return CaptureResult(
        category=category,
        intent=intent,
        facts=_string_list(data.get("facts")) or [],
        emotions=_string_list(data.get("emotions")) or [],
        importance=importance,
        tags=_string_list(data.get("tags")) or [],
        life_phase=life_phase if isinstance(life_phase, str) else None,
    )


# ── Dispatch ─────────────────────────────────────────────────


@dataclass
class StorageResult:
    capture: CaptureResult
    type: str = "storage"


@dataclass
class RetrievalResult:
    text: str
    type: str = "retrieval"


DispatchResult = Union[StorageResult, RetrievalResult]


class Dispatcher:
    """Routes input to the retrieval or capture request and decodes the answer."""

    def __init__(
        self,
        engine: Engine,
        config: EngineConfig,
        context_window: int = 50,
    ) -> None:
        self.engine = engine
        self.config = config
        self.context_window = context_window

    async def process_input(self, text: str, memories: list[Memory]) -> DispatchResult:
        """Engine errors propagate to the caller."""
        if is_retrieval(text):
            return await self._retrieve(text, memories)
        return await self._capture(text)

    async def _retrieve(self, text: str, memories: list[Memory]) -> RetrievalResult:
        context = build_retrieval_context(memories, self.context_window)
        logger.info("Retrieval over %d memories", min(len(memories), self.context_window))
        response = await self.engine.send(
            build_retrieval_prompt(text, context),
            system_prompt=SYSTEM_PROMPT + RETRIEVAL_INSTRUCTION,
            model=self.config.retrieval_model,
            temperature=self.config.retrieval_temperature,
        )
        return RetrievalResult(text=response.text)

    async def _capture(self, text: str) -> StorageResult:
        response = await self.engine.send(
            text,
            system_prompt=SYSTEM_PROMPT + CAPTURE_INSTRUCTION,
            model=self.config.capture_model,
            response_schema=CAPTURE_SCHEMA,
        )
        capture = parse_capture(response.text)
        logger.info("Captured %s (valid=%s)", capture.category, capture.valid)
        return StorageResult(capture=capture)
