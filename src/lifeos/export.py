"""Archive export: one markdown card per memory, metadata in YAML frontmatter.

Layout:
    ~/.lifeos/archive/
    └── 2026-02-18-Decision-1771412345678.md
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

import frontmatter

from lifeos.models import Memory

logger = logging.getLogger(__name__)


def _slugify(name: str) -> str:
    """Minimal slug: strip illegal chars, spaces to hyphens."""
    slug = re.sub(r'[<>:"/\\|?*\n\r\t]', "", name)
    slug = slug.strip().replace(" ", "-")
    return slug or "unnamed"


def card_filename(memory: Memory) -> str:
    return f"{memory.timestamp[:10]}-{_slugify(memory.category)}-{_slugify(memory.id)}.md"


def render_card(memory: Memory) -> str:
    """Render a memory as markdown with frontmatter. None-valued fields are omitted."""
    meta = memory.metadata
    fields = {
        "id": memory.id,
        "category": memory.category,
        "timestamp": memory.timestamp,
        "intent": meta.intent,
        "importance": meta.importance,
        "tags": meta.tags,
        "emotions": meta.emotions,
        "life_phase": memory.inferred_life_phase,
    }
    body = [memory.content]
    if meta.facts:
        body.append("")
        body.append("## Extracted Facts")
        body.extend(f"- {fact}" for fact in meta.facts)

    post = frontmatter.Post(
        "\n".join(body),
        **{k: v for k, v in fields.items() if v is not None},
    )
    return frontmatter.dumps(post) + "\n"


def export_memories(memories: list[Memory], directory: Path) -> list[Path]:
    """Write every memory to `directory`, overwriting earlier exports."""
    directory.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for memory in memories:
        path = directory / card_filename(memory)
        path.write_text(render_card(memory), encoding="utf-8")
        written.append(path)
    logger.info("Exported %d memories to %s", len(written), directory)
    return written

