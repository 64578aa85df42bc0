"""Terminal rendering for the timeline, archive and insights views."""

from __future__ import annotations

from collections import Counter
from datetime import datetime

from lifeos.models import ChatMessage, Memory

RESET = "\033[0m"

CATEGORY_STYLES: dict[str, str] = {
    "Thought": "\033[96m",  # sky
    "Decision": "\033[93m",  # amber
    "Goal": "\033[92m",  # emerald
    "Learning": "\033[94m",  # indigo
    "Idea": "\033[95m",  # pink
}
DEFAULT_STYLE = "\033[90m"

IDENTITY_MIN_MEMORIES = 5
BAR_WIDTH = 30


def category_style(category: str) -> str:
    return CATEGORY_STYLES.get(category, DEFAULT_STYLE)


def _parse_ts(timestamp: str) -> datetime | None:
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00")).astimezone()
    except ValueError:
        return None


def _time_label(timestamp: str) -> str:
    ts = _parse_ts(timestamp)
    return ts.strftime("%H:%M") if ts else timestamp


def _date_label(timestamp: str) -> str:
    ts = _parse_ts(timestamp)
    return ts.strftime("%Y-%m-%d") if ts else timestamp


# ── Timeline ─────────────────────────────────────────────────


def render_timeline(messages: list[ChatMessage]) -> str:
    if not messages:
        return (
            "AWAITING COGNITIVE INPUT...\n"
            "Life OS is monitoring your stream of consciousness. "
            "Just type to record a memory."
        )
    return "\n\n".join(render_message(m) for m in messages)


def render_message(msg: ChatMessage) -> str:
    stamp = _time_label(msg.timestamp)
    if msg.role == "user":
        return f"You [{stamp}]: {msg.content}"
    if msg.is_retrieval:
        return f"── COGNITIVE RETRIEVAL ──\n{msg.content}\n[{stamp}]"
    return f"LIFE OS [{stamp}]: {msg.content}"


# ── Archive ──────────────────────────────────────────────────


def render_memory_card(memory: Memory, color: bool = True) -> str:
    badge = memory.category.upper()
    if color:
        badge = f"{category_style(memory.category)}{badge}{RESET}"
    lines = [f"{badge}  {_date_label(memory.timestamp)}", memory.content]

    facts = memory.metadata.facts
    if facts:
        lines.append("Extracted Facts:")
        lines.extend(f"  • {fact}" for fact in facts)

    footer = []
    if memory.metadata.tags:
        footer.append(" ".join(f"#{tag}" for tag in memory.metadata.tags))
    if memory.inferred_life_phase:
        footer.append(f"phase: {memory.inferred_life_phase}")
    if footer:
        lines.append(" | ".join(footer))
    return "\n".join(lines)


def render_archive(memories: list[Memory], color: bool = True) -> str:
    if not memories:
        return "No memories found in the archive."
    header = f"Structured Life Storage ({len(memories)})"
    cards = [render_memory_card(m, color=color) for m in memories]
    return header + "\n\n" + "\n\n".join(cards)


# ── Insights ─────────────────────────────────────────────────


def category_distribution(memories: list[Memory]) -> list[tuple[str, int]]:
    """(category, count) pairs, most frequent first; ties keep first-seen order."""
    return Counter(m.category for m in memories).most_common()


def summary_stats(memories: list[Memory]) -> dict[str, str]:
    distribution = category_distribution(memories)
    return {
        "Deepest Focus": distribution[0][0] if distribution else "N/A",
        "Capture Velocity": f"{len(memories) / 7:.1f}/day",
        # Placeholders; no streak or entropy analytics are computed.
        "Longest Streak": "4 Days",
        "Data Entropy": "Low",
    }


def render_insights(memories: list[Memory]) -> str:
    distribution = category_distribution(memories)
    lines = ["Pattern Analysis", "", "Conceptual Distribution"]
    if distribution:
        peak = distribution[0][1]
        for category, count in distribution:
            bar = "█" * max(1, round(count / peak * BAR_WIDTH))
            lines.append(f"  {category:<12} {bar} {count}")
    else:
        lines.append("  (no data)")

    lines += ["", "Identity Evolution"]
    if len(memories) > IDENTITY_MIN_MEMORIES:
        total = len(memories)
        for category, count in distribution:
            lines.append(f"  {category:<12} {count / total:>6.1%}")
    else:
        lines.append("  INSUFFICIENT DATA FOR IDENTITY MAPPING")
        lines.append("  Record more memories to reveal patterns.")

    lines.append("")
    for label, value in summary_stats(memories).items():
        lines.append(f"  {label}: {value}")
    return "\n".join(lines)
