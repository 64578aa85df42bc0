"""Entry point: python -m lifeos [chat|export [DIR]]

- No args / "chat": Interactive journaling REPL
- "export":         Write every stored memory as a markdown card and exit
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

from lifeos.config import LifeOSConfig, load_config


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_journal(config: LifeOSConfig):
    """Wire storage, engine and dispatcher into a loaded Journal."""
    from lifeos.classifier import Dispatcher
    from lifeos.core import Journal
    from lifeos.engines import build_engine
    from lifeos.storage import FileStorage, RecordStore

    engine = build_engine(config.engine)
    journal = Journal(
        store=RecordStore(FileStorage(config.storage_dir)),
        dispatcher=Dispatcher(engine, config.engine, context_window=config.context_window),
        history_depth=config.history_depth,
    )
    journal.load()
    return journal


def _run_cli() -> None:
    """Interactive REPL mode."""
    config = load_config()
    _setup_logging(config.log_level)

    from lifeos.cli import CLIConnector

    journal = build_journal(config)
    cli = CLIConnector(journal, export_dir=config.export_dir, color=sys.stdout.isatty())

    try:
        asyncio.run(cli.start())
    except KeyboardInterrupt:
        pass


def _run_export(target: str | None) -> None:
    config = load_config()
    _setup_logging(config.log_level)

    from lifeos.export import export_memories

    journal = build_journal(config)
    directory = Path(target).expanduser() if target else config.export_dir
    written = export_memories(journal.memories, directory)
    print(f"Exported {len(written)} memories to {directory}")


def main() -> None:
    cmd = sys.argv[1] if len(sys.argv) > 1 else "chat"

    if cmd in ("chat", "repl"):
        _run_cli()
    elif cmd == "export":
        _run_export(sys.argv[2] if len(sys.argv) > 2 else None)
    else:
        print("Usage: python -m lifeos [chat|export [DIR]]")
        print("  chat    Interactive journaling REPL (default)")
        print("  export  Write memories as markdown cards")
        sys.exit(1)


if __name__ == "__main__":
    main()
