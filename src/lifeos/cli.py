"""Interactive terminal REPL over a Journal."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from lifeos import views
from lifeos.classifier import input_mode
from lifeos.export import export_memories

if TYPE_CHECKING:
    from lifeos.core import Journal
    from lifeos.models import ChatMessage

logger = logging.getLogger(__name__)

ERASE_PROMPT = "Permanently erase all cognitive records? [y/N] "

HELP = """\
Type anything to capture a memory, or ask (e.g. "remember when...") to retrieve.
  /timeline        conversation timeline
  /archive         memory pool
  /insights        pattern analysis
  /undo, /redo     step through the last 10 states
  /status          counters and engine health
  /export [DIR]    write memories as markdown cards
  /format          erase all records
  exit             quit"""


class CLIConnector:
    """REPL connector. Reads from stdin, writes to stdout.

    Submissions run as background tasks so commands stay usable while the
    model call is outstanding; a second submission is refused until it ends.
    """

    def __init__(self, journal: Journal, export_dir: Path, color: bool = True) -> None:
        self.journal = journal
        self.export_dir = export_dir
        self.color = color
        self._running = False
        self._pending: asyncio.Task | None = None
        self._commands = {
            "/help": self._cmd_help,
            "/timeline": self._cmd_timeline,
            "/archive": self._cmd_archive,
            "/insights": self._cmd_insights,
            "/undo": self._cmd_undo,
            "/redo": self._cmd_redo,
            "/status": self._cmd_status,
            "/export": self._cmd_export,
            "/format": self._cmd_format,
        }

    @property
    def name(self) -> str:
        return "cli"

    @property
    def busy(self) -> bool:
        return self.journal.is_processing or (
            self._pending is not None and not self._pending.done()
        )

    async def start(self) -> None:
        self._running = True
        loop = asyncio.get_running_loop()

        print("LIFE OS v1.0.4 (type /help for commands, 'exit' or Ctrl+C to quit)")
        print("-" * 64)
        print(views.render_timeline(self.journal.messages))

        while self._running:
            try:
                line = await loop.run_in_executor(None, self._read_input, "\n> ")
            except (EOFError, KeyboardInterrupt):
                break

            if line is None or line.strip().lower() in ("exit", "quit"):
                break

            text = line.strip()
            if not text:
                continue
            if text.startswith("/"):
                await self.handle_command(text)
            else:
                self.submit(text)

        await self.stop()
        print("Bye!")

    def _read_input(self, prompt: str) -> str | None:
        try:
            sys.stdout.write(prompt)
            sys.stdout.flush()
            raw = sys.stdin.buffer.readline()
            if not raw:
                return None
            return raw.decode("utf-8", errors="replace").rstrip("\n")
        except EOFError:
            return None

    async def stop(self) -> None:
        self._running = False
        if self._pending is not None and not self._pending.done():
            await asyncio.wait({self._pending})

    # ── Submissions ──────────────────────────────────────────

    def submit(self, text: str) -> bool:
        """Start a submission in the background. False if one is in flight."""
        if self.busy:
            print("SYNCHRONIZING... previous entry is still processing.")
            return False
        print(f"[{input_mode(text)}]")
        self._pending = asyncio.create_task(self._run_submission(text))
        self._pending.add_done_callback(self._log_submission_failure)
        return True

    @staticmethod
    def _log_submission_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Submission failed: %s", exc, exc_info=exc)
            print(f"Entry failed: {exc}")

    async def _run_submission(self, text: str) -> None:
        result = await self.journal.submit(text)
        if result is None:
            logger.debug("Submission produced no reply")
            return
        self.reply(self.journal.messages[-1])

    def reply(self, message: ChatMessage) -> None:
        print(f"\n{views.render_message(message)}")

    # ── Commands ─────────────────────────────────────────────

    async def handle_command(self, line: str) -> None:
        cmd, _, arg = line.partition(" ")
        handler = self._commands.get(cmd.lower())
        if handler is None:
            print(f"Unknown command: {cmd} (try /help)")
            return
        try:
            await handler(arg.strip())
        except Exception as e:
            logger.exception("Command %s failed", cmd)
            print(f"{cmd} failed: {e}")

    async def _cmd_help(self, arg: str) -> None:
        print(HELP)

    async def _cmd_timeline(self, arg: str) -> None:
        print(views.render_timeline(self.journal.messages))

    async def _cmd_archive(self, arg: str) -> None:
        print(views.render_archive(self.journal.memories, color=self.color))

    async def _cmd_insights(self, arg: str) -> None:
        print(views.render_insights(self.journal.memories))

    async def _cmd_undo(self, arg: str) -> None:
        if self.journal.undo():
            print(f"Undone. MEMORIES: {len(self.journal.memories)}")
        else:
            print("Nothing to undo.")

    async def _cmd_redo(self, arg: str) -> None:
        if self.journal.redo():
            print(f"Redone. MEMORIES: {len(self.journal.memories)}")
        else:
            print("Nothing to redo.")

    async def _cmd_status(self, arg: str) -> None:
        healthy = await self.journal.engine.health_check()
        print(
            f"MEMORIES: {len(self.journal.memories)} | "
            f"undo: {len(self.journal.history)} | redo: {self.journal.history.redo_depth} | "
            f"status: {'SYNCHRONIZING' if self.busy else 'PASSIVE CAPTURE ACTIVE'} | "
            f"engine {self.journal.engine.name}: {'ok' if healthy else 'unreachable'}"
        )

    async def _cmd_export(self, arg: str) -> None:
        directory = Path(arg).expanduser() if arg else self.export_dir
        written = export_memories(self.journal.memories, directory)
        print(f"Exported {len(written)} memories to {directory}")

    async def _cmd_format(self, arg: str) -> None:
        loop = asyncio.get_running_loop()
        answer = await loop.run_in_executor(None, self._read_input, ERASE_PROMPT)
        if answer is None or answer.strip().lower() not in ("y", "yes"):
            print("Aborted.")
            return
        self.journal.erase()
        print("All cognitive records erased.")
