"""Tests for the REPL connector (commands driven directly, no stdin)."""

import asyncio
import pytest
from pathlib import Path
from unittest.mock import patch

from lifeos.cli import CLIConnector
from lifeos.core import Journal


@pytest.fixture
def cli(journal: Journal, tmp_path: Path) -> CLIConnector:
    return CLIConnector(journal, export_dir=tmp_path / "archive", color=False)


class TestSubmit:
    @pytest.mark.asyncio
    async def test_submit_runs_in_background(self, cli: CLIConnector, capsys):
        assert cli.submit("Moving to Lisbon") is True
        await cli._pending
        out = capsys.readouterr().out
        assert "[PASSIVE CAPTURE]" in out
        assert "[Stored]" in out
        assert len(cli.journal.memories) == 1

    @pytest.mark.asyncio
    async def test_second_submission_refused(self, cli: CLIConnector, engine, capsys):
        engine.gate = asyncio.Event()
        cli.submit("first")
        await asyncio.sleep(0)
        assert cli.busy
        assert cli.submit("second") is False
        assert "SYNCHRONIZING" in capsys.readouterr().out

        # Commands stay available while the call is outstanding.
        await cli.handle_command("/undo")
        assert cli.journal.messages == []

        engine.gate.set()
        await cli.stop()
        assert not cli.busy
        assert [m.content for m in cli.journal.memories] == ["first"]

    @pytest.mark.asyncio
    async def test_failed_submission_prints_nothing(self, cli: CLIConnector, engine, capsys):
        engine.fail = True
        cli.submit("lost")
        await cli._pending
        out = capsys.readouterr().out
        assert "LIFE OS [" not in out
        assert not cli.busy

    @pytest.mark.asyncio
    async def test_unexpected_failure_is_logged(self, cli: CLIConnector, capsys, caplog):
        save = cli.journal.store.save
        calls = []

        def flaky_save(memories, messages):
            calls.append(1)
            if len(calls) > 1:
                raise OSError("disk full")
            save(memories, messages)

        with patch.object(cli.journal.store, "save", side_effect=flaky_save):
            cli.submit("doomed")
            await asyncio.wait({cli._pending})
            await asyncio.sleep(0)

        assert "Submission failed: disk full" in caplog.text
        assert "Entry failed: disk full" in capsys.readouterr().out
        assert not cli.busy
        # The connector still accepts the next entry.
        assert cli.submit("recovered") is True
        await cli._pending
        assert [m.content for m in cli.journal.memories][0] == "recovered"


class TestCommands:
    @pytest.mark.asyncio
    async def test_unknown(self, cli: CLIConnector, capsys):
        await cli.handle_command("/nope")
        assert "Unknown command" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_views(self, cli: CLIConnector, capsys):
        await cli.journal.submit("Moving to Lisbon")
        await cli.handle_command("/timeline")
        await cli.handle_command("/archive")
        await cli.handle_command("/insights")
        out = capsys.readouterr().out
        assert "You [" in out
        assert "DECISION" in out
        assert "Pattern Analysis" in out

    @pytest.mark.asyncio
    async def test_undo_redo(self, cli: CLIConnector, capsys):
        await cli.handle_command("/undo")
        assert "Nothing to undo." in capsys.readouterr().out
        await cli.journal.submit("one")
        await cli.handle_command("/undo")
        assert "Undone. MEMORIES: 0" in capsys.readouterr().out
        await cli.handle_command("/redo")
        assert "Redone. MEMORIES: 1" in capsys.readouterr().out
        await cli.handle_command("/redo")
        assert "Nothing to redo." in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_status(self, cli: CLIConnector, capsys):
        await cli.journal.submit("one")
        await cli.handle_command("/status")
        out = capsys.readouterr().out
        assert "MEMORIES: 1" in out
        assert "undo: 1" in out
        assert "engine mock: ok" in out

    @pytest.mark.asyncio
    async def test_export_default_dir(self, cli: CLIConnector, capsys):
        await cli.journal.submit("one")
        await cli.handle_command("/export")
        assert len(list(cli.export_dir.glob("*.md"))) == 1
        assert "Exported 1 memories" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_export_custom_dir(self, cli: CLIConnector, tmp_path: Path):
        await cli.journal.submit("one")
        await cli.handle_command(f"/export {tmp_path / 'elsewhere'}")
        assert len(list((tmp_path / "elsewhere").glob("*.md"))) == 1

    @pytest.mark.asyncio
    async def test_export_failure_reported(self, cli: CLIConnector, tmp_path: Path, capsys, caplog):
        await cli.journal.submit("one")
        blocker = tmp_path / "taken"
        blocker.write_text("not a directory")
        await cli.handle_command(f"/export {blocker}")
        assert "/export failed:" in capsys.readouterr().out
        assert "Command /export failed" in caplog.text

        await cli.handle_command("/status")
        assert "MEMORIES: 1" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_format_confirmed(self, cli: CLIConnector, capsys):
        await cli.journal.submit("one")
        with patch.object(cli, "_read_input", return_value="y"):
            await cli.handle_command("/format")
        assert cli.journal.memories == []
        assert not cli.journal.history.can_undo
        assert "erased" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_format_declined(self, cli: CLIConnector, capsys):
        await cli.journal.submit("one")
        with patch.object(cli, "_read_input", return_value="n"):
            await cli.handle_command("/format")
        assert len(cli.journal.memories) == 1
        assert "Aborted." in capsys.readouterr().out
