"""Tests for the stdin console command loop."""

import asyncio
import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from core.commands import CommandHandler
from core.queries.participants import StoreError


@pytest.fixture
def stdin_lines():
    """Replace stdin with a pipe pre-filled with the given lines."""
    opened = []

    def _make(*lines):
        read_fd, write_fd = os.pipe()
        os.write(write_fd, "".join(f"{line}\n" for line in lines).encode())
        os.close(write_fd)
        pipe = os.fdopen(read_fd, "rb")
        opened.append(pipe)
        return pipe

    yield _make

    for pipe in opened:
        if not pipe.closed:
            pipe.close()


class TestRunConsole:
    @pytest.mark.asyncio
    async def test_runs_commands_until_stop(self, ctx, stdin_lines, capsys):
        from main import run_console

        on_stop = MagicMock()
        pipe = stdin_lines("bogus", "", "override-pair", "stop", "add-random")

        with patch("main.sys.stdin", pipe):
            await run_console(CommandHandler(ctx, on_stop=on_stop))

        out = capsys.readouterr().out
        assert "Invalid command: bogus" in out
        assert "Pairing completed" in out
        assert "Shutting down the server" in out
        assert "Added" not in out
        on_stop.assert_called_once()
        ctx.scheduler.trigger_now.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_returns_on_eof(self, ctx, stdin_lines):
        from main import run_console

        with patch("main.sys.stdin", stdin_lines()):
            await run_console(CommandHandler(ctx))

        ctx.scheduler.shutdown.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_command_keeps_console_running(self, ctx, stdin_lines, capsys):
        from main import run_console

        pipe = stdin_lines("add-random", "override-pair")

        with (
            patch("main.sys.stdin", pipe),
            patch(
                "core.commands.insert_random_participants",
                AsyncMock(side_effect=StoreError("db down")),
            ),
            patch("main.sentry_sdk") as mock_sentry,
        ):
            await run_console(CommandHandler(ctx))

        out = capsys.readouterr().out
        assert "Command add-random failed: db down" in out
        assert "Pairing completed" in out
        ctx.scheduler.trigger_now.assert_awaited_once()
        mock_sentry.capture_exception.assert_called_once()


class TestLifespan:
    @pytest.mark.asyncio
    async def test_shutdown_closes_context_after_console_failure(self):
        from main import create_app, lifespan

        ctx = MagicMock()
        ctx.close = AsyncMock()
        app = create_app()

        async def broken_console(handler):
            raise StoreError("db down")

        env = {"DATABASE_URL": "sqlite+aiosqlite://"}
        with (
            patch.dict("os.environ", env, clear=True),
            patch("main.create_app_context", return_value=ctx),
            patch("main.run_console", broken_console),
        ):
            async with lifespan(app):
                assert app.state.context is ctx
                await asyncio.sleep(0)

        ctx.start.assert_called_once()
        ctx.close.assert_awaited_once()
        assert app.state.context is None
