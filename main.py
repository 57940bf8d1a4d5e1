"""
Unified backend entry point.

Architecture:
- One Python process, one asyncio event loop
- Three peers running concurrently:
  1. FastAPI (HTTP server for registration and gift submission)
  2. Pairing scheduler (APScheduler timer that fires the pairing once)
  3. Console command loop (stop / override-pair / add-random on stdin)

FastAPI's lifespan builds the AppContext on startup and tears it down on
shutdown, which gives us uvicorn's signal handling for free.

Run with: python main.py [--no-console] [--port PORT]
"""

import asyncio
import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

project_root = Path(__file__).parent

# Load .env.local first (if exists), then .env as fallback
# .env.local is gitignored and used for local dev overrides
load_dotenv(project_root / ".env.local")
load_dotenv()

import sentry_sdk
import uvicorn
from fastapi import FastAPI

from core.app_context import AppContext, create_app_context
from core.commands import USAGE, Command, CommandHandler, UnknownCommandError, parse_command
from core.config import check_required_env_vars, get_api_port, load_settings
from web_api.routes.admin import router as admin_router
from web_api.routes.participants import router as participants_router

logger = logging.getLogger(__name__)

# Set in __main__ so the console "stop" command can end the server
_server: uvicorn.Server | None = None


def request_server_exit() -> None:
    if _server is not None:
        _server.should_exit = True


async def run_console(handler: CommandHandler) -> None:
    """
    Read operator commands from stdin, one per line.

    Returns on EOF, after "stop", or if stdin can't be read asynchronously.
    """
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    try:
        await loop.connect_read_pipe(
            lambda: asyncio.StreamReaderProtocol(reader), sys.stdin
        )
    except (OSError, ValueError) as e:
        print(f"Warning: console commands unavailable ({e})")
        return

    while True:
        line = await reader.readline()
        if not line:
            return
        text = line.decode().strip()
        if not text:
            continue

        try:
            command = parse_command(text)
        except UnknownCommandError as e:
            sys.stdout.write(f"{e}\n")
            continue

        try:
            reply = await handler.handle(command)
        except Exception as e:
            # Only "stop" ends the console
            logger.error(f"Command {command.value} failed: {e}")
            sentry_sdk.capture_exception(e)
            reply = f"Command {command.value} failed: {e}"

        sys.stdout.write(f"{reply}\n")
        if command is Command.stop:
            return


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager.

    Builds the AppContext unless one was injected (tests), starts the pairing
    scheduler and the console loop, and tears everything down on shutdown.
    """
    if getattr(app.state, "context", None) is not None:
        yield
        return

    ok, warnings = check_required_env_vars()
    for warning in warnings:
        print(warning)
    if not ok:
        raise RuntimeError("Missing required environment variables")

    settings = load_settings()
    if settings.sentry_dsn:
        sentry_sdk.init(dsn=settings.sentry_dsn)

    ctx = create_app_context(settings)
    app.state.context = ctx
    ctx.start()

    console_task: asyncio.Task | None = None
    if os.getenv("DISABLE_CONSOLE", "").lower() not in ("true", "1", "yes"):
        print(USAGE, end="")
        console_task = asyncio.create_task(
            run_console(CommandHandler(ctx, on_stop=request_server_exit))
        )

    try:
        yield
    finally:
        print("Shutting down...")
        try:
            if console_task:
                console_task.cancel()
                try:
                    await console_task
                except asyncio.CancelledError:
                    pass
                except Exception as e:
                    logger.error(f"Console loop ended with an error: {e}")
        finally:
            await ctx.close()
            app.state.context = None


def create_app(context: AppContext | None = None) -> FastAPI:
    """Create the FastAPI app, optionally with a prebuilt AppContext."""
    app = FastAPI(title="Secret Santa API", lifespan=lifespan)
    app.state.context = context

    app.include_router(participants_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health():
        """Health check endpoint with pairing status."""
        ctx = app.state.context
        return {
            "status": "healthy",
            "pairing_state": ctx.scheduler.state.value if ctx else None,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Secret Santa Server")
    parser.add_argument(
        "--no-console",
        action="store_true",
        help="Disable stdin commands (useful when running detached)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=get_api_port(),
        help="Port to run the server on (default: 5000)",
    )
    args = parser.parse_args()

    if args.no_console:
        os.environ["DISABLE_CONSOLE"] = "true"

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    print(f"Web server started and running at http://localhost:{args.port}/")
    _server = uvicorn.Server(uvicorn.Config(app, host="0.0.0.0", port=args.port))
    _server.run()
