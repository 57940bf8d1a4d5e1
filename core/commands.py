"""
Operator commands, independent of the transport that delivers them.

The console loop in main.py and the admin HTTP route both parse text into a
Command and hand it to the same CommandHandler.
"""

import enum
import logging
from typing import Callable

from core.app_context import AppContext
from core.participants import insert_random_participants

logger = logging.getLogger(__name__)


class Command(str, enum.Enum):
    stop = "stop"
    override_pair = "override-pair"
    add_random = "add-random"


USAGE = (
    "Usage:\n"
    "stop -> shutdown the server\n"
    "override-pair -> pair ahead of schedule\n"
    "add-random -> add random users\n"
)


class UnknownCommandError(ValueError):
    pass


def parse_command(text: str) -> Command:
    """
    Raises:
        UnknownCommandError: If text isn't one of the known commands
    """
    try:
        return Command(text.strip())
    except ValueError:
        raise UnknownCommandError(f"Invalid command: {text.strip()}") from None


class CommandHandler:
    def __init__(self, ctx: AppContext, on_stop: Callable[[], None] | None = None):
        self.ctx = ctx
        self._on_stop = on_stop

    async def handle(self, command: Command) -> str:
        """Run a command and return the reply for the operator."""
        logger.info(f"Received command: {command.value}")

        if command is Command.override_pair:
            if await self.ctx.scheduler.trigger_now():
                return "Pairing completed"
            return f"Pairing not run (already {self.ctx.scheduler.state.value})"

        if command is Command.add_random:
            inserted = await insert_random_participants(self.ctx.store)
            return f"Added {inserted} random users"

        self.ctx.scheduler.shutdown()
        if self._on_stop:
            self._on_stop()
        return "Shutting down the server"
