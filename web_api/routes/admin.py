"""
Admin command API routes.

All endpoints require the X-Admin-Token header.

Endpoints:
- POST /api/admin/commands - Run an operator command (override-pair, add-random)
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from core.app_context import AppContext
from core.commands import Command, CommandHandler, UnknownCommandError, parse_command
from core.queries.participants import StoreError
from web_api.auth import get_app_context, require_admin_token

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin_token)],
)


class CommandRequest(BaseModel):
    """Request body for an operator command."""

    command: str


@router.post("/commands")
async def run_command(
    body: CommandRequest,
    ctx: AppContext = Depends(get_app_context),
) -> dict[str, Any]:
    try:
        command = parse_command(body.command)
    except UnknownCommandError as e:
        raise HTTPException(400, str(e))

    # Stopping the process is only allowed from the console
    if command is Command.stop:
        raise HTTPException(400, "stop is only available from the console")

    try:
        result = await CommandHandler(ctx).handle(command)
    except StoreError:
        raise HTTPException(503, "Participant store unavailable")
    return {"command": command.value, "result": result}
