"""
Participant routes.

Endpoints:
- POST /api/participants - Register a participant
- POST /api/participants/{participant_id}/gift - Submit or update a gift wish
- POST /api/login - Check a participant's password
- GET /api/pairing - Current pairing state
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from core.app_context import AppContext
from core.participants import (
    AuthenticationError,
    DuplicateParticipantError,
    ParticipantNotFoundError,
    ValidationError,
    register_participant,
    submit_gift,
    verify_credentials,
)
from core.queries.participants import StoreError
from web_api.auth import get_app_context

router = APIRouter(prefix="/api", tags=["participants"])


class RegistrationRequest(BaseModel):
    """Request body for registration."""

    username: str
    email: str
    password: str
    confirm_password: str


class LoginRequest(BaseModel):
    """Request body for login."""

    username: str
    password: str


class GiftRequest(BaseModel):
    """Request body for gift submission."""

    username: str
    email: str
    password: str
    gift: str


@router.post("/participants", status_code=201)
async def register(
    body: RegistrationRequest,
    ctx: AppContext = Depends(get_app_context),
) -> dict[str, Any]:
    try:
        participant = await register_participant(
            ctx.store,
            username=body.username,
            email=body.email,
            password=body.password,
            confirm_password=body.confirm_password,
        )
    except DuplicateParticipantError as e:
        raise HTTPException(409, str(e))
    except ValidationError as e:
        raise HTTPException(400, str(e))
    except StoreError:
        raise HTTPException(503, "Participant store unavailable")

    return {
        "participant_id": participant.participant_id,
        "username": participant.username,
    }


@router.post("/participants/{participant_id}/gift")
async def gift(
    participant_id: int,
    body: GiftRequest,
    ctx: AppContext = Depends(get_app_context),
) -> dict[str, Any]:
    """
    Submit a gift wish.

    The first successful submission also sends the calendar invite and the
    confirmation e-mail; later submissions only update the wish.
    """
    try:
        submission = await submit_gift(
            ctx,
            participant_id=participant_id,
            username=body.username,
            email=body.email,
            password=body.password,
            gift=body.gift,
        )
    except ParticipantNotFoundError:
        raise HTTPException(404, "Participant not found")
    except AuthenticationError as e:
        raise HTTPException(401, str(e))
    except ValidationError as e:
        raise HTTPException(400, str(e))
    except StoreError:
        raise HTTPException(503, "Participant store unavailable")

    return {"status": "submitted", "first_submission": submission.first_submission}


@router.post("/login")
async def login(
    body: LoginRequest,
    ctx: AppContext = Depends(get_app_context),
) -> dict[str, Any]:
    try:
        participant = await verify_credentials(ctx.store, body.username, body.password)
    except StoreError:
        raise HTTPException(503, "Participant store unavailable")

    if participant is None:
        raise HTTPException(401, "Invalid username or password")
    return {
        "participant_id": participant.participant_id,
        "username": participant.username,
        "email": participant.email,
        "has_gift": participant.gift is not None,
    }


@router.get("/pairing")
async def pairing_status(ctx: AppContext = Depends(get_app_context)) -> dict[str, Any]:
    return {"state": ctx.scheduler.state.value}
