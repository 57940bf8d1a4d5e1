"""
Participant registration and gift submission.

A participant's first gift submission triggers the confirmation path: a
calendar event is created for them, then the confirmation e-mail with the
event link is sent. Re-submissions only update the wish.
"""

from __future__ import annotations

import logging
import random
import string
from dataclasses import dataclass
from typing import TYPE_CHECKING

from passlib.context import CryptContext

from core.calendar.events import CalendarEventDetails
from core.notifications.actions import notify_registration_confirmed
from core.notifications.dispatcher import DeliveryResult
from core.queries.participants import DuplicateRowError, Participant, ParticipantStore

if TYPE_CHECKING:
    from core.app_context import AppContext

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


class ValidationError(Exception):
    """Invalid input from the caller. Surfaced synchronously, never retried."""


class PasswordMismatchError(ValidationError):
    pass


class DuplicateParticipantError(ValidationError):
    pass


class CredentialMismatchError(ValidationError):
    pass


class InvalidGiftError(ValidationError):
    pass


class ParticipantNotFoundError(Exception):
    pass


class AuthenticationError(Exception):
    """Wrong password for an existing participant."""


@dataclass
class GiftSubmission:
    participant: Participant
    first_submission: bool
    event_link: str | None = None
    confirmation: DeliveryResult | None = None


async def register_participant(
    store: ParticipantStore,
    username: str,
    email: str,
    password: str,
    confirm_password: str,
) -> Participant:
    """
    Register a new participant with no gift and no recipient.

    Raises:
        PasswordMismatchError: If the two passwords differ
        DuplicateParticipantError: If the username or email is taken
    """
    username = username.strip()
    email = email.strip()
    if not username or not email or not password:
        raise ValidationError("Username, email and password are required!")
    if password != confirm_password:
        raise PasswordMismatchError("Passwords do not match!")

    if await store.exists(username=username, email=email):
        raise DuplicateParticipantError("User already exists!")

    try:
        participant = await store.insert_one(
            username=username,
            email=email,
            password_hash=pwd_context.hash(password),
        )
    except DuplicateRowError as e:
        # Lost a race with a concurrent registration
        raise DuplicateParticipantError("User already exists!") from e

    logger.info(f"Registered participant {participant.username}")
    return participant


async def _password_matches(store: ParticipantStore, username: str, password: str) -> bool:
    stored_hash = await store.get_password_hash(username)
    return bool(stored_hash) and pwd_context.verify(password, stored_hash)


async def verify_credentials(
    store: ParticipantStore, username: str, password: str
) -> Participant | None:
    """Return the participant if the password matches, otherwise None."""
    if not await _password_matches(store, username, password):
        return None
    return await store.find_one(username=username)


async def submit_gift(
    ctx: AppContext,
    participant_id: int,
    username: str,
    email: str,
    password: str,
    gift: str,
) -> GiftSubmission:
    """
    Record a participant's gift wish.

    The first-submission check is the store's atomic set-if-unset, so two
    concurrent submissions can't both send a confirmation.

    Raises:
        ParticipantNotFoundError: Unknown participant_id
        CredentialMismatchError: Username/email don't match the participant
        AuthenticationError: Wrong password
        InvalidGiftError: Empty gift wish
    """
    gift = gift.strip()
    if not gift:
        raise InvalidGiftError("Gift wish can't be empty!")

    participant = await ctx.store.find_by_id(participant_id)
    if participant is None:
        raise ParticipantNotFoundError(f"Participant {participant_id} not found")
    if participant.username != username.strip() or participant.email != email.strip():
        raise CredentialMismatchError("Username and Email didn't match!")
    if not await _password_matches(ctx.store, participant.username, password):
        raise AuthenticationError("Wrong password!")

    first = await ctx.store.set_gift_if_unset(participant_id, gift)
    if not first:
        await ctx.store.update_gift(participant_id, gift)
        logger.info(f"Gift wish updated for {participant.username}")
        return GiftSubmission(participant=participant, first_submission=False)

    submission = GiftSubmission(participant=participant, first_submission=True)
    submission.event_link, submission.confirmation = await send_confirmation(
        ctx, participant
    )
    return submission


async def send_confirmation(
    ctx: AppContext, participant: Participant
) -> tuple[str | None, DeliveryResult | None]:
    """
    Create the participant's calendar event, then e-mail them its link.

    No e-mail is sent when the event couldn't be created.
    """
    details = CalendarEventDetails.from_settings(ctx.settings.event)
    link = await ctx.calendar.create_event(details, participant.email)
    if not link:
        logger.warning(
            f"No calendar event for {participant.username}, confirmation not sent"
        )
        return None, None

    delivery = await notify_registration_confirmed(
        ctx.dispatcher, participant, link, ctx.settings
    )
    return link, delivery


def _random_suffix(length: int = 6) -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


async def insert_random_participants(store: ParticipantStore, count: int = 20) -> int:
    """Seed the store with random participants who already have a gift wish."""
    password_hash = pwd_context.hash("pass")
    rows = []
    for _ in range(count):
        username = f"user{_random_suffix()}"
        rows.append(
            {
                "username": username,
                "email": f"{username}@mail.com",
                "password_hash": password_hash,
                "gift": f"gift{_random_suffix()}",
                "recipient": None,
            }
        )

    inserted = await store.insert_many(rows)
    logger.info(f"{inserted} participants were inserted")
    return inserted
