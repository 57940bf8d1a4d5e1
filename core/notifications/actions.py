"""
High-level notification actions.

These functions are called by business logic (gift submission, pairing) to
send notifications. They build the template context from settings.
"""

from core.config import Settings
from core.enums import MessageKind
from core.notifications.dispatcher import DeliveryResult, NotificationDispatcher
from core.queries.participants import Participant


async def notify_registration_confirmed(
    dispatcher: NotificationDispatcher,
    participant: Participant,
    event_link: str,
    settings: Settings,
) -> DeliveryResult:
    """
    Send the confirmation for a participant's first gift submission.

    Args:
        participant: Participant who just submitted their wish
        event_link: Link to the calendar event created for them
    """
    community_line = (
        f"You can also find more info in the community: {settings.community_url}"
        if settings.community_url
        else ""
    )
    return await dispatcher.notify(
        participant,
        MessageKind.registration_confirmation,
        {
            "event_title": settings.event.title,
            "event_link": event_link,
            "community_line": community_line,
        },
    )


async def notify_assignment(
    dispatcher: NotificationDispatcher,
    santa: Participant,
    recipient: Participant,
    settings: Settings,
) -> DeliveryResult:
    """Tell a santa who they are giving to and what was wished for."""
    return await dispatcher.notify(
        santa,
        MessageKind.assignment_notice,
        {
            "santa_name": santa.username,
            "recipient_name": recipient.username,
            "recipient_gift": recipient.gift,
            "spending_min": settings.spending_min,
            "spending_max": settings.spending_max,
        },
    )
