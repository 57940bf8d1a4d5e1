"""
Notification dispatcher - renders a message kind and delivers it with retries.

Delivery is attempted up to RetryPolicy.max_attempts times with exponential
backoff between attempts. A message that still fails is reported to Sentry
and returned as permanently failed; it is never dropped silently.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

import sentry_sdk

from core.enums import MessageKind
from core.notifications.channels.email import EmailMessage, SendResult
from core.notifications.templates import render_email
from core.queries.participants import Participant
from core.retry import RetryPolicy, Sleep

logger = logging.getLogger(__name__)


class NotificationGateway(Protocol):
    async def send(self, message: EmailMessage) -> SendResult: ...


@dataclass
class DeliveryResult:
    success: bool
    attempts: int
    error: str | None = None

    @property
    def permanently_failed(self) -> bool:
        return not self.success and self.attempts > 0


class NotificationDispatcher:
    def __init__(
        self,
        gateway: NotificationGateway,
        policy: RetryPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.gateway = gateway
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    async def _attempt(self, message: EmailMessage) -> SendResult:
        try:
            return await self.gateway.send(message)
        except Exception as e:
            return SendResult(False, str(e))

    async def deliver(self, message: EmailMessage) -> DeliveryResult:
        """
        Deliver a message, retrying transient failures.

        Returns:
            DeliveryResult with the number of attempts made and the last error
        """
        last_error = None
        for attempt in range(self.policy.max_attempts):
            result = await self._attempt(message)
            if result.success:
                return DeliveryResult(success=True, attempts=attempt + 1)

            last_error = result.reason
            if attempt + 1 < self.policy.max_attempts:
                delay = self.policy.delay_for(attempt)
                logger.warning(
                    f"Mail to {message.to_email} failed ({last_error}), "
                    f"retrying in {delay:.1f}s (attempt {attempt + 1})"
                )
                await self._sleep(delay)

        logger.error(
            f"Mail to {message.to_email} failed permanently after "
            f"{self.policy.max_attempts} attempts: {last_error}"
        )
        sentry_sdk.capture_message(
            f"Notification permanently failed after {self.policy.max_attempts} attempts",
            level="error",
            extras={"to_email": message.to_email, "error": last_error},
        )
        return DeliveryResult(
            success=False, attempts=self.policy.max_attempts, error=last_error
        )

    async def notify(
        self,
        participant: Participant,
        message_kind: MessageKind,
        context: dict,
    ) -> DeliveryResult:
        """
        Send a message of the given kind to a participant.

        Args:
            participant: Addressee
            message_kind: Selects the template in messages.yaml
            context: Template variables (participant name is added)
        """
        if not participant.email:
            logger.warning(
                f"Participant {participant.username} has no email, "
                f"skipping {message_kind.value}"
            )
            return DeliveryResult(success=False, attempts=0, error="no email")

        subject, body = render_email(
            message_kind, {"name": participant.username, **context}
        )
        return await self.deliver(
            EmailMessage(to_email=participant.email, subject=subject, body=body)
        )
