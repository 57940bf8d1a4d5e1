"""
Pairing algorithm: shuffle the eligible participants, then give everyone the
next person in the shuffled order. The last participant wraps around to the
first, so the result is always one cycle covering every participant and
nobody is assigned to themselves (for n >= 2).
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Protocol, Sequence, TypeVar

from core.config import Settings
from core.notifications.actions import notify_assignment
from core.notifications.dispatcher import NotificationDispatcher
from core.queries.participants import Participant, ParticipantStore, StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


def shuffle_participants(items: Sequence[T], rng: RandomSource) -> list[T]:
    """
    Fisher-Yates shuffle returning a new list.

    Walks i from the last index down to 1 and swaps element i with a uniformly
    chosen element in [0, i].
    """
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def build_assignments(ordered: Sequence[T]) -> list[tuple[T, T]]:
    """
    Pair each element with its successor, wrapping the last to the first.

    Returns an empty list for fewer than 2 elements.
    """
    n = len(ordered)
    if n < 2:
        return []
    return [(ordered[i], ordered[(i + 1) % n]) for i in range(n)]


@dataclass
class PairingResult:
    assignments: list[tuple[str, str]] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    notified: list[str] = field(default_factory=list)
    notify_failed: list[str] = field(default_factory=list)


class PairingEngine:
    def __init__(
        self,
        store: ParticipantStore,
        dispatcher: NotificationDispatcher,
        settings: Settings,
        rng: RandomSource | None = None,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.settings = settings
        self.rng = rng or random.SystemRandom()

    async def run(self) -> PairingResult:
        """
        Pair everyone who is eligible right now.

        Raises:
            StoreError: If the eligible participants can't be read
        """
        eligible = await self.store.find_eligible()
        return await self.pair(eligible)

    async def pair(self, eligible: Sequence[Participant]) -> PairingResult:
        """
        Assign recipients and notify each santa.

        A failed recipient write for one santa is logged and skipped; the
        remaining santas are still assigned and notified.
        """
        result = PairingResult()
        if len(eligible) < 2:
            logger.info(
                f"Only {len(eligible)} eligible participant(s), nothing to pair"
            )
            return result

        ordered = shuffle_participants(eligible, self.rng)

        for santa, recipient in build_assignments(ordered):
            try:
                await self.store.set_recipient(santa.participant_id, recipient.username)
            except StoreError as e:
                logger.error(f"Failed to save recipient for {santa.username}: {e}")
                result.failed.append(santa.username)
                continue

            result.assignments.append((santa.username, recipient.username))

            delivery = await notify_assignment(
                self.dispatcher, santa, recipient, self.settings
            )
            if delivery.success:
                result.notified.append(santa.username)
            else:
                result.notify_failed.append(santa.username)

        logger.info(
            f"Paired {len(result.assignments)} of {len(ordered)} participants "
            f"({len(result.failed)} write failures, "
            f"{len(result.notify_failed)} undelivered notices)"
        )
        return result
