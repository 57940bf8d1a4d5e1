"""
Single-shot pairing scheduler built on APScheduler.

State machine:
    idle --schedule_at--> scheduled --(timer or trigger_now)--> firing --> completed

The timer and the manual override are independent triggers, so entering
"firing" is guarded by one asyncio.Lock. Whichever trigger gets there first
runs the pairing; every later attempt is a logged no-op.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import sentry_sdk
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from core.enums import PairingState
from core.pairing.engine import PairingEngine, PairingResult

logger = logging.getLogger(__name__)

PAIRING_JOB_ID = "pairing"


def compute_delay(target: datetime, now: datetime) -> float:
    """Seconds until target, never negative (past targets fire immediately)."""
    return max(0.0, (target - now).total_seconds())


def create_apscheduler() -> AsyncIOScheduler:
    """In-memory scheduler; the pairing job only lives for this process."""
    return AsyncIOScheduler(
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": None,  # Late timers still fire once
        },
    )


class PairingScheduler:
    def __init__(
        self,
        engine: PairingEngine,
        scheduler: AsyncIOScheduler | None = None,
    ):
        self.engine = engine
        self._scheduler = scheduler or create_apscheduler()
        self._lock = asyncio.Lock()
        self._state = PairingState.idle
        self._accepting = True
        self.last_result: PairingResult | None = None

    @property
    def state(self) -> PairingState:
        return self._state

    @property
    def accepting(self) -> bool:
        return self._accepting

    def start(self) -> None:
        """Start the underlying APScheduler. Call from inside the event loop."""
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Pairing scheduler started")

    def shutdown(self) -> None:
        """Stop accepting triggers. In-flight sends are not rolled back."""
        self._accepting = False
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Pairing scheduler stopped")

    def schedule_at(self, target: datetime, now: datetime | None = None) -> bool:
        """
        Arm the single pairing timer.

        Only valid while idle; there is no cancellation or rescheduling.

        Returns:
            True if the timer was armed
        """
        if not self._accepting:
            logger.warning("Scheduler is shut down, not scheduling pairing")
            return False
        if self._state is not PairingState.idle:
            logger.warning(f"Pairing already {self._state.value}, not rescheduling")
            return False

        now = now or datetime.now(timezone.utc)
        delay = compute_delay(target, now)

        self._scheduler.add_job(
            self._on_timer,
            trigger="date",
            run_date=now + timedelta(seconds=delay),
            id=PAIRING_JOB_ID,
            replace_existing=True,
            misfire_grace_time=None,
        )
        self._state = PairingState.scheduled

        logger.info(f"Scheduling pairing for {target.isoformat()}")
        logger.info(f"Time until pairing: {delay:.1f} seconds")
        return True

    async def trigger_now(self) -> bool:
        """
        Fire the pairing immediately, bypassing any armed timer.

        Returns:
            True if this call ran the pairing, False if it was rejected
        """
        return await self._fire("manual override")

    async def _on_timer(self) -> None:
        """Job function called by APScheduler when the timer expires."""
        await self._fire("timer")

    def _remove_pending_job(self) -> None:
        try:
            self._scheduler.remove_job(PAIRING_JOB_ID)
        except JobLookupError:
            pass  # Already fired or never armed

    async def _fire(self, source: str) -> bool:
        async with self._lock:
            if not self._accepting:
                logger.warning(f"Ignoring {source}: scheduler is shut down")
                return False
            if self._state in (PairingState.firing, PairingState.completed):
                logger.info(f"Ignoring {source}: pairing already {self._state.value}")
                return False
            self._state = PairingState.firing
            self._remove_pending_job()

        logger.info(f"Pairing started! ({source})")
        try:
            self.last_result = await self.engine.run()
            logger.info("Pairing completed!")
        except Exception as e:
            logger.error(f"Pairing run aborted: {e}")
            sentry_sdk.capture_exception(e)
        finally:
            self._state = PairingState.completed

        return True
