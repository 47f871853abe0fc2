"""Daily reminder to record the day's spending.

The service only decides *when* the reminder fires. Scheduling goes through
any object with tkinter's ``after(ms, func)`` / ``after_cancel(job)`` pair
(the main window in the app, a fake in tests) and the visible popup is the
``show(title, body)`` callback handed to :meth:`NotificationService.dispatch`.
"""
import logging
from datetime import datetime, timedelta
from typing import Callable

from database.db_manager import DatabaseManager
from utils.constants import (
    REMINDER_TITLE, REMINDER_BODY, REMINDER_DEFAULT_HOUR, REMINDER_DEFAULT_MINUTE,
)

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, db: DatabaseManager, clock: Callable[[], datetime] = datetime.now):
        self._db = db
        self._clock = clock
        self._scheduler = None
        self._show: Callable[[str, str], None] | None = None
        self._job = None
        self._pending_at: datetime | None = None

    # ── Settings ──────────────────────────────────────────────────────────────

    def is_enabled(self) -> bool:
        return self._db.get_setting("reminder_enabled", "1") == "1"

    def set_enabled(self, enabled: bool):
        self._db.set_setting("reminder_enabled", "1" if enabled else "0")
        logger.info("Daily reminder %s", "enabled" if enabled else "disabled")
        self._rearm()

    def get_time(self) -> tuple[int, int]:
        try:
            hour = int(self._db.get_setting("reminder_hour", str(REMINDER_DEFAULT_HOUR)))
            minute = int(self._db.get_setting("reminder_minute", str(REMINDER_DEFAULT_MINUTE)))
        except ValueError:
            return REMINDER_DEFAULT_HOUR, REMINDER_DEFAULT_MINUTE
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            return REMINDER_DEFAULT_HOUR, REMINDER_DEFAULT_MINUTE
        return hour, minute

    def set_time(self, hour: int, minute: int):
        if not 0 <= hour <= 23:
            raise ValueError("Hour must be between 0 and 23.")
        if not 0 <= minute <= 59:
            raise ValueError("Minute must be between 0 and 59.")
        self._db.set_setting("reminder_hour", str(hour))
        self._db.set_setting("reminder_minute", str(minute))
        logger.info("Daily reminder time set to %02d:%02d", hour, minute)
        self._rearm()

    # ── Timing ────────────────────────────────────────────────────────────────

    def next_fire_time(self, now: datetime | None = None) -> datetime | None:
        """Today at the reminder time if still ahead, otherwise tomorrow."""
        if not self.is_enabled():
            return None
        now = now or self._clock()
        hour, minute = self.get_time()
        candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
        if candidate <= now:
            candidate += timedelta(days=1)
        return candidate

    def delay_ms(self, now: datetime | None = None) -> int | None:
        now = now or self._clock()
        fire_at = self.next_fire_time(now)
        if fire_at is None:
            return None
        return max(0, int((fire_at - now).total_seconds() * 1000))

    # ── Scheduling ────────────────────────────────────────────────────────────

    def dispatch(self, scheduler, show: Callable[[str, str], None]):
        """Replace any pending reminder with one at the next fire time."""
        self._scheduler = scheduler
        self._show = show
        self._rearm()

    def cancel(self):
        if self._job is not None and self._scheduler is not None:
            self._scheduler.after_cancel(self._job)
        self._job = None
        self._pending_at = None

    @property
    def is_scheduled(self) -> bool:
        return self._job is not None

    def _rearm(self, now: datetime | None = None):
        self.cancel()
        if self._scheduler is None or self._show is None:
            return
        now = now or self._clock()
        fire_at = self.next_fire_time(now)
        if fire_at is None:
            return
        self._pending_at = fire_at
        self._job = self._scheduler.after(self.delay_ms(now), self._fire)
        logger.debug("Daily reminder scheduled for %s", fire_at.isoformat(timespec="minutes"))

    def _fire(self):
        fired_at = self._pending_at
        self._job = None
        try:
            self._show(REMINDER_TITLE, REMINDER_BODY)
        finally:
            now = self._clock()
            # Timers can wake slightly early; never re-arm for the same slot
            if fired_at is not None and now < fired_at:
                now = fired_at
            self._rearm(now)
