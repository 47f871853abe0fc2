from datetime import date, datetime

import pytest

from database.db_manager import DatabaseManager
from services.notification_service import NotificationService
from utils.constants import DEFAULT_TAB_ORDER, REMINDER_TITLE, REMINDER_BODY


class FakeScheduler:
    """Records after/after_cancel calls the way a Tk widget would receive them."""

    def __init__(self):
        self.jobs = {}
        self._next = 0

    def after(self, ms, func):
        self._next += 1
        job = f"after#{self._next}"
        self.jobs[job] = (ms, func)
        return job

    def after_cancel(self, job):
        self.jobs.pop(job, None)

    def run_pending(self):
        for job, (_, func) in list(self.jobs.items()):
            self.jobs.pop(job)
            func()


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class TestSettings:
    def test_defaults(self, settings):
        """Seeded defaults are readable through the typed accessors."""
        assert settings.get_color_scheme() == "system"
        assert settings.is_first_launch()
        assert settings.get_tab_order() == DEFAULT_TAB_ORDER
        assert settings.get_default_account_id() is None
        assert settings.get_budget_alert_threshold() == pytest.approx(0.8)
        assert settings.get_tag_default_color() is None

    def test_color_scheme_validated(self, settings):
        """Only light, dark and system are accepted."""
        settings.set_color_scheme("dark")
        assert settings.get_color_scheme() == "dark"
        with pytest.raises(ValueError):
            settings.set_color_scheme("blue")

    def test_date_format_validated(self, settings):
        """Only the listed display formats are accepted."""
        settings.set_date_format("YYYY-MM-DD")
        assert settings.get_date_format() == "YYYY-MM-DD"
        with pytest.raises(ValueError):
            settings.set_date_format("%d/%m")
        assert settings.get_date_format() == "YYYY-MM-DD"

    def test_tab_order_cleans_keys(self, settings):
        """Unknown keys are dropped and missing ones appended."""
        settings.set_tab_order(["settings", "bogus", "tags"])
        order = settings.get_tab_order()
        assert order[:2] == ["settings", "tags"]
        assert sorted(order) == sorted(DEFAULT_TAB_ORDER)

    def test_first_launch_completes(self, settings):
        """complete_first_launch flips the flag."""
        settings.complete_first_launch()
        assert not settings.is_first_launch()

    def test_tag_color_validated(self, settings):
        """Tag default colors must be #RRGGBB."""
        with pytest.raises(ValueError):
            settings.set_tag_default_color("red")
        settings.set_tag_default_color("#AABBCC")
        assert settings.get_tag_default_color() == "#AABBCC"

    def test_threshold_bounds(self, settings):
        """Thresholds outside (0, 1] are rejected."""
        with pytest.raises(ValueError):
            settings.set_budget_alert_threshold(1.5)

    def test_settings_persist(self, tmp_path):
        """Settings survive closing and reopening the database."""
        path = str(tmp_path / "persist.db")
        first = DatabaseManager(path)
        first.initialize()
        first.set_setting("color_scheme", "light")
        first.close()
        second = DatabaseManager(path)
        second.initialize()
        assert second.get_setting("color_scheme") == "light"
        second.close()


class TestNotifications:
    def test_defaults(self, db):
        """The reminder is on at 20:50 by default."""
        svc = NotificationService(db)
        assert svc.is_enabled()
        assert svc.get_time() == (20, 50)

    def test_next_fire_time_today_or_tomorrow(self, db):
        """The next fire time is today if still ahead, else tomorrow."""
        svc = NotificationService(db)
        assert svc.next_fire_time(datetime(2026, 4, 15, 9, 0)) == datetime(2026, 4, 15, 20, 50)
        assert svc.next_fire_time(datetime(2026, 4, 15, 20, 50)) == datetime(2026, 4, 16, 20, 50)
        assert svc.delay_ms(datetime(2026, 4, 15, 20, 49)) == 60_000

    def test_disabled_has_no_fire_time(self, db):
        """A disabled reminder never fires."""
        svc = NotificationService(db)
        svc.set_enabled(False)
        assert svc.next_fire_time(datetime(2026, 4, 15, 9, 0)) is None
        assert svc.delay_ms(datetime(2026, 4, 15, 9, 0)) is None

    def test_set_time_validated(self, db):
        """Hours and minutes must be in range."""
        svc = NotificationService(db)
        with pytest.raises(ValueError):
            svc.set_time(24, 0)
        with pytest.raises(ValueError):
            svc.set_time(8, 60)
        svc.set_time(8, 5)
        assert svc.get_time() == (8, 5)

    def test_dispatch_fires_and_rearms(self, db):
        """Firing shows the reminder and schedules the next day."""
        clock = Clock(datetime(2026, 4, 15, 20, 0))
        svc = NotificationService(db, clock=clock)
        scheduler = FakeScheduler()
        shown = []
        svc.dispatch(scheduler, lambda title, body: shown.append((title, body)))
        (delay, _), = scheduler.jobs.values()
        assert delay == 50 * 60 * 1000

        clock.now = datetime(2026, 4, 15, 20, 50)
        scheduler.run_pending()
        assert shown == [(REMINDER_TITLE, REMINDER_BODY)]
        (delay, _), = scheduler.jobs.values()
        assert delay == 24 * 60 * 60 * 1000

    def test_setters_redispatch(self, db):
        """Changing the time replaces the pending job and disabling removes it."""
        clock = Clock(datetime(2026, 4, 15, 7, 0))
        svc = NotificationService(db, clock=clock)
        scheduler = FakeScheduler()
        svc.dispatch(scheduler, lambda title, body: None)
        svc.set_time(8, 0)
        (delay, _), = scheduler.jobs.values()
        assert delay == 60 * 60 * 1000
        svc.set_enabled(False)
        assert scheduler.jobs == {}
        assert not svc.is_scheduled


class TestBudgetReminders:
    REF = date(2026, 4, 15)

    def test_over_and_near(self, reminder_svc, budget_svc, tx_svc, wallet, groceries, cafes):
        """Over-budget alerts come first, then near-limit warnings."""
        budget_svc.create("Food", 100.0, "month", groceries.id)
        budget_svc.create("Coffee", 50.0, "month", cafes.id)
        budget_svc.create("Calm", 1000.0, "month")
        tx_svc.create("spending", 85.0, "2026-04-02", wallet.id, groceries.id)
        tx_svc.create("spending", 60.0, "2026-04-03", wallet.id, cafes.id)
        reminders = reminder_svc.get_reminders(self.REF)
        assert [(r.type, r.severity) for r in reminders] == [
            ("over_budget", "error"), ("near_budget", "warning"),
        ]
        assert reminders[0].title.startswith("Coffee")

    def test_expiry_is_next_period_start(self, reminder_svc, budget_svc, tx_svc, wallet, groceries):
        """A dismissed alert stays hidden until its period ends."""
        budget_svc.create("Weekly", 10.0, "week", groceries.id)
        tx_svc.create("spending", 20.0, "2026-04-14", wallet.id, groceries.id)
        reminder, = reminder_svc.get_reminders(self.REF)
        assert reminder_svc.compute_expiry(reminder, self.REF) == "2026-04-20"

    def test_dismissed_keys_filtered(
        self, reminder_svc, dismissed_dao, budget_svc, tx_svc, wallet, groceries
    ):
        """Dismissed keys are hidden until they expire."""
        budget_svc.create("Food", 10.0, "month", groceries.id)
        tx_svc.create("spending", 20.0, "2026-04-02", wallet.id, groceries.id)
        reminder, = reminder_svc.get_reminders(self.REF)
        dismissed_dao.dismiss(reminder.key, reminder_svc.compute_expiry(reminder, self.REF))
        hidden = dismissed_dao.get_active_keys("2026-04-30")
        assert reminder_svc.get_reminders(self.REF, dismissed_keys=hidden) == []
        assert dismissed_dao.get_active_keys("2026-05-01") == set()
