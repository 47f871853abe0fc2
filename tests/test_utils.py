from datetime import date

import pytest

from utils import app_config
from utils.currency import format_amount, format_currency, parse_amount
from utils.date_helpers import (
    period_range, period_start, next_period_start,
    format_display_date, parse_display_date, add_months,
)


class TestCurrency:
    def test_format_amount(self):
        """Amounts use a space for thousands and a comma for decimals."""
        assert format_amount(1234567.891) == "1 234 567,89"
        assert format_amount(0) == "0,00"

    def test_format_currency(self):
        """Currency codes follow the amount."""
        assert format_currency(12.5, "EUR") == "12,50 EUR"

    def test_parse_amount(self):
        """User input accepts spaces and comma decimals."""
        assert parse_amount("1 234,56") == pytest.approx(1234.56)
        assert parse_amount("7.5") == 7.5
        with pytest.raises(ValueError):
            parse_amount("  ")
        with pytest.raises(ValueError):
            parse_amount("abc")


class TestPeriods:
    def test_week_starts_monday(self):
        """Sunday belongs to the week that started the previous Monday."""
        assert period_start("week", date(2026, 4, 19)) == date(2026, 4, 13)

    def test_month_end_in_february(self):
        """Month ranges end on the last calendar day."""
        assert period_range("month", date(2028, 2, 10)) == (date(2028, 2, 1), date(2028, 2, 29))

    def test_next_period_start(self):
        """The next period begins the day after the current one ends."""
        assert next_period_start("year", date(2026, 6, 1)) == date(2027, 1, 1)
        assert next_period_start("week", date(2026, 4, 15)) == date(2026, 4, 20)

    def test_unknown_period(self):
        """Unknown periods raise ValueError."""
        with pytest.raises(ValueError):
            period_start("decade", date(2026, 1, 1))

    def test_add_months_clamps(self):
        """Adding months clamps the day to the month end."""
        assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)


class TestDisplayDates:
    def test_round_trip_formats(self):
        """Display formats convert to and from storage dates."""
        assert format_display_date("2026-04-15") == "15.04.2026"
        assert format_display_date("2026-04-15", "MM/DD/YYYY") == "04/15/2026"
        assert parse_display_date("15.04.2026", "DD.MM.YYYY") == date(2026, 4, 15)

    def test_parse_falls_back_to_iso(self):
        """ISO input is accepted whatever the display format."""
        assert parse_display_date("2026-04-15", "DD/MM/YYYY") == date(2026, 4, 15)


class TestAppConfig:
    def test_missing_file_is_empty(self, tmp_path):
        """A missing config file yields an empty dict."""
        assert app_config.load_config(tmp_path / "none.json") == {}

    def test_corrupt_file_is_empty(self, tmp_path):
        """A corrupt config file yields an empty dict."""
        path = tmp_path / "config.json"
        path.write_text("[1, 2", encoding="utf-8")
        assert app_config.load_config(path) == {}

    def test_save_and_load(self, tmp_path):
        """Saved config is read back and no temp file is left behind."""
        path = tmp_path / "nested" / "config.json"
        app_config.save_config({"db_folder": "/data", "log_level": "debug"}, path)
        assert app_config.load_config(path) == {"db_folder": "/data", "log_level": "debug"}
        assert not path.with_suffix(".tmp").exists()

    def test_db_folder_and_log_level(self, tmp_path, monkeypatch):
        """Accessors go through the default config file."""
        monkeypatch.setattr(app_config, "CONFIG_FILE", tmp_path / "config.json")
        assert app_config.get_db_folder() is None
        assert app_config.get_log_level() == "INFO"
        app_config.set_db_folder("/tmp/ft")
        assert app_config.get_db_folder() == "/tmp/ft"
        app_config.set_db_folder(None)
        assert app_config.get_db_folder() is None
