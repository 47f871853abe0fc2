import json
import logging

from database.db_manager import DatabaseManager
from utils.constants import COLOR_SCHEMES, DEFAULT_TAB_ORDER, BUDGET_ALERT_THRESHOLD
from utils.date_helpers import DATE_FORMAT_OPTIONS

logger = logging.getLogger(__name__)


class SettingsService:
    """Typed accessors over the app_settings key/value table."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    # ── Appearance ────────────────────────────────────────────────────────────

    def get_color_scheme(self) -> str:
        value = self._db.get_setting("color_scheme", "system")
        return value if value in COLOR_SCHEMES else "system"

    def set_color_scheme(self, scheme: str):
        if scheme not in COLOR_SCHEMES:
            raise ValueError(f"Color scheme must be one of: {', '.join(COLOR_SCHEMES)}.")
        self._db.set_setting("color_scheme", scheme)

    def get_date_format(self) -> str:
        value = self._db.get_setting("date_format", "DD.MM.YYYY")
        return value if value in DATE_FORMAT_OPTIONS else "DD.MM.YYYY"

    def set_date_format(self, fmt: str):
        if fmt not in DATE_FORMAT_OPTIONS:
            raise ValueError(f"Date format must be one of: {', '.join(DATE_FORMAT_OPTIONS)}.")
        self._db.set_setting("date_format", fmt)

    # ── Tags ──────────────────────────────────────────────────────────────────

    def get_tag_default_color(self) -> str | None:
        return self._db.get_setting("tag_default_color", "") or None

    def set_tag_default_color(self, color_hex: str | None):
        if color_hex and not _is_hex_color(color_hex):
            raise ValueError("Tag color must look like #RRGGBB.")
        self._db.set_setting("tag_default_color", color_hex or "")

    # ── First launch ──────────────────────────────────────────────────────────

    def is_first_launch(self) -> bool:
        return self._db.get_setting("first_launch", "1") == "1"

    def complete_first_launch(self):
        self._db.set_setting("first_launch", "0")
        logger.info("First launch completed")

    # ── Tab order ─────────────────────────────────────────────────────────────

    def get_tab_order(self) -> list[str]:
        raw = self._db.get_setting("tab_order", "")
        try:
            stored = json.loads(raw) if raw else []
        except ValueError:
            logger.warning("Ignoring unreadable tab_order setting: %r", raw)
            stored = []
        if not isinstance(stored, list):
            stored = []
        order = [key for key in stored if key in DEFAULT_TAB_ORDER]
        order += [key for key in DEFAULT_TAB_ORDER if key not in order]
        return order

    def set_tab_order(self, order: list[str]):
        cleaned = [key for key in order if key in DEFAULT_TAB_ORDER]
        cleaned += [key for key in DEFAULT_TAB_ORDER if key not in cleaned]
        self._db.set_setting("tab_order", json.dumps(cleaned))

    # ── Default account ───────────────────────────────────────────────────────

    def get_default_account_id(self) -> int | None:
        raw = self._db.get_setting("default_account_id", "")
        return int(raw) if raw.isdigit() else None

    def set_default_account_id(self, account_id: int | None):
        self._db.set_setting("default_account_id", str(account_id) if account_id else "")

    # ── Budget alerts ─────────────────────────────────────────────────────────

    def get_budget_alert_threshold(self) -> float:
        raw = self._db.get_setting("budget_alert_threshold", str(BUDGET_ALERT_THRESHOLD))
        try:
            return float(raw)
        except ValueError:
            return BUDGET_ALERT_THRESHOLD

    def set_budget_alert_threshold(self, threshold: float):
        if not 0 < threshold <= 1:
            raise ValueError("Alert threshold must be between 0 and 1.")
        self._db.set_setting("budget_alert_threshold", f"{threshold:.2f}")


def _is_hex_color(value: str) -> bool:
    if len(value) != 7 or not value.startswith("#"):
        return False
    try:
        int(value[1:], 16)
    except ValueError:
        return False
    return True
