import logging
import random

from database.tag_dao import TagDAO
from models.tag import Tag
from services.settings_service import SettingsService
from utils.constants import PALETTE

logger = logging.getLogger(__name__)


class TagService:
    def __init__(self, tag_dao: TagDAO, settings: SettingsService):
        self._dao = tag_dao
        self._settings = settings

    def get_all(self) -> list[Tag]:
        return self._dao.get_all()

    def get_by_id(self, tag_id: int) -> Tag | None:
        return self._dao.get_by_id(tag_id)

    def create(self, name: str, color_hex: str | None = None) -> Tag:
        name = name.strip()
        if not name:
            raise ValueError("Tag name cannot be empty.")
        if self._dao.get_by_name(name):
            raise ValueError(f"A tag named '{name}' already exists.")
        return self._dao.create(name, color_hex or self.new_tag_color())

    def get_or_create(self, name: str) -> Tag:
        existing = self._dao.get_by_name(name.strip())
        return existing or self.create(name)

    def update(self, tag_id: int, name: str, color_hex: str) -> Tag:
        name = name.strip()
        if not name:
            raise ValueError("Tag name cannot be empty.")
        existing = self._dao.get_by_name(name)
        if existing and existing.id != tag_id:
            raise ValueError(f"A tag named '{name}' already exists.")
        if not self._dao.get_by_id(tag_id):
            raise ValueError("Tag not found.")
        return self._dao.update(tag_id, name, color_hex)

    def delete(self, tag_id: int):
        """Delete the tag; tagged transactions are kept without it."""
        self._dao.delete(tag_id)

    def delete_with_transactions(self, tag_id: int) -> int:
        removed = self._dao.delete_tagged_transactions(tag_id)
        self._dao.delete(tag_id)
        logger.info("Deleted tag %s with %d transactions", tag_id, removed)
        return removed

    def new_tag_color(self) -> str:
        return self._settings.get_tag_default_color() or random.choice(list(PALETTE.values()))
