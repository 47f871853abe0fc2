import logging

from database.category_dao import CategoryDAO
from models.category import Category
from utils.constants import (
    TRANSACTION_TYPES, PALETTE,
    DEFAULT_SPENDING_CATEGORIES, DEFAULT_INCOME_CATEGORIES,
)

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, category_dao: CategoryDAO):
        self._dao = category_dao

    def get_all(self) -> list[Category]:
        return self._dao.get_all()

    def get_by_id(self, category_id: int) -> Category | None:
        return self._dao.get_by_id(category_id)

    def get_by_type(self, type_: str) -> list[Category]:
        self._validate_type(type_)
        return self._dao.get_by_type(type_)

    def create(self, type_: str, name: str, icon_name: str, color_hex: str = "#888888") -> Category:
        self._validate_type(type_)
        name = name.strip()
        self._validate_fields(name, icon_name)
        if self._dao.get_by_type_and_name(type_, name):
            raise ValueError(f"A {type_} category named '{name}' already exists.")
        return self._dao.create(type_, name, icon_name.strip(), color_hex)

    def update(self, category_id: int, name: str, icon_name: str, color_hex: str) -> Category:
        current = self._require(category_id)
        name = name.strip()
        self._validate_fields(name, icon_name)
        existing = self._dao.get_by_type_and_name(current.type, name)
        if existing and existing.id != category_id:
            raise ValueError(f"A {current.type} category named '{name}' already exists.")
        return self._dao.update(category_id, name, icon_name.strip(), color_hex)

    def move(self, category_id: int, new_index: int) -> list[Category]:
        """Move a category to new_index (0-based) within its type and renumber placements."""
        cat = self._require(category_id)
        siblings = self._dao.get_by_type(cat.type)
        ids = [c.id for c in siblings if c.id != category_id]
        new_index = max(0, min(new_index, len(ids)))
        ids.insert(new_index, category_id)
        self._dao.set_placements(ids)
        return self._dao.get_by_type(cat.type)

    def similar_names(self, type_: str, text: str) -> list[str]:
        """Existing category names of this type containing text (case-insensitive)."""
        needle = text.strip().lower()
        if not needle:
            return []
        return [c.name for c in self._dao.get_by_type(type_) if needle in c.name.lower()]

    # ── Deletion ─────────────────────────────────────────────────────────────

    def delete(self, category_id: int, move_to_id: int):
        """Delete the category after moving its transactions and budgets to move_to_id."""
        cat = self._require(category_id)
        target = self._require(move_to_id)
        if target.id == cat.id:
            raise ValueError("Choose a different category to move transactions to.")
        if target.type != cat.type:
            raise ValueError("Transactions can only be moved to a category of the same type.")
        self._dao.move_dependents(category_id, move_to_id)
        self._dao.delete(category_id)

    def delete_with_transactions(self, category_id: int):
        self._require(category_id)
        self._dao.delete_dependents(category_id)
        self._dao.delete(category_id)

    def seed_defaults(self) -> int:
        """Insert the default spending and income categories into an empty table."""
        if self._dao.count() > 0:
            return 0
        created = 0
        for type_, defaults in (
            ("spending", DEFAULT_SPENDING_CATEGORIES),
            ("income", DEFAULT_INCOME_CATEGORIES),
        ):
            for placement, item in enumerate(defaults, start=1):
                self._dao.create(
                    type_, item["name"], item["icon_name"],
                    PALETTE[item["color"]], placement,
                )
                created += 1
        logger.info("Seeded %d default categories", created)
        return created

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _require(self, category_id: int) -> Category:
        cat = self._dao.get_by_id(category_id)
        if cat is None:
            raise ValueError("Category not found.")
        return cat

    @staticmethod
    def _validate_type(type_: str):
        if type_ not in TRANSACTION_TYPES:
            raise ValueError(f"Category type must be one of: {', '.join(TRANSACTION_TYPES)}.")

    @staticmethod
    def _validate_fields(name: str, icon_name: str):
        if not name:
            raise ValueError("Category name cannot be empty.")
        if not icon_name or not icon_name.strip():
            raise ValueError("Please choose an icon.")
