import pytest


class TestCategories:
    def test_placement_increments_within_type(self, category_svc, groceries, cafes, salary):
        """New categories are appended at the end of their own type."""
        assert groceries.placement == 1
        assert cafes.placement == 2
        assert salary.placement == 1

    def test_name_unique_per_type(self, category_svc, groceries):
        """The same name can exist once per type."""
        with pytest.raises(ValueError, match="already exists"):
            category_svc.create("spending", "Groceries", "cart")
        income = category_svc.create("income", "Groceries", "cart")
        assert income.type == "income"

    def test_icon_required(self, category_svc):
        """Categories must have an icon name."""
        with pytest.raises(ValueError, match="icon"):
            category_svc.create("spending", "Books", "")

    def test_move_reorders(self, category_svc, groceries, cafes):
        """Moving rewrites placements 1..n in the new order."""
        third = category_svc.create("spending", "Home", "house")
        ordered = category_svc.move(third.id, 0)
        assert [c.id for c in ordered] == [third.id, groceries.id, cafes.id]
        assert [c.placement for c in ordered] == [1, 2, 3]

    def test_similar_names(self, category_svc, groceries, cafes):
        """Suggestions are case-insensitive substrings."""
        assert category_svc.similar_names("spending", "CAF") == ["Cafes"]
        assert category_svc.similar_names("spending", "") == []

    def test_delete_moves_transactions(self, category_svc, tx_svc, budget_svc, wallet, groceries, cafes):
        """Deleting with a target moves transactions and budgets to it."""
        tx = tx_svc.create("spending", 5.0, "2026-03-01", wallet.id, groceries.id)
        budget = budget_svc.create("Food", 100.0, "month", category_id=groceries.id)
        category_svc.delete(groceries.id, cafes.id)
        assert category_svc.get_by_id(groceries.id) is None
        assert tx_svc.get_by_id(tx.id).category_id == cafes.id
        assert budget_svc.get_by_id(budget.id).category_id == cafes.id

    def test_delete_rejects_other_type(self, category_svc, groceries, salary):
        """Transactions cannot move to a category of the other type."""
        with pytest.raises(ValueError, match="same type"):
            category_svc.delete(groceries.id, salary.id)

    def test_delete_rejects_same_target(self, category_svc, groceries):
        """The move target must be another category."""
        with pytest.raises(ValueError, match="different category"):
            category_svc.delete(groceries.id, groceries.id)

    def test_delete_with_transactions(self, category_svc, tx_svc, budget_svc, wallet, groceries):
        """Cascade deletion removes the category's transactions and budgets."""
        tx_svc.create("spending", 5.0, "2026-03-01", wallet.id, groceries.id)
        budget = budget_svc.create("Food", 100.0, "month", category_id=groceries.id)
        category_svc.delete_with_transactions(groceries.id)
        assert tx_svc.get_all() == []
        assert budget_svc.get_by_id(budget.id) is None

    def test_seed_defaults_only_when_empty(self, category_svc):
        """Defaults are seeded once into an empty table."""
        assert category_svc.seed_defaults() == 14
        assert len(category_svc.get_by_type("spending")) == 10
        assert len(category_svc.get_by_type("income")) == 4
        assert category_svc.seed_defaults() == 0


class TestTags:
    def test_create_uses_default_color(self, tag_svc, settings):
        """The tag default color setting applies when no color is given."""
        settings.set_tag_default_color("#123456")
        assert tag_svc.create("trip").color_hex == "#123456"

    def test_name_unique_case_insensitive(self, tag_svc):
        """Tag names collide regardless of case."""
        tag_svc.create("Trip", "#FF0000")
        with pytest.raises(ValueError, match="already exists"):
            tag_svc.create("trip")

    def test_get_or_create_reuses(self, tag_svc):
        """get_or_create returns the existing tag."""
        first = tag_svc.get_or_create("work")
        assert tag_svc.get_or_create(" work ").id == first.id

    def test_delete_detaches(self, tag_svc, tx_svc, wallet, groceries):
        """Deleting a tag keeps the transactions."""
        tag = tag_svc.create("trip", "#FF0000")
        tx = tx_svc.create("spending", 5.0, "2026-03-01", wallet.id, groceries.id, tag_ids=[tag.id])
        tag_svc.delete(tag.id)
        assert tx_svc.get_by_id(tx.id).tags == []

    def test_delete_with_transactions(self, tag_svc, tx_svc, wallet, groceries):
        """Cascade deletion removes tagged transactions only."""
        tag = tag_svc.create("trip", "#FF0000")
        tx_svc.create("spending", 5.0, "2026-03-01", wallet.id, groceries.id, tag_ids=[tag.id])
        keep = tx_svc.create("spending", 7.0, "2026-03-01", wallet.id, groceries.id)
        assert tag_svc.delete_with_transactions(tag.id) == 1
        assert [t.id for t in tx_svc.get_all()] == [keep.id]
