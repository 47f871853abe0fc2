import sqlite3
from datetime import date

import pytest

from services.search_service import SearchFilter
from services.transfer_service import TransferService, convert
from utils.date_helpers import today_str


class TestTransactions:
    def test_create_with_tags(self, tx_svc, tag_svc, wallet, groceries):
        """Created transactions carry account, category and tag details."""
        tag = tag_svc.create("food", "#00FF00")
        tx = tx_svc.create("spending", 12.5, "2026-04-02", wallet.id, groceries.id, " lunch ", [tag.id])
        assert tx.comment == "lunch"
        assert tx.account_name == "Wallet"
        assert tx.currency == "USD"
        assert tx.category_name == "Groceries"
        assert tx.tag_names == "food"

    def test_value_must_be_positive(self, tx_svc, wallet, groceries):
        """Zero or negative values are rejected."""
        with pytest.raises(ValueError, match="greater than zero"):
            tx_svc.create("spending", 0, "2026-04-02", wallet.id, groceries.id)

    def test_category_required(self, tx_svc, wallet):
        """A transaction needs a category."""
        with pytest.raises(ValueError, match="select a category"):
            tx_svc.create("spending", 1.0, "2026-04-02", wallet.id, None)

    def test_category_type_must_match(self, tx_svc, wallet, salary):
        """A spending transaction cannot use an income category."""
        with pytest.raises(ValueError, match="not a spending category"):
            tx_svc.create("spending", 1.0, "2026-04-02", wallet.id, salary.id)

    def test_invalid_date(self, tx_svc, wallet, groceries):
        """Dates must parse."""
        with pytest.raises(ValueError, match="Invalid date"):
            tx_svc.create("spending", 1.0, "not-a-date", wallet.id, groceries.id)

    def test_update_replaces_tags(self, tx_svc, tag_svc, wallet, groceries):
        """Updating replaces the tag set."""
        a = tag_svc.create("a", "#000001")
        b = tag_svc.create("b", "#000002")
        tx = tx_svc.create("spending", 3.0, "2026-04-02", wallet.id, groceries.id, tag_ids=[a.id])
        updated = tx_svc.update(tx.id, "spending", 4.0, "2026-04-03", wallet.id, groceries.id, tag_ids=[b.id])
        assert updated.value == 4.0
        assert updated.tag_ids == [b.id]

    def test_get_in_range(self, tx_svc, wallet, groceries):
        """Range queries are inclusive and newest first."""
        for d in ("2026-04-01", "2026-04-15", "2026-05-01"):
            tx_svc.create("spending", 1.0, d, wallet.id, groceries.id)
        dates = [t.date for t in tx_svc.get_in_range("2026-04-01", "2026-04-30")]
        assert dates == ["2026-04-15", "2026-04-01"]

    def test_bulk_insert_test_data(self, tx_svc, wallet, groceries, salary):
        """The developer tool inserts the requested count."""
        assert tx_svc.bulk_insert_test_data(25, wallet.id) == 25
        assert len(tx_svc.get_for_account(wallet.id)) == 25

    def test_date_stored_in_iso_form(self, tx_svc, search_svc, wallet, groceries):
        """Slash- and dot-separated dates are stored as YYYY-MM-DD and stay searchable."""
        tx = tx_svc.create("spending", 10.0, "2026/10/05", wallet.id, groceries.id)
        assert tx.date == "2026-10-05"
        updated = tx_svc.update(tx.id, "spending", 10.0, "2026.10.06", wallet.id, groceries.id)
        assert updated.date == "2026-10-06"
        assert [t.id for t in tx_svc.get_in_range("2026-10-01", "2026-10-31")] == [tx.id]
        found = search_svc.search(SearchFilter(date_filter="month", ref_date=date(2026, 10, 15)))
        assert [t.id for t in found] == [tx.id]

    def test_unknown_tag_rejected(self, tx_svc, wallet, groceries):
        """A tag id that no longer exists is a validation error, not a half-written row."""
        with pytest.raises(ValueError, match="no longer exists"):
            tx_svc.create("spending", 1.0, "2026-04-02", wallet.id, groceries.id, tag_ids=[999])
        assert tx_svc.get_all() == []

    def test_failed_write_rolled_back(self, tx_dao, tx_svc, tag_svc, wallet, groceries):
        """A failing tag insert leaves nothing pending for the next commit."""
        with pytest.raises(sqlite3.IntegrityError):
            tx_dao.create("spending", 1.0, "2026-04-02", wallet.id, groceries.id, tag_ids=[999])
        tag_svc.create("later")
        assert tx_svc.get_all() == []

    def test_failed_update_keeps_old_row(self, tx_dao, tx_svc, tag_svc, wallet, groceries):
        """A failing update leaves the stored transaction and its tags untouched."""
        tag = tag_svc.create("keep")
        tx = tx_svc.create("spending", 2.0, "2026-04-02", wallet.id, groceries.id, tag_ids=[tag.id])
        with pytest.raises(sqlite3.IntegrityError):
            tx_dao.update(tx.id, "spending", 9.0, "2026-04-09", wallet.id, groceries.id, tag_ids=[999])
        tag_svc.create("later")
        stored = tx_svc.get_by_id(tx.id)
        assert stored.value == 2.0
        assert stored.tag_ids == [tag.id]


class TestTransfers:
    def test_same_currency_copies_value(self, transfer_svc, account_svc, wallet):
        """Same-currency transfers credit the same value."""
        card = account_svc.create("Card", "USD")
        tr = transfer_svc.create(wallet.id, card.id, 40.0, "2026-04-02")
        assert tr.value_to == 40.0
        assert TransferService.derive_rate(tr) is None

    def test_date_stored_in_iso_form(self, transfer_svc, account_svc, wallet):
        """Transfer dates are normalised to YYYY-MM-DD on create and update."""
        card = account_svc.create("Card", "USD")
        tr = transfer_svc.create(wallet.id, card.id, 5.0, "2026/10/05")
        assert tr.date == "2026-10-05"
        updated = transfer_svc.update(tr.id, wallet.id, card.id, 5.0, "2026.10.07")
        assert updated.date == "2026-10-07"

    def test_cross_currency_needs_rate(self, transfer_svc, wallet, savings):
        """A rate is required between different currencies."""
        with pytest.raises(ValueError, match="exchange rate"):
            transfer_svc.create(wallet.id, savings.id, 40.0, "2026-04-02")

    def test_cross_currency_divide(self, transfer_svc, wallet, savings):
        """Divide way converts value_from / rate and derive_rate recovers it."""
        tr = transfer_svc.create(wallet.id, savings.id, 100.0, "2026-04-02", rate=1.25, rate_way="divide")
        assert tr.value_to == pytest.approx(80.0)
        assert TransferService.derive_rate(tr) == pytest.approx(1.25)

    def test_same_account_rejected(self, transfer_svc, wallet):
        """Source and target must differ."""
        with pytest.raises(ValueError, match="same account"):
            transfer_svc.create(wallet.id, wallet.id, 10.0, "2026-04-02")

    def test_convert_divide_by_zero(self):
        """Dividing by a zero rate yields zero."""
        assert convert(10.0, 0, "divide") == 0.0
        assert convert(10.0, 2, "multiply") == 20.0

    def test_paging(self, transfer_svc, account_svc, wallet):
        """Pages are 0-based and newest first."""
        card = account_svc.create("Card", "USD")
        for day in range(1, 6):
            transfer_svc.create(wallet.id, card.id, float(day), f"2026-04-0{day}")
        first = transfer_svc.get_page(0, page_size=2)
        assert [t.date for t in first] == ["2026-04-05", "2026-04-04"]
        assert transfer_svc.page_count(page_size=2) == 3

    def test_template_from(self, transfer_svc, account_svc, wallet):
        """A template is an unsaved copy dated today."""
        card = account_svc.create("Card", "USD")
        tr = transfer_svc.create(wallet.id, card.id, 9.0, "2026-01-01", "rent")
        draft = transfer_svc.template_from(tr.id)
        assert draft.id == 0
        assert draft.comment == "rent"
        assert draft.date == today_str()
        assert len(transfer_svc.get_all()) == 1
