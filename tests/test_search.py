from datetime import date

import pytest

from services.search_service import SearchFilter, matches_text, group_by_day
from models.transaction import Transaction

REF = date(2026, 4, 15)


@pytest.fixture
def sample(tx_svc, tag_svc, wallet, groceries, cafes, salary):
    trip = tag_svc.create("trip", "#111111")
    work = tag_svc.create("work", "#222222")
    return {
        "trip": trip,
        "work": work,
        "bread": tx_svc.create("spending", 3.5, "2026-04-14", wallet.id, groceries.id, "bread"),
        "coffee": tx_svc.create(
            "spending", 4.2, "2026-04-14", wallet.id, cafes.id, "flat white", [trip.id, work.id]
        ),
        "pay": tx_svc.create("income", 1200.0, "2026-04-01", wallet.id, salary.id, "", [work.id]),
        "old": tx_svc.create("spending", 3.5, "2026-03-01", wallet.id, groceries.id),
    }


class TestSearch:
    def test_month_filter(self, search_svc, sample):
        """The month filter keeps the period around ref_date."""
        found = search_svc.search(SearchFilter(ref_date=REF))
        assert {t.id for t in found} == {sample["bread"].id, sample["coffee"].id, sample["pay"].id}

    def test_type_filter(self, search_svc, sample):
        """Type narrows to spending or income."""
        found = search_svc.search(SearchFilter(type="income", ref_date=REF))
        assert [t.id for t in found] == [sample["pay"].id]

    def test_all_tags_required(self, search_svc, sample):
        """A transaction must carry every selected tag."""
        flt = SearchFilter(tag_ids=[sample["trip"].id, sample["work"].id], ref_date=REF)
        assert [t.id for t in search_svc.search(flt)] == [sample["coffee"].id]

    def test_numeric_text_matches_value(self, search_svc, sample):
        """Numeric text with a comma decimal matches the exact value."""
        flt = SearchFilter(text="3,5", date_filter="year", ref_date=REF)
        assert {t.id for t in search_svc.search(flt)} == {sample["bread"].id, sample["old"].id}

    def test_text_matches_fields(self, search_svc, sample):
        """Free text matches category, tags and comment case-insensitively."""
        assert [t.id for t in search_svc.search(SearchFilter(text="CAF", ref_date=REF))] == [sample["coffee"].id]
        assert [t.id for t in search_svc.search(SearchFilter(text="white", ref_date=REF))] == [sample["coffee"].id]
        found = search_svc.search(SearchFilter(text="work", ref_date=REF))
        assert {t.id for t in found} == {sample["coffee"].id, sample["pay"].id}

    def test_custom_range_validation(self, search_svc):
        """Custom ranges need ordered bounds."""
        with pytest.raises(ValueError):
            search_svc.search(SearchFilter(date_filter="custom", start=REF, end=date(2026, 4, 1)))

    def test_grouped_by_day_descending(self, search_svc, sample):
        """Groups are per day, newest day first, with signed totals."""
        groups = search_svc.search_grouped(SearchFilter(ref_date=REF))
        assert [g.date for g in groups] == ["2026-04-14", "2026-04-01"]
        assert groups[0].total == pytest.approx(-7.7)
        assert groups[1].total == pytest.approx(1200.0)

    def test_with_type_clears_conflicting_category(self, search_svc, groceries):
        """Switching type drops a category of the other type."""
        flt = SearchFilter(category_id=groceries.id)
        assert search_svc.with_type(flt, "income").category_id is None
        assert search_svc.with_type(flt, "spending").category_id == groceries.id
        assert flt.type == "both"


class TestTextMatching:
    def _tx(self, **kw):
        base = dict(id=1, type="spending", value=10.0, date="2026-04-01",
                    account_id=1, category_id=1, account_name="Wallet", currency="USD",
                    category_name="Home")
        base.update(kw)
        return Transaction(**base)

    def test_blank_text_matches_everything(self):
        """Empty text is no filter."""
        assert matches_text(self._tx(), "  ")

    def test_currency_matches(self):
        """The account currency is searchable."""
        assert matches_text(self._tx(), "usd")

    def test_non_finite_numbers_are_text(self):
        """'inf' and 'nan' are matched as text, not numbers."""
        assert not matches_text(self._tx(), "nan")
        assert matches_text(self._tx(comment="Infinity pool"), "inf")

    def test_group_by_day_empty(self):
        """No transactions, no groups."""
        assert group_by_day([]) == []
