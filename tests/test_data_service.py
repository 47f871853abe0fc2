import csv
import json
from datetime import date

import pytest

from services.data_service import CSV_HEADER


@pytest.fixture
def populated(account_svc, tx_svc, tag_svc, transfer_svc, budget_svc, wallet, savings, groceries, salary):
    trip = tag_svc.create("trip", "#111111")
    tx_svc.create("spending", 1234.5, "2026-04-02", wallet.id, groceries.id, "big shop", [trip.id])
    tx_svc.create("income", 10.0, "2026-04-01", savings.id, salary.id)
    transfer_svc.create(wallet.id, savings.id, 20.0, "2026-04-03", rate=0.5)
    budget_svc.create("Food", 300.0, "month", groceries.id, wallet.id)
    return {"trip": trip}


class TestExport:
    def test_export_contains_graph(self, data_svc, populated, wallet):
        """The export keeps ids and cross references."""
        data = data_svc.export_json()
        assert data["export_version"] == 1
        assert len(data["balance_accounts"]) == 2
        assert len(data["transactions"]) == 2
        shop = next(t for t in data["transactions"] if t["comment"] == "big shop")
        assert shop["account_id"] == wallet.id
        assert shop["tag_ids"] == [populated["trip"].id]
        assert data["default_account_id"] == wallet.id

    def test_export_is_json_serializable(self, data_svc, populated, tmp_path):
        """The export file is plain JSON."""
        path = tmp_path / "export.json"
        data_svc.export_json_file(str(path))
        assert json.loads(path.read_text(encoding="utf-8"))["transfers"][0]["value_to"] == 10.0

    def test_csv_export(self, data_svc, populated, tmp_path):
        """CSV rows are date ascending with formatted values."""
        path = tmp_path / "tx.csv"
        count = data_svc.export_transactions_csv(str(path), date(2026, 4, 1), date(2026, 4, 30))
        assert count == 2
        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[0] == CSV_HEADER
        assert rows[1][0] == "2026-04-01"
        assert rows[2] == [
            "2026-04-02", "spending", "Wallet", "USD", "Groceries", "trip", "1 234,50", "big shop",
        ]

    def test_csv_account_filter(self, data_svc, populated, savings):
        """The CSV export can be limited to one account."""
        rows = data_svc.transactions_csv_rows(date(2026, 4, 1), date(2026, 4, 30), savings.id)
        assert len(rows) == 2
        assert rows[1][2] == "Savings"

    def test_csv_rejects_reversed_range(self, data_svc):
        """Start after end is a validation error."""
        with pytest.raises(ValueError):
            data_svc.transactions_csv_rows(date(2026, 5, 1), date(2026, 4, 1))


class TestImport:
    def test_preview_counts(self, data_svc, populated):
        """Preview returns entity counts without writing."""
        counts = data_svc.preview_import(data_svc.export_json())
        assert counts == {
            "balance_accounts": 2, "categories": 2, "tags": 1,
            "transactions": 2, "transfers": 1, "budgets": 1,
        }

    def test_import_replaces_data(self, data_svc, populated, account_svc, tx_svc, category_svc):
        """Importing an export restores the same graph with remapped ids."""
        data = data_svc.export_json()
        account_svc.create("Extra", "USD")
        stats = data_svc.import_json(data)
        assert stats["transactions"] == 2
        assert {a.name for a in account_svc.get_all()} == {"Wallet", "Savings"}
        shop = next(t for t in tx_svc.get_all() if t.comment == "big shop")
        assert shop.account_name == "Wallet"
        assert shop.category_name == "Groceries"
        assert shop.tag_names == "trip"
        assert account_svc.get_default().name == "Wallet"
        assert len(category_svc.get_all()) == 2

    def test_import_balances_survive(self, data_svc, populated, account_svc):
        """Current balances are identical after a round trip."""
        before = {a.name: b for a, b in
                  ((account_svc.get_by_id(i), v) for i, v in account_svc.current_balances().items())}
        data_svc.import_json(data_svc.export_json())
        after = {a.name: b for a, b in
                 ((account_svc.get_by_id(i), v) for i, v in account_svc.current_balances().items())}
        assert after == pytest.approx(before)

    def test_invalid_document_leaves_data(self, data_svc, populated, tx_svc):
        """A document with a dangling reference is refused before writing."""
        data = data_svc.export_json()
        data["transactions"][0]["category_id"] = 9999
        with pytest.raises(ValueError, match="Invalid export file"):
            data_svc.import_json(data)
        assert len(tx_svc.get_all()) == 2

    def test_not_an_object(self, data_svc):
        """Top-level lists are rejected."""
        with pytest.raises(ValueError, match="Invalid export file"):
            data_svc.preview_import([])

    def test_duplicate_tag_names_refused(self, data_svc, populated, tx_svc):
        """Tag names differing only by case are refused before writing."""
        data = data_svc.export_json()
        data["tags"].append({"id": 999, "name": " TRIP ", "color_hex": "#222222"})
        with pytest.raises(ValueError, match="duplicate tag name"):
            data_svc.preview_import(data)
        with pytest.raises(ValueError, match="duplicate tag name"):
            data_svc.import_json(data)
        assert len(tx_svc.get_all()) == 2

    def test_duplicate_category_names_per_type(self, data_svc, populated):
        """A category name may repeat across types but not within one."""
        data = data_svc.export_json()
        data["categories"].append({"id": 998, "type": "income", "name": "Groceries", "icon_name": "cart"})
        assert data_svc.preview_import(data)["categories"] == 3
        data["categories"].append({"id": 997, "type": "spending", "name": "Groceries", "icon_name": "cart"})
        with pytest.raises(ValueError, match="duplicate category name"):
            data_svc.preview_import(data)

    def test_negative_target_value_refused(self, data_svc, populated):
        """Transfers must credit a non-negative value."""
        data = data_svc.export_json()
        data["transfers"][0]["value_to"] = -1
        with pytest.raises(ValueError, match="target value"):
            data_svc.preview_import(data)

    def test_import_normalises_dates(self, data_svc, populated, tx_svc, transfer_svc):
        """Imported dates are stored as YYYY-MM-DD whatever separator the file used."""
        data = data_svc.export_json()
        for tx in data["transactions"]:
            tx["date"] = tx["date"].replace("-", "/")
        data["transfers"][0]["date"] = "2026.04.03"
        data_svc.import_json(data)
        assert sorted(t.date for t in tx_svc.get_in_range("2026-04-01", "2026-04-30")) == [
            "2026-04-01", "2026-04-02",
        ]
        assert transfer_svc.get_all()[0].date == "2026-04-03"

    def test_load_json_file_bad_json(self, data_svc, tmp_path):
        """Unparseable files raise ValueError."""
        path = tmp_path / "bad.json"
        path.write_text("{nope", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid export file"):
            data_svc.load_json_file(str(path))


class TestDeleteAll:
    def test_delete_all_data(self, data_svc, populated, account_svc, category_svc, settings):
        """Every user table is emptied and the default account is reset."""
        data_svc.delete_all_data()
        assert account_svc.get_all() == []
        assert category_svc.get_all() == []
        assert settings.get_default_account_id() is None
