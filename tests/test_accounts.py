import pytest


class TestAccountCrud:
    def test_create_account(self, account_svc):
        """A new account keeps its name, currency and initial balance."""
        acct = account_svc.create("  Cash  ", "USD", -25.5)
        assert acct.name == "Cash"
        assert acct.currency == "USD"
        assert acct.balance == -25.5

    def test_first_account_becomes_default(self, account_svc, settings):
        """The first created account is stored as the default account."""
        acct = account_svc.create("Cash", "USD")
        account_svc.create("Card", "USD")
        assert settings.get_default_account_id() == acct.id

    def test_empty_name_rejected(self, account_svc):
        """Blank names raise ValueError."""
        with pytest.raises(ValueError, match="cannot be empty"):
            account_svc.create("   ", "USD")

    def test_unknown_currency_rejected(self, account_svc):
        """Only known ISO currency codes are accepted."""
        with pytest.raises(ValueError, match="Unknown currency"):
            account_svc.create("Cash", "XXX")

    def test_duplicate_name_rejected(self, account_svc, wallet):
        """Account names are unique."""
        with pytest.raises(ValueError, match="already exists"):
            account_svc.create("Wallet", "EUR")

    def test_update_account(self, account_svc, wallet):
        """Update changes name, currency and visuals."""
        updated = account_svc.update(wallet.id, "Pocket", "EUR", 5.0, "coins", "#FF0000")
        assert updated.name == "Pocket"
        assert updated.currency == "EUR"
        assert updated.icon_name == "coins"


class TestBalances:
    def test_current_balance_includes_transactions(self, account_svc, tx_svc, wallet, groceries, salary):
        """Current balance is initial + income - spending."""
        tx_svc.create("income", 1000.0, "2026-01-05", wallet.id, salary.id)
        tx_svc.create("spending", 40.0, "2026-01-06", wallet.id, groceries.id)
        assert account_svc.current_balance(wallet.id) == pytest.approx(1060.0)

    def test_current_balance_includes_transfers(self, account_svc, transfer_svc, wallet, savings):
        """Transfers subtract value_from from the source and add value_to to the target."""
        transfer_svc.create(wallet.id, savings.id, 50.0, "2026-01-07", rate=0.9)
        balances = account_svc.current_balances()
        assert balances[wallet.id] == pytest.approx(50.0)
        assert balances[savings.id] == pytest.approx(45.0)

    def test_set_current_balance_adjusts_initial(self, account_svc, tx_svc, wallet, groceries):
        """Setting the current balance back-computes the initial balance."""
        tx_svc.create("spending", 30.0, "2026-01-06", wallet.id, groceries.id)
        account_svc.set_current_balance(wallet.id, 500.0)
        assert account_svc.current_balance(wallet.id) == pytest.approx(500.0)
        assert account_svc.get_by_id(wallet.id).balance == pytest.approx(530.0)


class TestAccountDeletion:
    def test_delete_moves_transactions_to_default(
        self, account_svc, tx_svc, budget_svc, wallet, groceries
    ):
        """Deleting a non-default account moves its transactions and budgets to the default."""
        other = account_svc.create("Card", "USD")
        tx = tx_svc.create("spending", 12.0, "2026-02-01", other.id, groceries.id)
        budget = budget_svc.create("Card food", 100.0, "month", groceries.id, other.id)
        account_svc.delete(other.id)
        assert account_svc.get_by_id(other.id) is None
        assert tx_svc.get_by_id(tx.id).account_id == wallet.id
        assert budget_svc.get_by_id(budget.id).account_id == wallet.id

    def test_delete_drops_transfers(self, account_svc, transfer_svc, wallet):
        """Transfers touching a deleted account are removed."""
        other = account_svc.create("Card", "USD")
        transfer_svc.create(wallet.id, other.id, 10.0, "2026-02-01")
        account_svc.delete(other.id)
        assert transfer_svc.get_all() == []

    def test_default_account_cannot_be_deleted(self, account_svc, wallet):
        """The default account is protected in move mode."""
        with pytest.raises(ValueError, match="default account cannot be deleted"):
            account_svc.delete(wallet.id)

    def test_delete_requires_default(self, account_svc, settings, wallet):
        """Move-mode deletion is refused when no default is set."""
        other = account_svc.create("Card", "USD")
        settings.set_default_account_id(None)
        with pytest.raises(ValueError, match="Set a default account"):
            account_svc.delete(other.id)

    def test_delete_with_transactions_cascades(self, account_svc, tx_svc, settings, wallet, groceries):
        """Cascade deletion removes transactions and clears the default."""
        tx_svc.create("spending", 12.0, "2026-02-01", wallet.id, groceries.id)
        account_svc.delete_with_transactions(wallet.id)
        assert tx_svc.get_all() == []
        assert settings.get_default_account_id() is None
