"""
Tests for read-only reports: the expense feed and the financial summary.
"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from pocketledger.models import Asset, AssetType, Budget, Expense, LoanDetails
from pocketledger.reports import all_expenses, build_financial_summary, day_label, expenses_by_day
from pocketledger.store import FinancialStore, SessionContext


@pytest.fixture
def populated(store):
    """Store with one named budget, misc spend and a loan."""
    food = store.add_budget(Budget(name="Food", amount=Decimal("3000"), color="green"))
    store.add_expense(
        Expense(title="Groceries", amount=Decimal("1200"), date=datetime(2026, 3, 4, 18, 0)),
        food.id,
    )
    store.add_expense(
        Expense(title="Lunch", amount=Decimal("300"), date=datetime(2026, 3, 5, 13, 0), note="team"),
        food.id,
    )
    store.add_expense(
        Expense(title="Parking", amount=Decimal("50"), date=datetime(2026, 3, 5, 9, 0)),
        store.misc_budget.id,
    )
    store.add_asset(Asset(
        name="Car Loan",
        type=AssetType.CAR_LOAN,
        details=LoanDetails(
            total_loan_amount=Decimal("200000"),
            remaining_amount=Decimal("150000"),
            monthly_emi=Decimal("8000"),
            interest_rate=Decimal("9.5"),
        ),
    ))
    return store


class TestExpenseFeed:
    """Tests for the cross-budget expense list."""

    def test_all_expenses_newest_first(self, populated):
        """Test named and miscellaneous expenses are merged by date."""
        titles = [e.expense.title for e in all_expenses(populated)]
        assert titles == ["Lunch", "Parking", "Groceries"]

    def test_entries_carry_budget(self, populated):
        """Test each entry names the budget it belongs to."""
        entries = {e.expense.title: e for e in all_expenses(populated)}
        assert entries["Lunch"].budget_name == "Food"
        assert entries["Lunch"].budget_color == "green"
        assert entries["Parking"].is_miscellaneous is True

    def test_search_is_case_insensitive(self, populated):
        """Test title search ignores case and surrounding spaces."""
        assert [e.expense.title for e in all_expenses(populated, "  LUN ")] == ["Lunch"]
        assert all_expenses(populated, "rent") == []

    def test_grouped_by_day(self, populated):
        """Test expenses are grouped by calendar day, newest day first."""
        grouped = expenses_by_day(populated)
        assert list(grouped) == [date(2026, 3, 5), date(2026, 3, 4)]
        assert [e.expense.title for e in grouped[date(2026, 3, 5)]] == ["Lunch", "Parking"]

    def test_day_labels(self):
        """Test Today, Yesterday and dated labels."""
        today = date(2026, 3, 5)
        assert day_label(date(2026, 3, 5), today) == "Today"
        assert day_label(date(2026, 3, 4), today) == "Yesterday"
        assert day_label(date(2026, 2, 1), today) == "Feb 01, 2026"


class TestFinancialSummary:
    """Tests for the plain-text summary."""

    def test_summary_sections(self, populated):
        """Test the summary lists balances, budgets, misc spend and assets."""
        summary = build_financial_summary(populated)

        assert summary.startswith("=== USER'S FINANCIAL DATA ===")
        assert summary.endswith("=== END OF FINANCIAL DATA ===")
        assert "USER: Asha Rao" in summary
        assert "Current Balance: ₹8450" in summary
        assert "Total Amount Spent: ₹1550" in summary
        assert "• Food: Budget ₹3000, Spent ₹1500, Remaining ₹1500 (50% used)" in summary
        assert "Lunch: ₹300 on Mar 05 (team)" in summary
        assert "Miscellaneous Total Spent: ₹50" in summary
        assert "Total Liabilities (Loans): ₹150000" in summary
        assert "Net Worth: ₹-150000" in summary
        assert "Loan: Total ₹200000, EMI ₹8000, Remaining ₹150000, Rate 9.5%" in summary

    def test_empty_sections_omitted(self, store):
        """Test a new user gets no budget, misc or asset sections."""
        summary = build_financial_summary(store, currency_symbol="$")
        assert "Current Balance: $10000" in summary
        assert "--- BUDGETS ---" not in summary
        assert "MISCELLANEOUS" not in summary
        assert "ASSETS" not in summary

    def test_summary_when_signed_out(self, repository):
        """Test the summary without a user."""
        store = FinancialStore(SessionContext(), repository)
        assert build_financial_summary(store) == "No financial data is currently available."


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
