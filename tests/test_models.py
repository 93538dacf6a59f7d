"""
Tests for pocketledger models

Test strategy:
1. Unit tests for derived values (budget totals, asset amounts)
2. Validation rules enforced by the models themselves
3. No storage involved (see test_storage.py and test_store.py)
"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from pydantic import ValidationError as SchemaError

from pocketledger.models import (
    ASSET_TYPE_TABLE,
    Asset,
    AssetCategory,
    AssetType,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Budget,
    EMIPayment,
    Expense,
    FixedDepositDetails,
    GoldDetails,
    InsuranceDetails,
    LoanDetails,
    MutualFundDetails,
    PortfolioTotals,
    StockDetails,
    User,
    make_miscellaneous_budget,
    start_of_day,
    types_for_category,
)


class TestBudgetModels:
    """Tests for Budget and Expense."""

    def test_expense_defaults(self):
        """Test Expense gets an id, a timestamp and an empty note."""
        expense = Expense(title="Coffee", amount=Decimal("120"))
        assert expense.id is not None
        assert isinstance(expense.date, datetime)
        assert expense.note == ""

    def test_expense_strips_whitespace(self):
        """Test that whitespace is stripped from the title."""
        expense = Expense(title="  Coffee  ", amount=Decimal("120"))
        assert expense.title == "Coffee"

    def test_budget_derived_values(self):
        """Test total spent, remaining and percentage follow the expenses."""
        budget = Budget(
            name="Food",
            amount=Decimal("2000"),
            expenses=[
                Expense(title="Groceries", amount=Decimal("400")),
                Expense(title="Dinner", amount=Decimal("100")),
            ],
        )
        assert budget.total_spent == Decimal("500")
        assert budget.remaining_amount == Decimal("1500")
        assert budget.spent_percentage == Decimal("0.25")

    def test_budget_overspent_goes_negative(self):
        """Test remaining amount can go below zero."""
        budget = Budget(
            name="Fun",
            amount=Decimal("100"),
            expenses=[Expense(title="Concert", amount=Decimal("150"))],
        )
        assert budget.remaining_amount == Decimal("-50")
        assert budget.spent_percentage == Decimal("1.5")

    def test_spent_percentage_zero_target(self):
        """Test spent percentage is 0 when the target is not positive."""
        budget = Budget(
            name="Misc",
            amount=Decimal("0"),
            expenses=[Expense(title="Snack", amount=Decimal("50"))],
        )
        assert budget.spent_percentage == Decimal("0")

    def test_derived_values_not_serialized(self):
        """Test derived properties are not written to JSON."""
        budget = Budget(name="Food", amount=Decimal("100"))
        dumped = budget.model_dump()
        assert "total_spent" not in dumped
        assert "remaining_amount" not in dumped

    def test_get_color_falls_back_to_blue(self):
        """Test unknown color tokens resolve to blue."""
        assert Budget(name="A", amount=Decimal("1"), color="green").get_color() == "green"
        assert Budget(name="A", amount=Decimal("1"), color="magenta").get_color() == "blue"

    def test_find_expense(self):
        """Test expense lookup by id."""
        first = Expense(title="One", amount=Decimal("1"))
        second = Expense(title="Two", amount=Decimal("2"))
        budget = Budget(name="A", amount=Decimal("10"), expenses=[first, second])
        assert budget.find_expense(second.id) == 1
        assert budget.find_expense(Expense(title="X", amount=Decimal("1")).id) is None

    def test_make_miscellaneous_budget(self):
        """Test the miscellaneous budget is flagged and has no target."""
        misc = make_miscellaneous_budget()
        assert misc.is_miscellaneous is True
        assert misc.amount == Decimal("0")
        assert misc.name == "Miscellaneous"
        assert misc.expenses == []


class TestAssetTypeTable:
    """Tests for the asset type to category mapping."""

    def test_every_type_has_an_entry(self):
        """Test the table covers all eleven asset types."""
        assert set(ASSET_TYPE_TABLE) == set(AssetType)
        assert len(ASSET_TYPE_TABLE) == 11

    def test_categories(self):
        """Test representative type categories."""
        assert AssetType.STOCKS.category == AssetCategory.INVESTMENTS
        assert AssetType.FIXED_DEPOSIT.category == AssetCategory.INVESTMENTS
        assert AssetType.CAR_LOAN.category == AssetCategory.LOANS
        assert AssetType.LIC.category == AssetCategory.INSURANCE

    def test_types_for_category(self):
        """Test loan types listed in display order."""
        assert types_for_category(AssetCategory.LOANS) == [
            AssetType.HOME_LOAN,
            AssetType.CAR_LOAN,
            AssetType.EDUCATION_LOAN,
            AssetType.OTHER_LOAN,
        ]

    def test_labels(self):
        """Test display labels."""
        assert AssetType.GOLD.label == "Gold/Silver"
        assert AssetCategory.INSURANCE.label == "Insurance"


class TestAssetModels:
    """Tests for Asset validation and amount derivation."""

    def test_category_filled_from_type(self):
        """Test an omitted category is taken from the type."""
        asset = Asset(name="Savings FD", type=AssetType.FIXED_DEPOSIT, amount=Decimal("5000"))
        assert asset.category == AssetCategory.INVESTMENTS
        assert asset.amount == Decimal("5000")

    def test_category_mismatch_rejected(self):
        """Test a category that contradicts the type is rejected."""
        with pytest.raises(SchemaError):
            Asset(name="Car", type=AssetType.CAR_LOAN, category=AssetCategory.INVESTMENTS)

    def test_detail_kind_mismatch_rejected(self):
        """Test a stock asset cannot carry loan details."""
        with pytest.raises(SchemaError):
            Asset(
                name="Shares",
                type=AssetType.STOCKS,
                details=LoanDetails(
                    total_loan_amount=Decimal("100"),
                    remaining_amount=Decimal("100"),
                ),
            )

    def test_stock_amount_derived(self):
        """Test 10 shares at 250 gives an amount of 2500."""
        asset = Asset(
            name="ACME",
            type=AssetType.STOCKS,
            amount=Decimal("1"),
            details=StockDetails(
                company_name="ACME Corp",
                number_of_shares=10,
                price_per_share=Decimal("250"),
            ),
        )
        assert asset.amount == Decimal("2500")
        assert asset.category == AssetCategory.INVESTMENTS

    def test_gold_amount_derived(self):
        """Test gold amount is weight times price per gram."""
        asset = Asset(
            name="Coins",
            type=AssetType.GOLD,
            details=GoldDetails(weight_in_grams=Decimal("10"), price_per_gram=Decimal("6000")),
        )
        assert asset.amount == Decimal("60000")

    def test_mutual_fund_amount_is_current_value(self):
        """Test lumpsum and SIP do not change the amount."""
        asset = Asset(
            name="Index Fund",
            type=AssetType.MUTUAL_FUNDS,
            details=MutualFundDetails(
                lumpsum=Decimal("10000"),
                sip_monthly=Decimal("1000"),
                current_value=Decimal("14500"),
            ),
        )
        assert asset.amount == Decimal("14500")

    def test_fixed_deposit_amount_is_principal(self):
        """Test FD amount is the principal."""
        asset = Asset(
            name="FD",
            type=AssetType.FIXED_DEPOSIT,
            details=FixedDepositDetails(
                bank_name="SBI",
                deposit_date=datetime(2025, 1, 1),
                maturity_date=datetime(2026, 1, 1),
                interest_rate=Decimal("7.1"),
                principal_amount=Decimal("100000"),
            ),
        )
        assert asset.amount == Decimal("100000")

    def test_insurance_amount_is_coverage(self):
        """Test insurance amount is the coverage."""
        asset = Asset(
            name="Health",
            type=AssetType.HEALTH_INSURANCE,
            details=InsuranceDetails(
                monthly_premium=Decimal("800"),
                coverage_amount=Decimal("500000"),
            ),
        )
        assert asset.amount == Decimal("500000")
        assert asset.loan_details is None

    def test_details_parsed_from_dict_by_kind(self):
        """Test the detail union is resolved by its kind tag."""
        asset = Asset.model_validate({
            "name": "Home",
            "type": "home_loan",
            "details": {
                "kind": "loan",
                "total_loan_amount": "50000",
                "remaining_amount": "42000",
            },
        })
        assert isinstance(asset.details, LoanDetails)
        assert asset.amount == Decimal("42000")


class TestLoanDetails:
    """Tests for loan repayment."""

    def test_with_payment_reduces_remaining(self):
        """Test a payment appends to history and reduces the balance."""
        loan = LoanDetails(total_loan_amount=Decimal("50000"), remaining_amount=Decimal("50000"))
        paid = loan.with_payment(EMIPayment(amount=Decimal("5000")))
        assert paid.remaining_amount == Decimal("45000")
        assert len(paid.emi_payments) == 1
        assert paid.amount_paid == Decimal("5000")
        assert paid.repayment_progress == Decimal("0.1")

    def test_with_payment_leaves_original_untouched(self):
        """Test with_payment returns a copy."""
        loan = LoanDetails(total_loan_amount=Decimal("100"), remaining_amount=Decimal("100"))
        loan.with_payment(EMIPayment(amount=Decimal("10")))
        assert loan.remaining_amount == Decimal("100")
        assert loan.emi_payments == []

    def test_overpayment_floors_at_zero(self):
        """Test remaining amount never goes below zero."""
        loan = LoanDetails(total_loan_amount=Decimal("1000"), remaining_amount=Decimal("300"))
        paid = loan.with_payment(EMIPayment(amount=Decimal("500")))
        assert paid.remaining_amount == Decimal("0")
        assert paid.emi_payments[-1].amount == Decimal("500")

    def test_repayment_progress_zero_principal(self):
        """Test progress is 0 when the loan total is not positive."""
        loan = LoanDetails(total_loan_amount=Decimal("0"), remaining_amount=Decimal("0"))
        assert loan.repayment_progress == Decimal("0")


class TestPortfolioTotals:
    """Tests for category totals and net worth."""

    def test_totals_and_net_worth(self):
        """Test net worth is investments minus liabilities; insurance is separate."""
        assets = [
            Asset(name="FD", type=AssetType.FIXED_DEPOSIT, amount=Decimal("30000")),
            Asset(name="Gold", type=AssetType.GOLD, amount=Decimal("20000")),
            Asset(name="Car", type=AssetType.CAR_LOAN, amount=Decimal("15000")),
            Asset(name="Term", type=AssetType.LIFE_INSURANCE, amount=Decimal("1000000")),
        ]
        totals = PortfolioTotals.from_assets(assets)
        assert totals.total_investments == Decimal("50000")
        assert totals.total_liabilities == Decimal("15000")
        assert totals.total_insurance == Decimal("1000000")
        assert totals.net_worth == Decimal("35000")

    def test_empty_portfolio(self):
        """Test totals for no assets are zero."""
        totals = PortfolioTotals.from_assets([])
        assert totals.net_worth == Decimal("0")


class TestUserModel:
    """Tests for the User record."""

    def test_balance_start_date_truncated(self):
        """Test the period start is kept at day granularity."""
        user = User(
            first_name="Asha",
            last_name="Rao",
            email="asha@example.com",
            balance_start_date=datetime(2026, 3, 5, 14, 30, 12),
        )
        assert user.balance_start_date == datetime(2026, 3, 5)

    def test_start_of_day_accepts_date(self):
        """Test start_of_day converts a date to midnight."""
        assert start_of_day(date(2026, 3, 5)) == datetime(2026, 3, 5)

    def test_name_and_email_match(self):
        """Test full name and case-insensitive email comparison."""
        user = User(first_name="Asha", last_name="Rao", email="Asha@Example.com")
        assert user.name == "Asha Rao"
        assert user.email_matches("  asha@EXAMPLE.com ")
        assert not user.email_matches("other@example.com")

    def test_ids_are_unique(self):
        """Test each user gets its own id."""
        a = User(first_name="A", last_name="B", email="a@b.c")
        b = User(first_name="A", last_name="B", email="a@b.c")
        assert a.id != b.id


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation with defaults."""
        event = AuditEvent(
            event_type=AuditEventType.BUDGET_ADDED,
            description="Budget added",
        )
        assert event.event_id is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to a structured log dict."""
        event = AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            description="Failed",
            error_message="disk full",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "save_failed"
        assert log_dict["severity"] == "error"
        assert log_dict["error_message"] == "disk full"

    def test_builder_entity_changed(self):
        """Test entity_changed describes the action."""
        event = AuditEventBuilder.entity_changed(
            AuditEventType.BUDGET_ADDED, "budget", "b-1", "u-1", {"name": "Food"},
        )
        assert event.description == "Budget added"
        assert event.entity_id == "b-1"
        assert event.details == {"name": "Food"}

    def test_builder_login_failed_is_warning(self):
        """Test failed logins are logged as warnings."""
        event = AuditEventBuilder.session_changed(AuditEventType.LOGIN_FAILED, None, "No match")
        assert event.severity == AuditSeverity.WARNING

    def test_builder_save_failed(self):
        """Test save_failed carries the partition and error."""
        event = AuditEventBuilder.save_failed("assets", "u-1", "disk full")
        assert event.severity == AuditSeverity.ERROR
        assert event.entity_id == "assets"
        assert event.error_message == "disk full"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
