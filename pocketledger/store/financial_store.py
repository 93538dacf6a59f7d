"""
Financial Store

The single owner of the active user's budgets, miscellaneous budget and
assets. Every change goes through one of the operations below so that
derived values and persistence stay in step with the in-memory state.

DESIGN DECISION: Operations validate first and mutate second. A rejected
operation (ValidationError, NotFoundError, InvalidOperationError) leaves
every collection exactly as it was.

DESIGN DECISION: Operations that can change what was spent are wrapped
with @affects_spend. After the operation body runs, the wrapper
recalculates the current balance:

    user.current_balance = user.monthly_start_balance - total_spent

so the invariant is enforced in one place instead of at every call site.

DESIGN DECISION: Persistence failures never propagate. The in-memory
state stays authoritative for the session, the failure is audited, and
the partition is re-saved in full by the next save that succeeds.
Writes are synchronous, so they reach storage in mutation order.

Callers pass numbers already parsed (Decimal, int or numeric str).
Parsing user-typed text belongs to the presentation layer.
"""

import functools
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Optional, Union
from uuid import UUID

from pydantic import ValidationError as SchemaError

from pocketledger.audit import AuditLogger
from pocketledger.errors import (
    InvalidOperationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from pocketledger.models.asset import Asset, EMIPayment, PortfolioTotals
from pocketledger.models.audit import AuditEventType
from pocketledger.models.budget import Budget, Expense, make_miscellaneous_budget
from pocketledger.models.user import User, start_of_day
from pocketledger.services.storage.partitions import (
    ASSETS,
    BUDGETS,
    CURRENT_USER_KEY,
    MISC_BUDGET,
    PartitionRepository,
)
from pocketledger.store.context import SessionContext


Amount = Union[Decimal, int, float, str]


def _as_decimal(value: Amount) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def affects_spend(method: Callable) -> Callable:
    """Recalculate the current balance after the wrapped operation succeeds."""

    @functools.wraps(method)
    def wrapper(self: "FinancialStore", *args: Any, **kwargs: Any) -> Any:
        result = method(self, *args, **kwargs)
        self.recalculate_current_balance()
        return result

    return wrapper


class FinancialStore:
    """
    In-memory financial state for the signed-in user.

    The session context says who is signed in; the repository says where
    their partitions live. Readers get copies, never the live objects.
    """

    def __init__(
        self,
        session: SessionContext,
        repository: PartitionRepository,
        audit_logger: Optional[AuditLogger] = None,
        misc_budget_factory: Callable[[], Budget] = make_miscellaneous_budget,
    ):
        self._session = session
        self._repository = repository
        self._audit = audit_logger or AuditLogger()
        self._misc_budget_factory = misc_budget_factory

        self._budgets: list[Budget] = []
        self._misc_budget: Budget = misc_budget_factory()
        self._assets: list[Asset] = []
        self._unsaved: set[str] = set()

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def session(self) -> SessionContext:
        return self._session

    @property
    def current_user(self) -> Optional[User]:
        return self._session.user

    @property
    def budgets(self) -> list[Budget]:
        """Named budgets (the miscellaneous budget is not included)."""
        return [b.model_copy(deep=True) for b in self._budgets]

    @property
    def misc_budget(self) -> Budget:
        return self._misc_budget.model_copy(deep=True)

    @property
    def assets(self) -> list[Asset]:
        return [a.model_copy(deep=True) for a in self._assets]

    @property
    def unsaved_partitions(self) -> set[str]:
        """Partitions whose last save failed and will be retried."""
        return set(self._unsaved)

    def get_budget(self, budget_id: UUID) -> Budget:
        budget, _ = self._locate_budget(budget_id)
        return budget.model_copy(deep=True)

    def get_asset(self, asset_id: UUID) -> Asset:
        return self._assets[self._asset_index(asset_id)].model_copy(deep=True)

    # =========================================================================
    # AGGREGATE QUERIES (always computed from the current collections)
    # =========================================================================

    @property
    def total_budget(self) -> Decimal:
        return sum((b.amount for b in self._budgets), Decimal("0"))

    @property
    def total_spent(self) -> Decimal:
        named = sum((b.total_spent for b in self._budgets), Decimal("0"))
        return named + self._misc_budget.total_spent

    @property
    def total_remaining(self) -> Decimal:
        return sum((b.remaining_amount for b in self._budgets), Decimal("0"))

    @property
    def portfolio(self) -> PortfolioTotals:
        return PortfolioTotals.from_assets(self._assets)

    @property
    def total_investments(self) -> Decimal:
        return self.portfolio.total_investments

    @property
    def total_liabilities(self) -> Decimal:
        return self.portfolio.total_liabilities

    @property
    def total_insurance(self) -> Decimal:
        return self.portfolio.total_insurance

    @property
    def net_worth(self) -> Decimal:
        return self.portfolio.net_worth

    # =========================================================================
    # BUDGETS
    # =========================================================================

    @affects_spend
    def add_budget(self, budget: Budget) -> Budget:
        """Append a named budget."""
        self._require_user("add_budget")
        if budget.is_miscellaneous:
            self._reject(
                InvalidOperationError, "add_budget",
                "Only one miscellaneous budget exists per user",
            )
        self._validate_named_budget("add_budget", budget)
        self._validate_expenses("add_budget", budget.expenses)
        if budget.id == self._misc_budget.id or self._budget_index(budget.id) is not None:
            self._reject(
                InvalidOperationError, "add_budget",
                f"Budget {budget.id} already exists",
            )
        self._check_expense_ownership("add_budget", budget)

        stored = budget.model_copy(deep=True)
        self._budgets.append(stored)
        self._persist(BUDGETS)
        self._audit.log_entity_changed(
            AuditEventType.BUDGET_ADDED, "budget", stored.id, self._user_id,
            name=stored.name, amount=str(stored.amount),
        )
        return stored.model_copy(deep=True)

    @affects_spend
    def update_budget(self, budget: Budget) -> Budget:
        """
        Replace a budget by ID.

        For the miscellaneous budget only the name, icon, color and
        expenses may change; its amount is fixed.
        """
        self._require_user("update_budget")

        if budget.id == self._misc_budget.id:
            if budget.amount != self._misc_budget.amount:
                self._reject(
                    InvalidOperationError, "update_budget",
                    "The miscellaneous budget amount cannot be edited",
                )
            if not budget.name.strip():
                self._reject(ValidationError, "update_budget", "Budget name is required")
            self._validate_expenses("update_budget", budget.expenses)
            self._check_expense_ownership("update_budget", budget)
            stored = budget.model_copy(update={"is_miscellaneous": True}, deep=True)
            self._misc_budget = stored
            partition = MISC_BUDGET
        else:
            index = self._budget_index(budget.id)
            if index is None:
                self._reject(NotFoundError, "update_budget", f"Budget {budget.id} not found")
            if budget.is_miscellaneous:
                self._reject(
                    InvalidOperationError, "update_budget",
                    "A named budget cannot become the miscellaneous budget",
                )
            self._validate_named_budget("update_budget", budget)
            self._validate_expenses("update_budget", budget.expenses)
            self._check_expense_ownership("update_budget", budget)
            stored = budget.model_copy(deep=True)
            self._budgets[index] = stored
            partition = BUDGETS

        self._persist(partition)
        self._audit.log_entity_changed(
            AuditEventType.BUDGET_UPDATED, "budget", stored.id, self._user_id,
            name=stored.name,
        )
        return stored.model_copy(deep=True)

    @affects_spend
    def delete_budget(self, budget_id: UUID) -> None:
        """Remove a named budget together with all of its expenses."""
        self._require_user("delete_budget")
        if budget_id == self._misc_budget.id:
            self._reject(
                InvalidOperationError, "delete_budget",
                "The miscellaneous budget cannot be deleted",
            )
        index = self._budget_index(budget_id)
        if index is None:
            self._reject(NotFoundError, "delete_budget", f"Budget {budget_id} not found")

        removed = self._budgets.pop(index)
        self._persist(BUDGETS)
        self._audit.log_entity_changed(
            AuditEventType.BUDGET_DELETED, "budget", budget_id, self._user_id,
            expenses_removed=len(removed.expenses),
        )

    # =========================================================================
    # EXPENSES
    # =========================================================================

    @affects_spend
    def add_expense(self, expense: Expense, budget_id: UUID) -> Expense:
        """Attach an expense to a named budget or the miscellaneous budget."""
        self._require_user("add_expense")
        self._validate_expenses("add_expense", [expense])
        budget, partition = self._locate_budget(budget_id, operation="add_expense")
        if self._expense_owner(expense.id) is not None:
            self._reject(
                InvalidOperationError, "add_expense",
                f"Expense {expense.id} already exists",
            )

        stored = expense.model_copy(deep=True)
        budget.expenses.append(stored)
        self._persist(partition)
        self._audit.log_entity_changed(
            AuditEventType.EXPENSE_ADDED, "expense", stored.id, self._user_id,
            budget_id=str(budget_id), amount=str(stored.amount),
        )
        return stored.model_copy()

    @affects_spend
    def update_expense(self, expense: Expense, budget_id: UUID) -> Expense:
        """Replace an expense in place; it stays in the same budget."""
        self._require_user("update_expense")
        self._validate_expenses("update_expense", [expense])
        budget, partition = self._locate_budget(budget_id, operation="update_expense")
        index = budget.find_expense(expense.id)
        if index is None:
            self._reject(
                NotFoundError, "update_expense",
                f"Expense {expense.id} not found in budget {budget_id}",
            )

        stored = expense.model_copy(deep=True)
        budget.expenses[index] = stored
        self._persist(partition)
        self._audit.log_entity_changed(
            AuditEventType.EXPENSE_UPDATED, "expense", stored.id, self._user_id,
            budget_id=str(budget_id), amount=str(stored.amount),
        )
        return stored.model_copy()

    @affects_spend
    def delete_expense(self, expense_id: UUID, budget_id: UUID) -> None:
        self._require_user("delete_expense")
        budget, partition = self._locate_budget(budget_id, operation="delete_expense")
        index = budget.find_expense(expense_id)
        if index is None:
            self._reject(
                NotFoundError, "delete_expense",
                f"Expense {expense_id} not found in budget {budget_id}",
            )

        del budget.expenses[index]
        self._persist(partition)
        self._audit.log_entity_changed(
            AuditEventType.EXPENSE_DELETED, "expense", expense_id, self._user_id,
            budget_id=str(budget_id),
        )

    # =========================================================================
    # ASSETS
    # =========================================================================

    def add_asset(self, asset: Asset) -> Asset:
        self._require_user("add_asset")
        stored = self._normalize_asset("add_asset", asset)
        if self._asset_index(stored.id, required=False) is not None:
            self._reject(
                InvalidOperationError, "add_asset",
                f"Asset {stored.id} already exists",
            )

        self._assets.append(stored)
        self._persist(ASSETS)
        self._audit.log_entity_changed(
            AuditEventType.ASSET_ADDED, "asset", stored.id, self._user_id,
            type=stored.type.value, amount=str(stored.amount),
        )
        return stored.model_copy(deep=True)

    def update_asset(self, asset: Asset) -> Asset:
        """Replace an asset by ID. Amount is re-derived from its details."""
        self._require_user("update_asset")
        index = self._asset_index(asset.id, operation="update_asset")
        stored = self._normalize_asset("update_asset", asset)

        self._assets[index] = stored
        self._persist(ASSETS)
        self._audit.log_entity_changed(
            AuditEventType.ASSET_UPDATED, "asset", stored.id, self._user_id,
            amount=str(stored.amount),
        )
        return stored.model_copy(deep=True)

    def delete_asset(self, asset_id: UUID) -> None:
        """Remove an asset; a loan's EMI history goes with it."""
        self._require_user("delete_asset")
        index = self._asset_index(asset_id, operation="delete_asset")

        self._assets.pop(index)
        self._persist(ASSETS)
        self._audit.log_entity_changed(
            AuditEventType.ASSET_DELETED, "asset", asset_id, self._user_id,
        )

    @affects_spend
    def record_emi_payment(
        self,
        asset_id: UUID,
        amount: Amount,
        payment_date: Optional[datetime] = None,
        notes: str = "",
    ) -> Optional[Asset]:
        """
        Record an installment against a loan.

        Assets without loan details are left alone and None is returned.
        The remaining amount drops by the payment, floored at zero, and
        the asset amount follows it.
        """
        self._require_user("record_emi_payment")
        index = self._asset_index(asset_id, operation="record_emi_payment")
        asset = self._assets[index]

        loan = asset.loan_details
        if loan is None:
            self._audit.log_emi_skipped(asset_id, self._user_id)
            return None

        value = _as_decimal(amount)
        if value <= 0:
            self._reject(ValidationError, "record_emi_payment", "Payment amount must be positive")

        payment = EMIPayment(
            amount=value,
            payment_date=payment_date or datetime.now(),
            notes=notes,
        )
        details = loan.with_payment(payment)
        stored = asset.model_copy(
            update={"details": details, "amount": details.remaining_amount},
            deep=True,
        )

        self._assets[index] = stored
        self._persist(ASSETS)
        self._audit.log_entity_changed(
            AuditEventType.EMI_PAYMENT_RECORDED, "asset", asset_id, self._user_id,
            amount=str(value), remaining_amount=str(details.remaining_amount),
        )
        return stored.model_copy(deep=True)

    # =========================================================================
    # BALANCE
    # =========================================================================

    def recalculate_current_balance(self) -> Optional[Decimal]:
        """
        Set current_balance = monthly_start_balance - total_spent.

        Returns the new balance, or None when nobody is signed in.
        """
        user = self._session.user
        if user is None:
            return None

        spent = self.total_spent
        balance = user.monthly_start_balance - spent
        if balance != user.current_balance:
            self._session.replace_user(user.model_copy(update={"current_balance": balance}))
            self._persist(CURRENT_USER_KEY)
        elif self._unsaved:
            self._persist()

        self._audit.log_balance_recalculated(user.id, user.monthly_start_balance, spent, balance)
        return balance

    def balance_is_consistent(self) -> bool:
        user = self._session.user
        if user is None:
            return True
        return user.current_balance == user.monthly_start_balance - self.total_spent

    def update_monthly_balance(
        self,
        amount: Amount,
        start_date: Optional[Union[date, datetime]] = None,
    ) -> User:
        """Set a new starting balance and period start (day granularity)."""
        user = self._require_user("update_monthly_balance")
        updated = user.model_copy(update={
            "monthly_start_balance": _as_decimal(amount),
            "balance_start_date": start_of_day(start_date or datetime.now()),
        })
        self._session.replace_user(updated)
        self._persist(CURRENT_USER_KEY)
        self._audit.log_entity_changed(
            AuditEventType.MONTHLY_BALANCE_UPDATED, "user", user.id, user.id,
            monthly_start_balance=str(updated.monthly_start_balance),
            balance_start_date=updated.balance_start_date.isoformat(),
        )
        self.recalculate_current_balance()
        return self._session.user

    # =========================================================================
    # PARTITION LIFECYCLE (driven by the session manager)
    # =========================================================================

    def load_partitions(self, user_id: str) -> None:
        """
        Replace the in-memory collections with the user's stored partitions.

        A partition that cannot be read falls back to its empty default.
        A missing miscellaneous budget is created and saved.
        """
        self._unsaved = set()
        self._budgets = self._load_or_default(
            BUDGETS, user_id, self._repository.load_budgets, list,
        )
        self._assets = self._load_or_default(
            ASSETS, user_id, self._repository.load_assets, list,
        )
        misc = self._load_or_default(
            MISC_BUDGET, user_id, self._repository.load_misc_budget, lambda: None,
        )
        if misc is None:
            self._misc_budget = self._misc_budget_factory()
            self._persist(MISC_BUDGET)
        else:
            self._misc_budget = misc

    def save_all(self) -> bool:
        """Save every partition plus the user record. True if all succeeded."""
        if self._session.user is None:
            return False
        self._persist(BUDGETS, MISC_BUDGET, ASSETS, CURRENT_USER_KEY)
        return not self._unsaved

    def reset(self) -> None:
        """Drop all in-memory data, leaving a fresh miscellaneous budget."""
        self._budgets = []
        self._assets = []
        self._misc_budget = self._misc_budget_factory()
        self._unsaved = set()

    # =========================================================================
    # INTERNALS
    # =========================================================================

    @property
    def _user_id(self) -> Optional[str]:
        user = self._session.user
        return user.id if user else None

    def _reject(self, error_cls: type, operation: str, message: str) -> None:
        self._audit.log_rejected(operation, message, self._user_id)
        raise error_cls(message)

    def _require_user(self, operation: str) -> User:
        user = self._session.user
        if user is None:
            self._reject(InvalidOperationError, operation, "No user is signed in")
        return user

    def _validate_named_budget(self, operation: str, budget: Budget) -> None:
        if not budget.name.strip():
            self._reject(ValidationError, operation, "Budget name is required")
        if budget.amount <= 0:
            self._reject(ValidationError, operation, "Budget amount must be positive")

    def _validate_expenses(self, operation: str, expenses: list[Expense]) -> None:
        for expense in expenses:
            if not expense.title.strip():
                self._reject(ValidationError, operation, "Expense title is required")
            if expense.amount <= 0:
                self._reject(ValidationError, operation, "Expense amount must be positive")

    def _expense_owner(self, expense_id: UUID) -> Optional[UUID]:
        """ID of the budget (named or miscellaneous) holding this expense."""
        for budget in [*self._budgets, self._misc_budget]:
            if budget.find_expense(expense_id) is not None:
                return budget.id
        return None

    def _check_expense_ownership(self, operation: str, budget: Budget) -> None:
        """Each expense id appears once, in the budget that owns it."""
        seen: set[UUID] = set()
        for expense in budget.expenses:
            if expense.id in seen:
                self._reject(
                    InvalidOperationError, operation,
                    f"Expense {expense.id} appears twice in budget {budget.id}",
                )
            seen.add(expense.id)
            owner = self._expense_owner(expense.id)
            if owner is not None and owner != budget.id:
                self._reject(
                    InvalidOperationError, operation,
                    f"Expense {expense.id} belongs to budget {owner}",
                )

    def _normalize_asset(self, operation: str, asset: Asset) -> Asset:
        """Re-validate so category and amount are re-derived from type and details."""
        if not asset.name.strip():
            self._reject(ValidationError, operation, "Asset name is required")
        try:
            return Asset.model_validate(asset.model_dump())
        except SchemaError as e:
            self._reject(ValidationError, operation, str(e))

    def _budget_index(self, budget_id: UUID) -> Optional[int]:
        for index, budget in enumerate(self._budgets):
            if budget.id == budget_id:
                return index
        return None

    def _locate_budget(
        self,
        budget_id: UUID,
        operation: str = "get_budget",
    ) -> tuple[Budget, str]:
        """Route to the miscellaneous budget or a named one."""
        if budget_id == self._misc_budget.id:
            return self._misc_budget, MISC_BUDGET
        index = self._budget_index(budget_id)
        if index is None:
            self._reject(NotFoundError, operation, f"Budget {budget_id} not found")
        return self._budgets[index], BUDGETS

    def _asset_index(
        self,
        asset_id: UUID,
        operation: str = "get_asset",
        required: bool = True,
    ) -> Optional[int]:
        for index, asset in enumerate(self._assets):
            if asset.id == asset_id:
                return index
        if required:
            self._reject(NotFoundError, operation, f"Asset {asset_id} not found")
        return None

    def _load_or_default(self, partition: str, user_id: str, loader, default):
        try:
            return loader(user_id)
        except PersistenceError as e:
            self._audit.log_load_failed(partition, user_id, str(e))
            return default()

    def _persist(self, *partitions: str) -> None:
        """
        Save the named partitions plus any whose previous save failed.

        Failures are audited and remembered, never raised.
        """
        user_id = self._user_id
        if user_id is None:
            return

        pending = list(partitions) + sorted(self._unsaved - set(partitions))
        for partition in pending:
            try:
                self._save_partition(partition, user_id)
            except PersistenceError as e:
                self._unsaved.add(partition)
                self._audit.log_save_failed(partition, user_id, str(e))
            else:
                self._unsaved.discard(partition)
                self._audit.log_partition_saved(partition, user_id)

    def _save_partition(self, partition: str, user_id: str) -> None:
        if partition == BUDGETS:
            self._repository.save_budgets(user_id, self._budgets)
        elif partition == MISC_BUDGET:
            self._repository.save_misc_budget(user_id, self._misc_budget)
        elif partition == ASSETS:
            self._repository.save_assets(user_id, self._assets)
        elif partition == CURRENT_USER_KEY:
            self._repository.save_current_user(self._session.user)
        else:
            raise ValueError(f"Unknown partition: {partition}")
