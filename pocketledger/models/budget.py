"""
Budget and Expense Models

A budget is a named spending envelope with a target amount and the
ordered list of expenses logged against it.

DESIGN DECISION: Derived values (total spent, remaining, percentage) are
properties, not fields. They are recomputed from the expense list on
every read and never serialized, so they can never go stale.

The single miscellaneous budget is an ordinary Budget flagged with
is_miscellaneous=True. The rules that make it special (undeletable,
fixed amount, excluded from named listings) live in the store.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


# Color tokens the presentation layer knows how to render
SUPPORTED_COLORS = ("red", "blue", "green", "orange", "purple", "yellow")
DEFAULT_COLOR = "blue"


class Expense(BaseModel):
    """
    A single spend entry owned by exactly one budget.

    Amount is expected to be positive. The model does not enforce it;
    the store rejects non-positive amounts before they are attached.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique expense ID"
    )
    title: str = Field(
        ...,
        max_length=200,
        description="Short description of the spend"
    )
    amount: Decimal = Field(
        ...,
        description="Amount spent"
    )
    date: datetime = Field(
        default_factory=datetime.now,
        description="When the money was spent"
    )
    note: str = Field(
        default="",
        max_length=1000,
        description="Free-text note"
    )


class Budget(BaseModel):
    """
    A spending envelope with a target amount.

    Expenses keep their insertion order; the order survives a
    save/load round trip.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Stable budget ID"
    )
    name: str = Field(
        ...,
        max_length=200,
        description="Budget name shown to the user"
    )
    amount: Decimal = Field(
        ...,
        description="Target amount for the period"
    )
    icon: str = Field(
        default="folder.fill",
        description="Icon token"
    )
    color: str = Field(
        default=DEFAULT_COLOR,
        description="Color token"
    )
    expenses: list[Expense] = Field(default_factory=list)
    is_miscellaneous: bool = Field(
        default=False,
        description="True only for the catch-all miscellaneous budget"
    )

    @property
    def total_spent(self) -> Decimal:
        return sum((expense.amount for expense in self.expenses), Decimal("0"))

    @property
    def remaining_amount(self) -> Decimal:
        return self.amount - self.total_spent

    @property
    def spent_percentage(self) -> Decimal:
        """Fraction of the target spent; 0 when the target is not positive."""
        if self.amount <= 0:
            return Decimal("0")
        return self.total_spent / self.amount

    def get_color(self) -> str:
        """Resolve the color token, falling back to blue for unknown tokens."""
        return self.color if self.color in SUPPORTED_COLORS else DEFAULT_COLOR

    def find_expense(self, expense_id: UUID) -> Optional[int]:
        """Index of the expense with this ID, or None."""
        for index, expense in enumerate(self.expenses):
            if expense.id == expense_id:
                return index
        return None


def make_miscellaneous_budget(
    name: str = "Miscellaneous",
    icon: str = "ellipsis.circle.fill",
    color: str = "gray",
) -> Budget:
    """Create a fresh, empty miscellaneous budget."""
    return Budget(
        name=name,
        amount=Decimal("0"),
        icon=icon,
        color=color,
        is_miscellaneous=True,
    )
