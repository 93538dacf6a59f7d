"""
Read-Only Reports

Views computed from the store's current collections, used by screens
that need more than the raw budgets and assets:

1. The expense feed: every expense across budgets, newest first, with
   optional title search and grouping by day
2. The financial summary: a plain-text snapshot of balance, budgets,
   miscellaneous spend and assets, handed to assistants or exports

GUARANTEES:
- Only reads through the store's public API; never mutates
- Reports on exactly what the store holds, nothing estimated
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from pocketledger.models.budget import Budget, Expense
from pocketledger.store.financial_store import FinancialStore


class ExpenseEntry(BaseModel):
    """An expense together with the budget it belongs to."""

    budget_id: UUID
    budget_name: str
    budget_color: str
    is_miscellaneous: bool
    expense: Expense


def _entries_for(budget: Budget, needle: str) -> list[ExpenseEntry]:
    return [
        ExpenseEntry(
            budget_id=budget.id,
            budget_name=budget.name,
            budget_color=budget.get_color(),
            is_miscellaneous=budget.is_miscellaneous,
            expense=expense,
        )
        for expense in budget.expenses
        if not needle or needle in expense.title.casefold()
    ]


def all_expenses(store: FinancialStore, search: str = "") -> list[ExpenseEntry]:
    """Expenses from every budget, newest first, filtered by title."""
    needle = search.strip().casefold()
    entries: list[ExpenseEntry] = []
    for budget in [*store.budgets, store.misc_budget]:
        entries.extend(_entries_for(budget, needle))
    entries.sort(key=lambda e: e.expense.date, reverse=True)
    return entries


def expenses_by_day(
    store: FinancialStore,
    search: str = "",
) -> dict[date, list[ExpenseEntry]]:
    """The expense feed grouped by calendar day, newest day first."""
    grouped: dict[date, list[ExpenseEntry]] = {}
    for entry in all_expenses(store, search):
        grouped.setdefault(entry.expense.date.date(), []).append(entry)
    return grouped


def day_label(day: date, today: Optional[date] = None) -> str:
    """Section header for a day: Today, Yesterday, or e.g. 'Mar 05, 2026'."""
    today = today or date.today()
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return day.strftime("%b %d, %Y")


def _money(amount: Decimal, symbol: str) -> str:
    return f"{symbol}{int(amount)}"


def _expense_line(expense: Expense, symbol: str) -> str:
    line = f"{expense.title}: {_money(expense.amount, symbol)} on {expense.date.strftime('%b %d')}"
    if expense.note:
        line += f" ({expense.note})"
    return line


def build_financial_summary(store: FinancialStore, currency_symbol: str = "₹") -> str:
    """
    Plain-text snapshot of the signed-in user's finances.

    Sections with nothing in them are left out.
    """
    user = store.current_user
    if user is None:
        return "No financial data is currently available."

    s = currency_symbol
    lines = ["=== USER'S FINANCIAL DATA ===", ""]

    lines += [
        f"USER: {user.name}",
        f"Monthly Starting Balance: {_money(user.monthly_start_balance, s)}",
        f"Current Balance: {_money(user.current_balance, s)}",
        f"Balance Start Date: {user.balance_start_date.strftime('%b %d, %Y')}",
        "",
        "--- SUMMARY ---",
        f"Total Budget Allocated: {_money(store.total_budget, s)}",
        f"Total Amount Spent: {_money(store.total_spent, s)}",
        f"Total Remaining in Budgets: {_money(store.total_remaining, s)}",
        "",
    ]

    budgets = store.budgets
    if budgets:
        lines.append("--- BUDGETS ---")
        for budget in budgets:
            lines.append(
                f"• {budget.name}: Budget {_money(budget.amount, s)}, "
                f"Spent {_money(budget.total_spent, s)}, "
                f"Remaining {_money(budget.remaining_amount, s)} "
                f"({int(budget.spent_percentage * 100)}% used)"
            )
            lines.extend(f"    - {_expense_line(e, s)}" for e in budget.expenses)
        lines.append("")

    misc = store.misc_budget
    if misc.expenses:
        lines.append("--- MISCELLANEOUS EXPENSES (No budget limit) ---")
        lines.extend(f"• {_expense_line(e, s)}" for e in misc.expenses)
        lines += [f"Miscellaneous Total Spent: {_money(misc.total_spent, s)}", ""]

    assets = store.assets
    if assets:
        lines += [
            "--- ASSETS & INVESTMENTS ---",
            f"Total Investments Value: {_money(store.total_investments, s)}",
            f"Total Liabilities (Loans): {_money(store.total_liabilities, s)}",
            f"Total Insurance Coverage: {_money(store.total_insurance, s)}",
            f"Net Worth: {_money(store.net_worth, s)}",
            "",
        ]
        for asset in assets:
            lines.append(f"• {asset.name} [{asset.type.label}]: {_money(asset.amount, s)}")
            detail = _detail_line(asset.details, s)
            if detail:
                lines.append(f"    {detail}")
        lines.append("")

    lines.append("=== END OF FINANCIAL DATA ===")
    return "\n".join(lines)


def _detail_line(details, s: str) -> Optional[str]:
    if details is None:
        return None
    if details.kind == "loan":
        return (
            f"Loan: Total {_money(details.total_loan_amount, s)}, "
            f"EMI {_money(details.monthly_emi, s)}, "
            f"Remaining {_money(details.remaining_amount, s)}, "
            f"Rate {details.interest_rate}%"
        )
    if details.kind == "fixed_deposit":
        return (
            f"FD at {details.bank_name}: Principal {_money(details.principal_amount, s)}, "
            f"Rate {details.interest_rate}%"
        )
    if details.kind == "mutual_fund":
        return (
            f"MF: Lumpsum {_money(details.lumpsum, s)}, "
            f"SIP {_money(details.sip_monthly, s)}/month, "
            f"Current Value {_money(details.current_value, s)}"
        )
    if details.kind == "stock":
        return (
            f"Stock: {details.company_name}, {details.number_of_shares} shares "
            f"@ {_money(details.price_per_share, s)}"
        )
    if details.kind == "gold":
        return (
            f"{details.metal_type}: {details.weight_in_grams}g "
            f"@ {_money(details.price_per_gram, s)}/g"
        )
    if details.kind == "insurance":
        return (
            f"Insurance: Premium {_money(details.monthly_premium, s)}/month, "
            f"Coverage {_money(details.coverage_amount, s)}"
        )
    return None
