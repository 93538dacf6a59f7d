"""
Financial Store Package

The store owns the active user's data; the session manager decides whose
data that is.
"""

from pocketledger.store.context import SessionContext, SessionState
from pocketledger.store.financial_store import FinancialStore, affects_spend
from pocketledger.store.session import SessionManager

__all__ = [
    "FinancialStore",
    "SessionContext",
    "SessionManager",
    "SessionState",
    "affects_spend",
]
