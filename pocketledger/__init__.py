"""
pocketledger - Source Package

The local data store and balance engine of a personal finance tracker:
budgets with expenses, a miscellaneous catch-all budget, investments,
loans and insurance, all partitioned per user and persisted on device.

DESIGN PRINCIPLES:
1. One owner: every change goes through the FinancialStore
2. Derived values are computed, never stored stale
3. current_balance == monthly_start_balance - total_spent, always
4. A failed save never loses in-memory data
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "pocketledger Team"
