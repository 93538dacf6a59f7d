"""
Data Models Package

All pydantic models used by pocketledger. Everything the store persists
is one of these.
"""

from pocketledger.models.asset import (
    ASSET_TYPE_TABLE,
    Asset,
    AssetCategory,
    AssetType,
    AssetTypeInfo,
    EMIPayment,
    FixedDepositDetails,
    GoldDetails,
    InsuranceDetails,
    LoanDetails,
    MutualFundDetails,
    PortfolioTotals,
    StockDetails,
    total_for_category,
    types_for_category,
)
from pocketledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from pocketledger.models.budget import Budget, Expense, make_miscellaneous_budget
from pocketledger.models.user import User, start_of_day

__all__ = [
    # Budget models
    "Budget",
    "Expense",
    "make_miscellaneous_budget",
    # Asset models
    "ASSET_TYPE_TABLE",
    "Asset",
    "AssetCategory",
    "AssetType",
    "AssetTypeInfo",
    "EMIPayment",
    "FixedDepositDetails",
    "GoldDetails",
    "InsuranceDetails",
    "LoanDetails",
    "MutualFundDetails",
    "PortfolioTotals",
    "StockDetails",
    "total_for_category",
    "types_for_category",
    # User
    "User",
    "start_of_day",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
