"""
Asset Models

Assets cover everything the user tracks outside of budgets:
investments, loans (liabilities) and insurance policies.

DESIGN DECISION: Type-specific data is a tagged union keyed by `kind`.
An asset carries at most one detail payload and that payload must be the
variant its type calls for. Simultaneously populated detail structs are
not representable.

DESIGN DECISION: When details are present, `amount` is derived from them
and cannot drift:
- mutual fund  -> current value (lumpsum and SIP are informational)
- stock        -> shares x price per share
- gold/silver  -> weight x price per gram
- fixed deposit-> principal
- loan         -> remaining amount
- insurance    -> coverage amount
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Iterable, Literal, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# ENUMS - Categories and types
# =============================================================================

class AssetCategory(str, Enum):
    """Top-level grouping used for totals and net worth."""
    INVESTMENTS = "investments"
    LOANS = "loans"
    INSURANCE = "insurance"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def icon(self) -> str:
        return _CATEGORY_ICONS[self]


class AssetType(str, Enum):
    """
    Concrete asset kinds.

    Each type belongs to exactly one category (see ASSET_TYPE_TABLE).
    """
    MUTUAL_FUNDS = "mutual_funds"
    STOCKS = "stocks"
    GOLD = "gold"
    FIXED_DEPOSIT = "fixed_deposit"
    HOME_LOAN = "home_loan"
    CAR_LOAN = "car_loan"
    EDUCATION_LOAN = "education_loan"
    OTHER_LOAN = "other_loan"
    HEALTH_INSURANCE = "health_insurance"
    LIFE_INSURANCE = "life_insurance"
    LIC = "lic"

    @property
    def category(self) -> AssetCategory:
        return ASSET_TYPE_TABLE[self].category

    @property
    def detail_kind(self) -> str:
        return ASSET_TYPE_TABLE[self].detail_kind

    @property
    def label(self) -> str:
        return ASSET_TYPE_TABLE[self].label

    @property
    def icon(self) -> str:
        return ASSET_TYPE_TABLE[self].icon

    @property
    def color(self) -> str:
        return ASSET_TYPE_TABLE[self].color


class AssetTypeInfo(BaseModel):
    """Fixed metadata for one asset type."""
    model_config = ConfigDict(frozen=True)

    category: AssetCategory
    detail_kind: str
    label: str
    icon: str
    color: str


_CATEGORY_ICONS = {
    AssetCategory.INVESTMENTS: "arrow.up.right.circle.fill",
    AssetCategory.LOANS: "arrow.down.right.circle.fill",
    AssetCategory.INSURANCE: "shield.checkered",
}

# Authoritative type -> category mapping. Order is the display order.
ASSET_TYPE_TABLE: dict[AssetType, AssetTypeInfo] = {
    AssetType.MUTUAL_FUNDS: AssetTypeInfo(
        category=AssetCategory.INVESTMENTS, detail_kind="mutual_fund",
        label="Mutual Funds", icon="chart.pie.fill", color="blue",
    ),
    AssetType.STOCKS: AssetTypeInfo(
        category=AssetCategory.INVESTMENTS, detail_kind="stock",
        label="Stocks", icon="chart.line.uptrend.xyaxis", color="green",
    ),
    AssetType.GOLD: AssetTypeInfo(
        category=AssetCategory.INVESTMENTS, detail_kind="gold",
        label="Gold/Silver", icon="crown.fill", color="yellow",
    ),
    AssetType.FIXED_DEPOSIT: AssetTypeInfo(
        category=AssetCategory.INVESTMENTS, detail_kind="fixed_deposit",
        label="Fixed Deposit", icon="building.columns.fill", color="purple",
    ),
    AssetType.HOME_LOAN: AssetTypeInfo(
        category=AssetCategory.LOANS, detail_kind="loan",
        label="Home Loan", icon="house.fill", color="orange",
    ),
    AssetType.CAR_LOAN: AssetTypeInfo(
        category=AssetCategory.LOANS, detail_kind="loan",
        label="Car Loan", icon="car.fill", color="red",
    ),
    AssetType.EDUCATION_LOAN: AssetTypeInfo(
        category=AssetCategory.LOANS, detail_kind="loan",
        label="Education Loan", icon="book.fill", color="indigo",
    ),
    AssetType.OTHER_LOAN: AssetTypeInfo(
        category=AssetCategory.LOANS, detail_kind="loan",
        label="Other Loan", icon="creditcard.fill", color="gray",
    ),
    AssetType.HEALTH_INSURANCE: AssetTypeInfo(
        category=AssetCategory.INSURANCE, detail_kind="insurance",
        label="Health Insurance", icon="cross.case.fill", color="cyan",
    ),
    AssetType.LIFE_INSURANCE: AssetTypeInfo(
        category=AssetCategory.INSURANCE, detail_kind="insurance",
        label="Life Insurance", icon="heart.fill", color="pink",
    ),
    AssetType.LIC: AssetTypeInfo(
        category=AssetCategory.INSURANCE, detail_kind="insurance",
        label="LIC", icon="shield.fill", color="teal",
    ),
}


def types_for_category(category: AssetCategory) -> list[AssetType]:
    """Asset types selectable under a category, in display order."""
    return [t for t, info in ASSET_TYPE_TABLE.items() if info.category == category]


# =============================================================================
# DETAIL PAYLOADS
# =============================================================================

class MutualFundDetails(BaseModel):
    kind: Literal["mutual_fund"] = "mutual_fund"
    lumpsum: Decimal = Field(default=Decimal("0"), description="One-time investment")
    sip_monthly: Decimal = Field(default=Decimal("0"), description="Monthly SIP amount")
    sip_start_date: Optional[datetime] = None
    current_value: Decimal = Field(..., description="Current market value")

    def derived_amount(self) -> Decimal:
        return self.current_value


class StockDetails(BaseModel):
    kind: Literal["stock"] = "stock"
    company_name: str
    number_of_shares: int = Field(..., ge=0)
    price_per_share: Decimal
    purchase_date: datetime = Field(default_factory=datetime.now)

    def derived_amount(self) -> Decimal:
        return Decimal(self.number_of_shares) * self.price_per_share


class GoldDetails(BaseModel):
    kind: Literal["gold"] = "gold"
    weight_in_grams: Decimal
    price_per_gram: Decimal
    metal_type: str = Field(default="Gold", description="'Gold' or 'Silver'")

    def derived_amount(self) -> Decimal:
        return self.weight_in_grams * self.price_per_gram


class FixedDepositDetails(BaseModel):
    kind: Literal["fixed_deposit"] = "fixed_deposit"
    bank_name: str
    deposit_date: datetime
    maturity_date: datetime
    interest_rate: Decimal
    principal_amount: Decimal

    def derived_amount(self) -> Decimal:
        return self.principal_amount


class EMIPayment(BaseModel):
    """One installment paid against a loan. Never edited once recorded."""

    id: UUID = Field(default_factory=uuid4)
    amount: Decimal
    payment_date: datetime = Field(default_factory=datetime.now)
    notes: str = ""


class LoanDetails(BaseModel):
    """
    Loan terms plus the append-only EMI payment history.

    remaining_amount only ever moves down, and never below zero.
    """
    kind: Literal["loan"] = "loan"
    total_loan_amount: Decimal
    monthly_emi: Decimal = Decimal("0")
    remaining_amount: Decimal
    start_date: datetime = Field(default_factory=datetime.now)
    interest_rate: Decimal = Decimal("0")
    tenure: int = Field(default=0, ge=0, description="Tenure in months")
    emi_payments: list[EMIPayment] = Field(default_factory=list)

    def derived_amount(self) -> Decimal:
        return self.remaining_amount

    @property
    def amount_paid(self) -> Decimal:
        return sum((p.amount for p in self.emi_payments), Decimal("0"))

    @property
    def repayment_progress(self) -> Decimal:
        """Share of the principal already repaid (0-1)."""
        if self.total_loan_amount <= 0:
            return Decimal("0")
        return 1 - (self.remaining_amount / self.total_loan_amount)

    def with_payment(self, payment: EMIPayment) -> "LoanDetails":
        """Return a copy with the payment appended and the balance reduced."""
        remaining = max(Decimal("0"), self.remaining_amount - payment.amount)
        return self.model_copy(
            update={
                "remaining_amount": remaining,
                "emi_payments": [*self.emi_payments, payment],
            },
            deep=True,
        )


class InsuranceDetails(BaseModel):
    kind: Literal["insurance"] = "insurance"
    monthly_premium: Decimal
    coverage_amount: Decimal
    start_date: datetime = Field(default_factory=datetime.now)
    policy_number: str = ""

    def derived_amount(self) -> Decimal:
        return self.coverage_amount


AssetDetails = Annotated[
    Union[
        MutualFundDetails,
        StockDetails,
        GoldDetails,
        FixedDepositDetails,
        LoanDetails,
        InsuranceDetails,
    ],
    Field(discriminator="kind"),
]


# =============================================================================
# ASSET
# =============================================================================

class Asset(BaseModel):
    """
    A tracked investment, loan or insurance policy.

    `category` may be omitted; it is filled in from the type table.
    A category that contradicts the type is rejected.

    An asset without details keeps the amount it was given. A loan-type
    asset without LoanDetails therefore has no remaining balance to
    mirror, and EMI payments against it are ignored.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., max_length=200)
    amount: Decimal = Field(
        default=Decimal("0"),
        description="Current valuation; derived from details when present"
    )
    type: AssetType
    category: Optional[AssetCategory] = None
    notes: str = ""
    date_added: datetime = Field(default_factory=datetime.now)
    details: Optional[AssetDetails] = None

    @model_validator(mode="after")
    def enforce_type_rules(self) -> "Asset":
        """Align category with type and derive amount from details."""
        expected = self.type.category
        if self.category is None:
            self.category = expected
        elif self.category != expected:
            raise ValueError(
                f"Asset type {self.type.label} belongs to {expected.label}, "
                f"not {self.category.label}"
            )

        if self.details is not None:
            if self.details.kind != self.type.detail_kind:
                raise ValueError(
                    f"{self.type.label} assets take {self.type.detail_kind} "
                    f"details, got {self.details.kind}"
                )
            self.amount = self.details.derived_amount()

        return self

    @property
    def loan_details(self) -> Optional[LoanDetails]:
        return self.details if isinstance(self.details, LoanDetails) else None


# =============================================================================
# PORTFOLIO TOTALS
# =============================================================================

def total_for_category(assets: Iterable[Asset], category: AssetCategory) -> Decimal:
    return sum(
        (asset.amount for asset in assets if asset.category == category),
        Decimal("0"),
    )


class PortfolioTotals(BaseModel):
    """Category totals for a set of assets."""

    total_investments: Decimal = Decimal("0")
    total_liabilities: Decimal = Decimal("0")
    total_insurance: Decimal = Decimal("0")

    @property
    def net_worth(self) -> Decimal:
        return self.total_investments - self.total_liabilities

    @classmethod
    def from_assets(cls, assets: Iterable[Asset]) -> "PortfolioTotals":
        assets = list(assets)
        return cls(
            total_investments=total_for_category(assets, AssetCategory.INVESTMENTS),
            total_liabilities=total_for_category(assets, AssetCategory.LOANS),
            total_insurance=total_for_category(assets, AssetCategory.INSURANCE),
        )
