"""
User Model

current_balance is stored so the presentation layer can read it
directly, but only FinancialStore.recalculate_current_balance writes it.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


def start_of_day(moment: Union[date, datetime]) -> datetime:
    """Truncate a date or datetime to midnight."""
    if isinstance(moment, datetime):
        return moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return datetime(moment.year, moment.month, moment.day)


def new_user_id() -> str:
    return uuid4().hex


class User(BaseModel):
    """The account that owns one partition of budgets and assets."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_user_id,
        min_length=1,
        description="Opaque account identifier"
    )
    first_name: str
    last_name: str
    email: str
    monthly_start_balance: Decimal = Field(
        default=Decimal("0"),
        description="Balance at the start of the tracking period"
    )
    current_balance: Decimal = Field(
        default=Decimal("0"),
        description="Start balance minus everything spent"
    )
    balance_start_date: datetime = Field(
        default_factory=lambda: start_of_day(datetime.now()),
        description="Start of the tracking period (day granularity)"
    )

    @field_validator("balance_start_date")
    @classmethod
    def truncate_to_day(cls, v: datetime) -> datetime:
        return start_of_day(v)

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def email_matches(self, email: str) -> bool:
        """Case-insensitive email comparison used by login."""
        return self.email.strip().casefold() == email.strip().casefold()
