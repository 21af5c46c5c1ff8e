from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.base import CamelModel


class LoanScheme(BaseModel):
    """A named flat-interest policy. ``interest_rate`` is percent per month."""
    id: int
    name: str
    interest_rate: Decimal = Field(ge=0)
    min_dp_percent: Decimal = Field(ge=0, le=100)
    tenor_options: list[int] = Field(min_length=1)
    penalty_fee_daily: Decimal = Decimal("0")
    is_active: bool = True

    @field_validator("tenor_options")
    @classmethod
    def _tenors_positive(cls, value: list[int]) -> list[int]:
        if any(t <= 0 for t in value):
            raise ValueError("tenor options must be positive month counts")
        return value


class SchemeSnapshot(BaseModel):
    """Frozen copy of a LoanScheme embedded in a transaction.

    Tagged with ``kind``/``version`` so stored snapshots stay readable if the
    scheme shape ever changes.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["loan_scheme"] = "loan_scheme"
    version: Literal[1] = 1
    scheme_id: int
    name: str
    interest_rate: Decimal
    min_dp_percent: Decimal
    tenor_options: tuple[int, ...]
    penalty_fee_daily: Decimal
    is_active: bool

    @classmethod
    def from_scheme(cls, scheme: LoanScheme) -> "SchemeSnapshot":
        return cls(
            scheme_id=scheme.id,
            name=scheme.name,
            interest_rate=scheme.interest_rate,
            min_dp_percent=scheme.min_dp_percent,
            tenor_options=tuple(scheme.tenor_options),
            penalty_fee_daily=scheme.penalty_fee_daily,
            is_active=scheme.is_active,
        )


class SchemeSummary(CamelModel):
    id: int
    name: str
    interest_rate: str
    tenor_options: list[int]
