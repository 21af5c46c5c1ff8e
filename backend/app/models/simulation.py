from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from app.models.base import CamelModel
from app.models.scheme import LoanScheme, SchemeSummary


class SimulationRequest(CamelModel):
    """Sale terms declared by the POS client."""
    # Bounded to the DECIMAL(19,4) money columns
    price: Decimal = Field(gt=0, max_digits=19, decimal_places=4)
    dp: Decimal = Field(ge=0, max_digits=19, decimal_places=4)
    scheme_id: int = Field(gt=0)
    tenor_months: int = Field(gt=0)

    @model_validator(mode="after")
    def _dp_below_price(self) -> "SimulationRequest":
        if self.dp >= self.price:
            raise ValueError("down payment must be less than the price")
        return self


class CreateTransactionRequest(SimulationRequest):
    product_id: int = Field(gt=0)
    customer_id: int = Field(gt=0)
    due_date_day: int


class SimulationDisplay(CamelModel):
    """Fixed two-decimal strings for the POS screen and printed documents."""
    price: str
    dp: str
    principal: str
    interest_rate: str
    interest_amount: str
    total_loan: str
    monthly_installment: str
    tenor_months: int


class SimulationRaw(BaseModel):
    """Full-precision figures used when persisting a contract."""
    price: Decimal
    dp: Decimal
    principal: Decimal
    interest_rate: Decimal
    interest_amount: Decimal
    total_loan: Decimal
    monthly_installment: Decimal
    tenor_months: int


class SimulationResult(BaseModel):
    display: SimulationDisplay
    raw: SimulationRaw
    scheme: LoanScheme


class SimulateResponse(CamelModel):
    simulation: SimulationDisplay
    scheme: SchemeSummary
