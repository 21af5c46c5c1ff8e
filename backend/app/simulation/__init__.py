"""Credit simulation: flat-interest breakdown and installment schedule."""
from app.simulation.credit import calculate_simulation, minimum_down_payment, validate_terms
from app.simulation.schedule import MAX_DUE_DATE_DAY, installment_due_dates, validate_due_date_day

__all__ = [
    "calculate_simulation",
    "minimum_down_payment",
    "validate_terms",
    "MAX_DUE_DATE_DAY",
    "installment_due_dates",
    "validate_due_date_day",
]
