"""Flat-interest credit simulation.

Pure function of (price, down payment, scheme, tenor). All money arithmetic
runs in ``Decimal`` with ROUND_HALF_UP for intermediate division; only the
per-installment figure is rounded up (ROUND_CEILING) to whole currency units
so the shop never under-collects.

Every installment uses the same ceiling-rounded figure, so
``monthly_installment * tenor_months`` can exceed ``total_loan`` by up to
``tenor_months - 1`` units. There is no remainder adjustment on the last
installment.
"""
from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_HALF_UP, Context, Decimal, localcontext

from app.errors import InsufficientDownPaymentError, InvalidTenorError, SchemeInactiveError
from app.models.scheme import LoanScheme
from app.models.simulation import SimulationDisplay, SimulationRaw, SimulationResult

MONEY_CONTEXT = Context(prec=28, rounding=ROUND_HALF_UP)

HUNDRED = Decimal("100")
TWO_PLACES = Decimal("0.01")
WHOLE = Decimal("1")


def minimum_down_payment(price: Decimal, min_dp_percent: Decimal) -> Decimal:
    """Smallest down payment the scheme accepts for ``price``."""
    with localcontext(MONEY_CONTEXT):
        return price * min_dp_percent / HUNDRED


def validate_terms(scheme: LoanScheme, price: Decimal, dp: Decimal, tenor_months: int) -> None:
    """Check scheme status, tenor and minimum down payment, first failure wins."""
    if not scheme.is_active:
        raise SchemeInactiveError(f'Loan scheme "{scheme.name}" is not active')

    if tenor_months not in scheme.tenor_options:
        options = ", ".join(str(t) for t in scheme.tenor_options)
        raise InvalidTenorError(
            f"Tenor of {tenor_months} months is not available. Options: {options} months"
        )

    min_dp = minimum_down_payment(price, scheme.min_dp_percent)
    if dp < min_dp:
        raise InsufficientDownPaymentError(
            f"Minimum down payment is {scheme.min_dp_percent.normalize():f}% of the price "
            f"({_fixed(min_dp, WHOLE)}). Down payment entered: {_fixed(dp, WHOLE)}"
        )


def calculate_simulation(
    scheme: LoanScheme,
    price: Decimal,
    dp: Decimal,
    tenor_months: int,
) -> SimulationResult:
    """Compute the financial breakdown of a sale under ``scheme``.

    Raises SchemeInactiveError, InvalidTenorError or
    InsufficientDownPaymentError. Price/dp sanity (price > 0, 0 <= dp < price)
    is the caller's responsibility.
    """
    validate_terms(scheme, price, dp, tenor_months)

    with localcontext(MONEY_CONTEXT):
        principal = price - dp
        interest_rate = scheme.interest_rate
        # Flat interest on the original principal for the whole tenor
        interest_amount = principal * interest_rate / HUNDRED * tenor_months
        total_loan = principal + interest_amount
        monthly_installment = (total_loan / tenor_months).quantize(WHOLE, rounding=ROUND_CEILING)

    raw = SimulationRaw(
        price=price,
        dp=dp,
        principal=principal,
        interest_rate=interest_rate,
        interest_amount=interest_amount,
        total_loan=total_loan,
        monthly_installment=monthly_installment,
        tenor_months=tenor_months,
    )
    display = SimulationDisplay(
        price=_fixed(price),
        dp=_fixed(dp),
        principal=_fixed(principal),
        interest_rate=_fixed(interest_rate),
        interest_amount=_fixed(interest_amount),
        total_loan=_fixed(total_loan),
        monthly_installment=_fixed(monthly_installment),
        tenor_months=tenor_months,
    )
    return SimulationResult(display=display, raw=raw, scheme=scheme)


def _fixed(value: Decimal, exp: Decimal = TWO_PLACES) -> str:
    with localcontext(MONEY_CONTEXT):
        return f"{value.quantize(exp, rounding=ROUND_HALF_UP):f}"
