from fastapi import APIRouter, Depends

from app.api.deps import get_credit_service
from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.base import ApiResponse
from app.models.scheme import SchemeSummary
from app.models.simulation import CreateTransactionRequest, SimulateResponse, SimulationRequest
from app.models.transaction import TransactionCreated
from app.services.credit_service import CreditService

router = APIRouter(tags=["transactions"])


@router.post(
    "/transactions/simulate",
    response_model=ApiResponse[SimulateResponse],
    response_model_exclude_none=True,
)
def simulate(request: SimulationRequest, service: CreditService = Depends(get_credit_service)):
    """Credit simulation for the POS screen. Nothing is persisted.

    Every rejection, including an unknown or inactive scheme, is a 400 here.
    """
    try:
        result = service.simulate(request)
    except (NotFoundError, ConflictError) as e:
        raise ValidationError(e.message) from e

    return ApiResponse(data=SimulateResponse(
        simulation=result.display,
        scheme=SchemeSummary(
            id=result.scheme.id,
            name=result.scheme.name,
            interest_rate=str(result.scheme.interest_rate),
            tenor_options=result.scheme.tenor_options,
        ),
    ))


@router.post(
    "/transactions",
    status_code=201,
    response_model=ApiResponse[TransactionCreated],
    response_model_exclude_none=True,
)
def create_transaction(
    request: CreateTransactionRequest,
    service: CreditService = Depends(get_credit_service),
):
    """Record a credit sale: transaction, contract, installment schedule, stock decrement."""
    receipt = service.create_transaction(request)
    return ApiResponse(
        message="Credit transaction created",
        data=TransactionCreated.from_receipt(receipt),
    )
