from fastapi import APIRouter, Depends

from app.api.deps import get_payment_service
from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.base import ApiResponse
from app.models.transaction import ContractDetail, PaymentResult
from app.services.payment_service import PaymentService

router = APIRouter(tags=["payments"])


@router.get(
    "/contracts/active",
    response_model=ApiResponse[list[ContractDetail]],
    response_model_exclude_none=True,
)
def get_active_contracts(service: PaymentService = Depends(get_payment_service)):
    return ApiResponse(data=service.list_active_contracts())


@router.post(
    "/installments/{installment_id}/pay",
    response_model=ApiResponse[PaymentResult],
    response_model_exclude_none=True,
)
def pay_installment(installment_id: int, service: PaymentService = Depends(get_payment_service)):
    """Settle one installment. Unknown and already-paid installments answer 400."""
    try:
        result = service.pay_installment(installment_id)
    except (NotFoundError, ConflictError) as e:
        raise ValidationError(e.message) from e
    return ApiResponse(message="Payment received successfully", data=result)
