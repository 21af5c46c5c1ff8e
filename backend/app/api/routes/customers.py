from fastapi import APIRouter, Depends, Query

from app.api.deps import get_customer_service
from app.models.base import ApiResponse
from app.models.customer import Customer, CustomerCreate, CustomerDetail
from app.services.customer_service import CustomerService

router = APIRouter(tags=["customers"])


@router.get("/customers", response_model=ApiResponse[list[Customer]], response_model_exclude_none=True)
def search_customers(
    query: str = Query("", description="Matches name, phone or NIK"),
    service: CustomerService = Depends(get_customer_service),
):
    return ApiResponse(data=service.search(query))


@router.post(
    "/customers",
    status_code=201,
    response_model=ApiResponse[Customer],
    response_model_exclude_none=True,
)
def create_customer(customer: CustomerCreate, service: CustomerService = Depends(get_customer_service)):
    return ApiResponse(data=service.register(customer))


@router.get(
    "/customers/{customer_id}",
    response_model=ApiResponse[CustomerDetail],
    response_model_exclude_none=True,
)
def get_customer_detail(customer_id: int, service: CustomerService = Depends(get_customer_service)):
    """Customer profile with transaction history, newest first."""
    return ApiResponse(data=service.get_detail(customer_id))
