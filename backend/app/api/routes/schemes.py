from fastapi import APIRouter, Depends

from app.api.deps import get_catalog_service
from app.models.base import ApiResponse
from app.models.scheme import LoanScheme
from app.services.catalog_service import CatalogService

router = APIRouter(tags=["schemes"])


@router.get("/schemes", response_model=ApiResponse[list[LoanScheme]], response_model_exclude_none=True)
def get_schemes(service: CatalogService = Depends(get_catalog_service)):
    """Active loan schemes, ordered by name."""
    return ApiResponse(data=service.list_schemes())
