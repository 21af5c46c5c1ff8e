from typing import Optional

from fastapi import APIRouter, Depends, Query, UploadFile

from app.api.deps import get_catalog_service
from app.errors import ValidationError
from app.models.base import ApiResponse
from app.models.product import (
    PRODUCT_TYPES,
    Product,
    ProductCategory,
    ProductCreate,
    ProductImportResult,
    RestockRequest,
)
from app.services.catalog_service import CatalogService
from app.services.stock_sheet_parser import parse_stock_sheet

router = APIRouter(tags=["products"])


@router.get("/products", response_model=ApiResponse[list[Product]], response_model_exclude_none=True)
def get_products(
    category: Optional[ProductCategory] = Query(None),
    sub_category: Optional[str] = Query(None),
    service: CatalogService = Depends(get_catalog_service),
):
    """Active products, optionally filtered by category / sub-category."""
    products = service.list_products(
        category.value if category else None,
        sub_category,
    )
    return ApiResponse(data=products)


@router.get("/products/types", response_model=ApiResponse[dict[ProductCategory, list[str]]])
def get_product_types():
    return ApiResponse(data=PRODUCT_TYPES)


@router.post(
    "/products",
    status_code=201,
    response_model=ApiResponse[Product],
    response_model_exclude_none=True,
)
def create_product(product: ProductCreate, service: CatalogService = Depends(get_catalog_service)):
    return ApiResponse(data=service.create_product(product))


@router.post(
    "/products/import",
    status_code=201,
    response_model=ApiResponse[ProductImportResult],
    response_model_exclude_none=True,
)
def import_products(file: UploadFile, service: CatalogService = Depends(get_catalog_service)):
    """Create products from an uploaded Excel stock sheet."""
    if not file.filename:
        raise ValidationError("No filename provided")

    ext = file.filename.rsplit(".", 1)[-1].lower() if "." in file.filename else ""
    if ext not in ("xlsx", "xls"):
        raise ValidationError(f"Unsupported file type '.{ext}'. Please upload .xlsx or .xls")

    try:
        parsed = parse_stock_sheet(file.file, file.filename)
    except ValueError as e:
        raise ValidationError(str(e))

    products = service.import_products(parsed)
    return ApiResponse(data=ProductImportResult(imported=len(products), products=products))


@router.patch(
    "/products/{product_id}/stock",
    response_model=ApiResponse[Product],
    response_model_exclude_none=True,
)
def restock_product(
    product_id: int,
    request: RestockRequest,
    service: CatalogService = Depends(get_catalog_service),
):
    return ApiResponse(data=service.restock_product(product_id, request.quantity_to_add))
