from fastapi import Request

from app.db.connection import DatabasePool
from app.services.catalog_service import CatalogService
from app.services.credit_service import CreditService
from app.services.customer_service import CustomerService
from app.services.payment_service import PaymentService

# Services are built once in create_app() and kept on app.state


def get_pool(request: Request) -> DatabasePool:
    return request.app.state.pool


def get_credit_service(request: Request) -> CreditService:
    return request.app.state.credit_service


def get_payment_service(request: Request) -> PaymentService:
    return request.app.state.payment_service


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service


def get_customer_service(request: Request) -> CustomerService:
    return request.app.state.customer_service
