import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import customers, health, payments, products, schemes, transactions
from app.config import Settings, settings as default_settings
from app.db.connection import DatabasePool
from app.db.unit_of_work import sql_unit_of_work_factory
from app.errors import LedgerError
from app.logging import setup_logging
from app.services.catalog_service import CatalogService
from app.services.credit_service import CreditService
from app.services.customer_service import CustomerService
from app.services.payment_service import PaymentService

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    pool = DatabasePool(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: configure logging and open the DB pool
        setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
        pool.initialize()
        yield
        # Shutdown: close DB pool
        pool.close()

    app = FastAPI(title="Installment Ledger", version="0.1.0", lifespan=lifespan)

    uow_factory = sql_unit_of_work_factory(pool)
    app.state.pool = pool
    app.state.credit_service = CreditService(uow_factory)
    app.state.payment_service = PaymentService(uow_factory)
    app.state.catalog_service = CatalogService(uow_factory)
    app.state.customer_service = CustomerService(uow_factory)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.include_router(health.router, prefix="/api")
    app.include_router(schemes.router, prefix="/api")
    app.include_router(products.router, prefix="/api")
    app.include_router(customers.router, prefix="/api")
    app.include_router(transactions.router, prefix="/api")
    app.include_router(payments.router, prefix="/api")
    return app


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected (%d): %s",
                       request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error_string = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'] if p != 'body') or 'body'}: {err['msg']}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": f"Validation Failed: {error_string}"},
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal Server Error"})


app = create_app()
