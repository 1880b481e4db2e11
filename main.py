"""
Billing Gateway - Main Application Entry Point

This module initializes the FastAPI application exposing payment profiles,
payment methods and order payments backed by the configured gateway driver.
"""

import structlog
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from api import routes
from api.middleware import log_api_entry
from core.dependencies import clear_settings, get_settings, init_settings
from core.logging import configure_logging
from core.metrics import init_metrics
from core.settings import Settings
from db.session import init_db
from payments.braintree_service import MissingPaymentProfileError
from payments.gateway import PaymentGatewayError

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI application startup and shutdown events."""
    init_db(init_settings())
    yield
    clear_settings()


app = FastAPI(
    title="Billing Gateway",
    description="Payment profiles, payment methods and order payments over Braintree.",
    version="1.0.0",
    lifespan=lifespan,
)

init_metrics(app)

app.middleware("http")(log_api_entry)


@app.exception_handler(MissingPaymentProfileError)
async def missing_profile_handler(request: Request, exc: MissingPaymentProfileError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(PaymentGatewayError)
async def gateway_error_handler(request: Request, exc: PaymentGatewayError):
    log.warning("api.gateway_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=402, content={"detail": str(exc)})


@app.get("/healthz")
async def health_check(settings: Settings = Depends(get_settings)):
    """Health check endpoint to verify API status."""
    return {
        "status": "ok",
        "app_name": settings.APP_NAME,
        "gateway": settings.PAYMENT_GATEWAY_DRIVER,
        "environment": settings.ENVIRONMENT,
    }


API_PREFIX = "/api/v1"

app.include_router(routes.router, prefix=API_PREFIX)


def main():
    configure_logging()
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
