from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
from audit_retention.app.services.purge_scheduler import PurgeScheduler
from audit_retention.app.services.store_errors import StoreUnavailable
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    if exc.base_error.code in ("PARTIAL_PURGE_FAILURE", "STORE_UNAVAILABLE"):
        error_dict["message"] = exc.base_error.message
    logger.error(f"Server error: {exc.base_error.code} {exc.base_error.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_store_unavailable(request: Request, exc: StoreUnavailable):
    logger.error(f"Store unavailable ({exc.store}): {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"code": "STORE_UNAVAILABLE", "message": "Store unavailable"}},
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    error_dict = {"code": "VALIDATION_ERROR", "message": "Invalid request parameters"}
    logger.warning(f"Client error: {error_dict} {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"error": error_dict}
    )


def create_app(ApplicationConfig) -> FastAPI:
    from audit_retention.depends import (
        get_blob_store,
        get_retention_policy,
        unit_of_work_scope,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        scheduler = PurgeScheduler(
            unit_of_work_scope,
            get_blob_store(),
            get_retention_policy(),
            system_user_email=ApplicationConfig.SYSTEM_USER_EMAIL,
        )
        app.state.purge_scheduler = scheduler
        if ApplicationConfig.PURGE_SCHEDULER_ENABLED:
            scheduler.start()
        yield
        await scheduler.stop()

    app = FastAPI(title="Audit & Retention API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from audit_retention.api.routes import audit, documents, health_check

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(audit.router, prefix=ApplicationConfig.API_PREFIX, tags=["Audit"])
    app.include_router(
        documents.router, prefix=ApplicationConfig.API_PREFIX, tags=["Documents"]
    )

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(StoreUnavailable, handle_store_unavailable)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    return app
