"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from compwise_payroll.api.routes import health_router, payroll_router
from compwise_payroll.calculators.policy import PolicyUpdateError
from compwise_payroll.calculators.slab_tax import InvalidSlabScheduleError
from compwise_payroll.config import get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title="CompWise Payroll API",
        description="Monthly and annual salary breakdown calculator",
        version=settings.engine_version,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(PolicyUpdateError)
    async def policy_update_exception_handler(
        request: Request, exc: PolicyUpdateError
    ) -> JSONResponse:
        """Reject unknown or malformed policy overrides."""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc), "code": "INVALID_POLICY_OVERRIDE"},
        )

    @app.exception_handler(InvalidSlabScheduleError)
    async def slab_schedule_exception_handler(
        request: Request, exc: InvalidSlabScheduleError
    ) -> JSONResponse:
        """Reject malformed tax slab schedules."""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.problems, "code": "INVALID_SLAB_SCHEDULE"},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(payroll_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
