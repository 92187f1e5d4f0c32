"""
main.py — Estate Planner FastAPI application entry point.

Start with: uvicorn estate_planner.main:app --reload --port 8000
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from estate_planner.config import settings
from estate_planner.errors import (
    ErrorBody,
    ErrorDetail,
    ErrorResponse,
    InputValidationError,
    RuleSelectionError,
    UnsupportedTaxYear,
)
from estate_planner.rules.catalog import RuleCatalog, default_rule_catalog

# ---------------------------------------------------------------------------
# Logging (configured before anything else)
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan: startup & shutdown hooks
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    catalog: RuleCatalog = app.state.rule_catalog
    for entry in catalog.registry():
        logger.info(
            "Rule version loaded jurisdiction=%s version=%s verified=%s",
            entry.jurisdiction.value,
            entry.version.version_id,
            entry.version.source_last_verified_on,
        )
    logger.info("Estate Planner v%s starting up", settings.app_version)
    yield
    logger.info("Estate Planner shutting down")


# ---------------------------------------------------------------------------
# Error response helper
# ---------------------------------------------------------------------------
def _make_error_response(
    code: str,
    message: str,
    details: list[ErrorDetail] | None = None,
    status_code: int = 500,
) -> JSONResponse:
    """Build a standard {error: {code, message, details}} response."""
    body = ErrorResponse(
        error=ErrorBody(
            code=code,
            message=message,
            details=details or [],
        )
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Converts Pydantic / FastAPI structural errors to the standard format.
    Returns ALL field violations in one response, as 400 like the business-rule gate.
    """
    details = []
    for error in exc.errors():
        # Build dot-notation field path, excluding the top-level 'body' loc
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        details.append(ErrorDetail(field=field or None, issue=error["msg"]))
    return _make_error_response(
        code="VALIDATION_ERROR",
        message="Request validation failed",
        details=details,
        status_code=400,
    )


async def input_validation_handler(
    request: Request, exc: InputValidationError
) -> JSONResponse:
    """Business-rule violations collected by the validation gate."""
    return _make_error_response(
        code="VALIDATION_ERROR",
        message="Input validation failed",
        details=exc.issues,
        status_code=400,
    )


async def rule_selection_handler(
    request: Request, exc: RuleSelectionError
) -> JSONResponse:
    """
    No rule version for the requested jurisdiction/year. Kept distinct from
    validation so clients can tell "bad input" from "rules not published".
    """
    if isinstance(exc, UnsupportedTaxYear):
        logger.info(
            "Rule selection failed jurisdiction=%s tax_year=%d on %s",
            exc.jurisdiction.value,
            exc.tax_year,
            request.url.path,
        )
    return _make_error_response(
        code="RULE_SELECTION_ERROR",
        message=str(exc),
        status_code=422,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Converts HTTPException to standard error format with semantic code."""
    code_map = {
        400: "BAD_REQUEST",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        409: "CONFLICT",
        413: "PAYLOAD_TOO_LARGE",
        422: "VALIDATION_ERROR",
        429: "RATE_LIMITED",
    }
    code = code_map.get(exc.status_code, f"HTTP_{exc.status_code}")
    return _make_error_response(
        code=code,
        message=str(exc.detail),
        status_code=exc.status_code,
    )


async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """
    Catch-all for unexpected errors.
    DEBUG=true  → includes exception type & message in details (dev only).
    DEBUG=false → generic message; full traceback logged server-side only.
    """
    logger.error(
        "Unhandled exception on %s %s",
        request.method,
        request.url.path,
        exc_info=True,
    )
    if settings.debug:
        details = [ErrorDetail(issue=f"{type(exc).__name__}: {exc}")]
        message = "An unexpected error occurred (debug details included)"
    else:
        details = []
        message = "An unexpected error occurred"
    return _make_error_response(
        code="INTERNAL_ERROR",
        message=message,
        details=details,
        status_code=500,
    )


# ---------------------------------------------------------------------------
# Health endpoint (no auth required)
# ---------------------------------------------------------------------------
async def health_check() -> dict:
    """Returns service health status."""
    return {
        "status": "ok",
        "version": settings.app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------
def create_app(catalog: Optional[RuleCatalog] = None) -> FastAPI:
    """
    Build the app around a rule catalog. The default catalog is the built-in
    South Africa table; tests pass their own to exercise alternate versions.
    """
    app = FastAPI(
        title="Estate Planner API",
        version=settings.app_version,
        description=(
            "Deceased-estate tax and liquidity modelling: CGT on death, estate duty, "
            "liquidity gap, scenario optimisation and stress testing."
        ),
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.state.rule_catalog = catalog if catalog is not None else default_rule_catalog()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Registered BEFORE routers
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(InputValidationError, input_validation_handler)
    app.add_exception_handler(RuleSelectionError, rule_selection_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.add_api_route("/api/health", health_check, methods=["GET"], tags=["System"])

    from estate_planner.rules.routes import router as rules_router
    from estate_planner.scenario.routes import router as scenario_router

    app.include_router(rules_router)
    app.include_router(scenario_router)
    return app


app = create_app()
