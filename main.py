"""
HS Code Resolver: Main Application

FastAPI application entry point.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import structlog
from datetime import datetime, timezone

from config import settings, check_connection

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Check the catalog store before serving.

    Logs the carrier, template and company counts. Missing templates are
    only a warning, since they can be seeded while the app runs.
    """
    logger.info(
        "resolver_starting",
        environment=settings.environment,
        debug=settings.debug,
        upload_bucket=settings.upload_bucket,
        result_bucket=settings.result_bucket
    )

    db_status = check_connection()
    if db_status["status"] == "healthy":
        logger.info(
            "catalog_store_ready",
            carriers=db_status["carriers_count"],
            templates=db_status["templates_count"],
            companies=db_status["companies_count"]
        )
    elif db_status["status"] == "no_templates":
        logger.warning(
            "no_templates_configured",
            hint="run scripts/seed_templates.py"
        )
    else:
        logger.error(
            "catalog_store_unreachable",
            error=db_status.get("error")
        )

    yield

    logger.info("resolver_shutting_down")


# Create FastAPI app
app = FastAPI(
    title="HS Code Resolver",
    description="Fills HS codes into carrier shipment spreadsheets from a per-company product catalog",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """
    Health check.

    "healthy" only when the catalog store answers and at least one
    template exists; otherwise "degraded" with the store status attached.
    """
    db_status = check_connection()

    return {
        "status": "healthy" if db_status["status"] == "healthy" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "database": db_status
    }


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "name": "HS Code Resolver API",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "uploads": "/api/uploads",
            "excel": "/api/excel",
            "companies": "/api/companies",
            "products": "/api/products",
            "carriers": "/api/carriers"
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns standard error format.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.excel import router as excel_router
from routes.companies import router as companies_router
from routes.products import router as products_router
from routes.carriers import router as carriers_router

app.include_router(excel_router, prefix="/api", tags=["Excel"])
app.include_router(companies_router, prefix="/api/companies", tags=["Companies"])
app.include_router(products_router, prefix="/api/products", tags=["Products"])
app.include_router(carriers_router, prefix="/api/carriers", tags=["Carriers"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
