# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the ClinicalRxQ site.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.exceptions import (
    ClinicalRxQException,
    clinicalrxq_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.routers import (
    clinical_programs,
    dev,
    health,
    library,
    members,
    pages,
    programs,
    resource_library,
)
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs which backing services are configured; missing ones only disable
    the endpoints that need them.
    """
    # Startup
    logger.info(f"Starting ClinicalRxQ in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.airtable_configured:
        logger.warning("Airtable is not configured; program and library endpoints will return 500")
    if not settings.supabase_configured:
        logger.warning("Supabase is not configured; catalog endpoints will return 500")

    yield

    # Shutdown
    logger.info("Shutting down ClinicalRxQ")


# Create FastAPI application
app = FastAPI(
    title="ClinicalRxQ",
    description="""
## ClinicalRxQ Membership Site

Marketing pages, a member dashboard and a resource library for pharmacy
clinical-services training.

### Data sources

| Source | Used for |
|--------|----------|
| **Airtable** | Clinical programs and the resource library (`/api/...`) |
| **Supabase** | Migrated files and the member catalog (`/api/v1/...`) |

### Quick Start

```bash
# Program list
curl http://localhost:8000/api/clinical-programs

# One program
curl "http://localhost:8000/api/clinical-programs?programSlug=timemymeds"

# Library search
curl "http://localhost:8000/api/resource-library?cat=handouts&q=a1c"

# Member login (demo account)
curl -X POST http://localhost:8000/api/v1/auth/login \\
  -H "Content-Type: application/json" \\
  -d '{"email": "demo@clinicalrxq.com", "password": "password"}'
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Programs",
            "description": "Clinical programs (Airtable and Supabase)",
        },
        {
            "name": "Library",
            "description": "Resource library and member catalog",
        },
        {
            "name": "Auth",
            "description": "Mocked member authentication",
        },
        {
            "name": "Members",
            "description": "Dashboard, bookmarks and recent activity",
        },
        {
            "name": "Dev",
            "description": "Airtable diagnostics (not available in production)",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(ClinicalRxQException)
async def handle_clinicalrxq_exception(request: Request, exc: ClinicalRxQException):
    """Handle custom ClinicalRxQ exceptions."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: [{exc.code}] {exc.message}")
    return await clinicalrxq_exception_handler(request, exc)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    """Handle framework errors such as 404 and 405."""
    return await http_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Airtable proxy endpoints
app.include_router(
    clinical_programs.router,
    prefix="/api",
    tags=["Programs"]
)

app.include_router(
    resource_library.router,
    prefix="/api",
    tags=["Library"]
)

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Supabase program catalog
app.include_router(
    programs.router,
    prefix="/api/v1/programs",
    tags=["Programs"]
)

# Supabase resource library
app.include_router(
    library.router,
    prefix="/api/v1/library",
    tags=["Library"]
)

# Dashboard, bookmarks and activity
app.include_router(
    members.router,
    prefix="/api/v1",
    tags=["Members"]
)

# Development tools
app.include_router(
    dev.router,
    prefix="/api/v1/dev",
    tags=["Dev"]
)

app.include_router(
    dev.setup_router,
    tags=["Dev"]
)

# HTML pages (registered last so API routes win)
app.include_router(pages.router)
