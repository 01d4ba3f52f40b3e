# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Trayve Media API.
# Wires middleware, error handlers and the feature routers.
#
# Usage:
#   uvicorn app.main:app --reload
#   python -m app.main            # host/port from API_HOST / API_PORT
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    TrayveException,
    trayve_exception_handler,
    validation_exception_handler,
)
from app.routers import health, projects, credits, subscription, images, pipeline, models, tasks
from app.auth import routes as auth_routes
from lib.supabase_client import SupabaseClientError

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the effective configuration on startup and the shutdown."""
    logger.info(f"Starting Trayve Media API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Shop domain header: {settings.SHOP_DOMAIN_HEADER}")

    yield

    logger.info("Shutting down Trayve Media API")


app = FastAPI(
    title="Trayve Media API",
    description="""
## Tier-Aware Media API for the Trayve Shopify App

Trayve generates fashion try-on images and runs each one through a staged
pipeline: try-on, 2K upscale, 4K enhancement, face swap and optional
background removal. This API tells the embedded app how to show every
image for the merchant's plan.

### Display Decisions

Each image in `GET /projects/{id}/results` comes with:

| Field | Meaning |
|-------|---------|
| **badge** | `processing`, `2k-ready`, `4k-processing`, `finalizing` or `4k-ready` |
| **display_url** | Best preview the plan may see |
| **actions** | Whether Download and Remove Background are enabled |
| **downloads** | Standard / 4K / BG Removed versions |

Free and Creator plans get 2K output. Professional and Enterprise get 4K
enhancement and face swap.

### Identifying the Shop

Requests carry the shop domain in the `X-Shopify-Shop-Domain` header,
set by the embedding proxy after it verifies the Shopify session.

### Quick Start

```bash
# Results with display decisions
curl http://localhost:8000/api/v1/projects/{id}/results \\
  -H "X-Shopify-Shop-Domain: my-store.myshopify.com"

# Remove a background (500 credits)
curl -X POST http://localhost:8000/api/v1/images/{image_id}/remove-background \\
  -H "X-Shopify-Shop-Domain: my-store.myshopify.com"
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "The shop behind the request",
        },
        {
            "name": "Projects",
            "description": "Generated results with display decisions",
        },
        {
            "name": "Images",
            "description": "Per-image actions such as background removal",
        },
        {
            "name": "Credits",
            "description": "Credit balance and ledger",
        },
        {
            "name": "Subscription",
            "description": "Active plan and tier",
        },
        {
            "name": "Pipeline",
            "description": "Generation pipeline status polling",
        },
        {
            "name": "Models",
            "description": "Base models, poses and per-plan access",
        },
        {
            "name": "Tasks",
            "description": "Track background task progress",
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

# Any origin outside production; the Shopify admin in production
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

@app.exception_handler(TrayveException)
async def handle_trayve_exception(request: Request, exc: TrayveException):
    """Handle custom Trayve exceptions."""
    return await trayve_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle request body / parameter validation errors."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(SupabaseClientError)
async def handle_supabase_exception(request: Request, exc: SupabaseClientError):
    """Handle database errors."""
    logger.error(f"Database error on {request.url.path}: {exc}")
    content = {"detail": "Database request failed", "code": exc.code}
    if exc.suggestion:
        content["suggestion"] = exc.suggestion
    return JSONResponse(status_code=502, content=content)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

API_PREFIX = "/api/v1"

# (router, path under API_PREFIX, OpenAPI tag)
ROUTERS = [
    (health.router, "", "Health"),
    (auth_routes.router, "", "Auth"),
    (projects.router, "/projects", "Projects"),
    (images.router, "/images", "Images"),
    (credits.router, "/credits", "Credits"),
    (subscription.router, "/subscription", "Subscription"),
    (pipeline.router, "/pipeline", "Pipeline"),
    (models.router, "/models", "Models"),
    (tasks.router, "/tasks", "Tasks"),
]

for router, path, tag in ROUTERS:
    app.include_router(router, prefix=f"{API_PREFIX}{path}", tags=[tag])


@app.get("/", tags=["Root"])
async def root():
    """Service name and where to find docs and health."""
    return {
        "name": "Trayve Media API",
        "version": app.version,
        "docs": app.docs_url,
        "health": f"{API_PREFIX}/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )
