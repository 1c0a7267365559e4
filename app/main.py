"""
Taroize Service - FastAPI Application

Converts WeChat mini-program pages (WXML template plus Page/Component/App
script) into Taro class components.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from app import __version__
from app.config import settings, initialize_settings
from app.api.routes import health, convert

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("=" * 60)
    logger.info("Starting Taroize Service")
    logger.info("=" * 60)

    initialize_settings()

    logger.info(f"Service ready on port {settings.SERVICE_PORT}")

    yield

    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Taroize Service",
    description="""
Converts WeChat mini-program pages into Taro class components.

## Features

- **Template conversion**: WXML to JSX with `wx:if`/`wx:elif`/`wx:else` chains and `wx:for` loops
- **Script conversion**: `Page`, `Component` and `App` registrations to a `Taro.Component` class
- **Namespace rewriting**: `wx.*` API calls become `Taro.*`
- **Code frames**: Conversion errors point at the offending source line
""",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/taroize/docs",
    redoc_url="/api/taroize/redoc",
    openapi_url="/api/taroize/openapi.json"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API prefix - matches gateway routing: /api/taroize/**
API_PREFIX = "/api/taroize"

app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
app.include_router(convert.router, prefix=API_PREFIX, tags=["Conversion"])


# Root health check (for direct container health checks)
@app.get("/health")
async def root_health():
    """Root health check for container/load balancer"""
    return {"status": "UP", "service": settings.SERVICE_NAME}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Taroize Service",
        "version": __version__,
        "port": settings.SERVICE_PORT,
        "endpoints": {
            "health": f"{API_PREFIX}/health",
            "convert": f"{API_PREFIX}/convert",
            "wxml": f"{API_PREFIX}/wxml",
            "docs": f"{API_PREFIX}/docs"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.SERVICE_PORT,
        reload=True
    )
