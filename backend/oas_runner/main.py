"""
Main FastAPI application entry point.
"""
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from oas_runner.core.config import settings
from oas_runner.core.logging import setup_logging
from oas_runner.core.middleware import MonitoringMiddleware, ErrorHandlingMiddleware
from oas_runner.api.v1.router import api_router
from oas_runner.services.auth_store import AuthConfigStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    # Auth configs live for the lifetime of the process only
    app.state.auth_store = AuthConfigStore()
    yield
    # Shutdown
    app.state.auth_store = None


app = FastAPI(
    title=settings.APP_NAME,
    description="Exercise an API from its OpenAPI/Swagger specification with synthetic requests",
    version="0.1.0",
    lifespan=lifespan,
)

# Middleware (order matters - last added is first executed)
app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(MonitoringMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": settings.APP_NAME, "version": "0.1.0"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    from oas_runner.core.monitoring import get_metrics
    return Response(content=get_metrics(), media_type="text/plain")
