"""
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from autoshop.config import get_settings
from autoshop.database import init_db
from autoshop.errors import register_exception_handlers
from autoshop.logging_config import RequestLoggingMiddleware, configure_logging
from autoshop.routers import (
    appointments, auth, customers, dashboard, health, inventory, invoices,
    memberships, notifications, portal, public, services, vehicles, warranties,
)

settings = get_settings()

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan events for the application.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting %s %s", settings.app_name, settings.app_version)
    await init_db()
    logger.info("API available at %s, docs at /docs", settings.api_v1_prefix)

    yield

    # Shutdown
    logger.info("Shutting down %s", settings.app_name)


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    ## AutoShop Portal API

    Backend for an auto repair shop: public website, unified login,
    admin dashboard and customer self-service portal.

    ### Areas:
    * **Auth**: unified login/register for admins and customers
    * **Admin**: customers, vehicles, appointments, work orders, invoices,
      inventory, warranties, memberships, notifications, dashboard
    * **Portal**: a customer's own vehicles, bookings, payments, rewards,
      warranties and notifications
    * **Public**: service catalog, contact form, business info
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

# Include routers
for module in (
    auth, public, customers, vehicles, appointments, services, invoices, inventory,
    warranties, memberships, notifications, dashboard, health, portal,
):
    app.include_router(module.router, prefix=settings.api_v1_prefix)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.app_name} API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "autoshop.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
