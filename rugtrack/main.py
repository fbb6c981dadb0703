"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rugtrack.config import settings
from rugtrack.database import engine, Base
from rugtrack.routes import orders, items, repairs, delivery, dashboard, migrate

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Order intake, rug measurement, repair estimates, client approval and delivery tracking for a carpet-cleaning business",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(orders.router, prefix="/api")
app.include_router(items.router, prefix="/api")
app.include_router(repairs.router, prefix="/api")
app.include_router(delivery.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")
app.include_router(migrate.router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
