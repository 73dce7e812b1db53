# backend/expertbook/main.py
"""
FastAPI application for the expert booking engine.

Mounts the v1 routers under /api/v1 and creates tables on startup.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI

from .api.errors import register_error_handlers
from .core.config import is_running_tests, settings
from .database import init_db
from .routes import prometheus
from .routes.v1 import admin as admin_v1
from .routes.v1 import experts as experts_v1
from .routes.v1 import feedback as feedback_v1
from .routes.v1 import health as health_v1
from .routes.v1 import purchases as purchases_v1
from .routes.v1 import sessions as sessions_v1

API_TITLE = "Expertbook API"
API_VERSION = "1.0.0"

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{API_TITLE} starting up...")
    logger.info(f"Environment: {settings.environment}")
    if is_running_tests():
        logger.info("Running under pytest (test mode active)")
    else:
        init_db()
    yield
    logger.info(f"{API_TITLE} shutting down...")


app = FastAPI(
    title=API_TITLE,
    description="Hour packages, 30-minute slot booking, cancellations and billing",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)
register_error_handlers(app)

# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(experts_v1.router, prefix="/experts")
api_v1.include_router(purchases_v1.router, prefix="/purchases")
api_v1.include_router(sessions_v1.router, prefix="/sessions")
api_v1.include_router(feedback_v1.router, prefix="/feedback")
api_v1.include_router(admin_v1.router, prefix="/admin")
api_v1.include_router(health_v1.router)

app.include_router(api_v1)
# Load balancer probe at the root as well
app.include_router(health_v1.router)
# Prometheus scrape target
app.include_router(prometheus.router)
