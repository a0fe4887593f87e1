import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gridpulse.config import settings
from gridpulse.database import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    from gridpulse.services.fleet import load_registry
    load_registry()
    from gridpulse.tasks.scheduler import start_scheduler, stop_scheduler
    start_scheduler()
    _initial_refresh()
    yield
    stop_scheduler()


def _initial_refresh():
    """Forecast every persisted transformer on startup."""
    try:
        from gridpulse.services.fleet import refresh_all
        logger.info("Running initial forecast refresh...")
        refresh_all()
    except Exception as e:
        logger.error("Initial forecast refresh failed: %s", e)


app = FastAPI(
    title="GridPulse",
    description="Short-term transformer load forecasting and predictive overload alerts",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from gridpulse.routers import dashboard, forecast, transformers  # noqa: E402

app.include_router(dashboard.router, prefix="/api/v1")
app.include_router(forecast.router, prefix="/api/v1")
app.include_router(transformers.router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/v1/admin/refresh")
async def trigger_refresh():
    """Manually trigger a fleet forecast refresh."""
    from gridpulse.services.fleet import refresh_all
    refreshed = refresh_all()
    return {"status": "refresh_complete", "transformers": refreshed}
