import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from netwatch_manager.api.api_v1.api import api_router as api_v1_router
from netwatch_manager.core.config import settings
from netwatch_manager.core.logging_config import setup_logging
from netwatch_manager.services.scheduler import reconciliation_scheduler

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # With EMBEDDED_POLLER off, `netwatch-worker` runs the loop in its own process
    if settings.EMBEDDED_POLLER:
        reconciliation_scheduler.start()
    yield
    reconciliation_scheduler.stop()


app = FastAPI(
    title="Netwatch Manager",
    version="0.1.0",
    openapi_url="/api/v1/openapi.json",
    lifespan=lifespan,
)

app.include_router(api_v1_router, prefix="/api/v1")
