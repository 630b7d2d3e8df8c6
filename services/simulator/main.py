"""
TwinTech Simulator
==================
FastAPI entry point.

Responsibilities:
  - Run the tick loop that generates telemetry for the six compressors
    and pushes each batch to the store.
  - Expose the latest batch and the wake / heartbeat endpoints.

On shutdown (SIGINT / SIGTERM, handled by uvicorn) the loop is cancelled
and the run flag is cleared with one best-effort write, so dashboards see
the simulator as stopped.

Start locally:
  python -m simulator.main
  uvicorn simulator.main:app --reload
"""

import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from simulator.config import load_settings
from simulator.db import TelemetryStore, close_pool, init_pool
from simulator.routes.telemetry import router as telemetry_router
from simulator.ticker import TickOrchestrator

logger = logging.getLogger("simulator")


def _report_crash(task: asyncio.Task):
    if not task.cancelled() and task.exception() is not None:
        logger.error("Tick loop stopped", exc_info=task.exception())


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
    )


# --- Lifecycle ------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect the store, start the tick loop; on shutdown close the gate."""
    settings = load_settings()            # ConfigError here aborts startup
    configure_logging(settings.log_level)

    pool = await init_pool(settings.credentials)
    store = TelemetryStore(pool)
    await store.ensure_schema()

    orchestrator = TickOrchestrator(store, settings)
    app.state.orchestrator = orchestrator
    task = asyncio.create_task(orchestrator.run_forever())
    task.add_done_callback(_report_crash)

    yield

    logger.info("Simulator shutting down, closing the gate (run flag = FALSE)")
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    except Exception as exc:
        logger.info("Tick loop had already stopped: %s", exc)
    try:
        await store.set_running(False)
        logger.info("Gate closed")
    except Exception as exc:
        logger.error("Failed to clear run flag during shutdown: %s", exc)
    await close_pool()


# --- App ------------------------------------------------------------------
app = FastAPI(
    title="TwinTech Simulator",
    description="Synthetic telemetry for six simulated industrial compressors.",
    version="0.1.0",
    lifespan=lifespan,
)

# The dashboard is served from another origin.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(telemetry_router)


def main():
    settings = load_settings()
    configure_logging(settings.log_level)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
