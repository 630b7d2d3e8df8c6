"""
GET  /api/latest                 – latest batch, one record per compressor
GET  /api/compressor/{id}        – one compressor's latest record
GET  /wake                       – wake the simulator (frontend, after login)
POST /ui/active                  – UI heartbeat (every 10-20 s)
GET  /health                     – liveness
=====================================================================
Thin read accessors over the orchestrator's latest-batch cache.  The
wake / heartbeat endpoints write to the store so the read path itself can
re-arm the run flag and reset the inactivity clock.
"""

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse

from simulator.ticker import TickOrchestrator, UnitNotFoundError, now_ms

logger = logging.getLogger("simulator.api")

router = APIRouter(tags=["telemetry"])


def _orchestrator(request: Request) -> TickOrchestrator:
    return request.app.state.orchestrator


# ─── GET / ────────────────────────────────────────────────
@router.get("/", response_class=PlainTextResponse)
async def root():
    return "TwinTech Simulator is running."


# ─── GET /health ──────────────────────────────────────────
@router.get("/health")
async def health():
    return {"status": "ok", "timestamp": now_ms()}


# ─── GET /api/latest ──────────────────────────────────────
@router.get("/api/latest")
async def get_latest(request: Request):
    return _orchestrator(request).latest()


# ─── GET /api/compressor/{compressor_id} ──────────────────
@router.get("/api/compressor/{compressor_id}")
async def get_compressor(compressor_id: str, request: Request):
    try:
        return _orchestrator(request).get_unit(compressor_id)
    except UnitNotFoundError:
        raise HTTPException(status_code=404, detail="Compressor not found")


# ─── activity ─────────────────────────────────────────────
async def _mark_active(request: Request):
    try:
        await _orchestrator(request).mark_active()
    except Exception as exc:
        logger.error("Could not record UI activity: %s", exc)
        raise HTTPException(status_code=503, detail="Store unavailable")


@router.get("/wake")
async def wake(request: Request):
    logger.info("Wake request received - keeping simulator alive")
    await _mark_active(request)
    return {"status": "awake"}


@router.post("/ui/active")
async def ui_active(request: Request):
    await _mark_active(request)
    return {"status": "updated"}
