"""
Tick orchestrator
=================
Drives one evaluation pass over the whole fleet every TICK_SECONDS.

Per tick:
  1) Read the run flag (self-healing to TRUE when unset or invalid).
  2) Read the last UI activity timestamp; after INACTIVITY_TIMEOUT_SECONDS
     of silence the run flag is cleared and the simulator pauses.
  3) Generate the batch, update the in-memory latest cache.
  4) Push the batch to the store, plus a history snapshot every
     HISTORY_INTERVAL_SECONDS.

A store read failure skips the tick.  A store write failure is logged and
the cache stays authoritative for the read API until the next good write.
"""

import asyncio
import logging
import random
import time
from typing import Callable, Dict, List, Optional

from simulator.config import Settings
from simulator.models import UnitMemory
from simulator.presets import SimulationParams
from simulator.sensors import build_fleet_memory, generate_telemetry_batch

logger = logging.getLogger("simulator.ticker")


class UnitNotFoundError(LookupError):
    """Query for a compressor id that is not part of the latest batch."""

    def __init__(self, compressor_id: str):
        super().__init__(f"Compressor not found: {compressor_id}")
        self.compressor_id = compressor_id


def now_ms() -> int:
    return int(time.time() * 1000)


class TickOrchestrator:
    def __init__(
        self,
        store,
        settings: Settings,
        params:   Optional[SimulationParams] = None,
        rng:      Optional[random.Random] = None,
        clock:    Callable[[], int] = now_ms,
        memory:   Optional[Dict[str, UnitMemory]] = None,
    ):
        self.store    = store
        self.settings = settings
        self.params   = params or settings.params
        self.rng      = rng or random.Random(settings.seed)
        self.clock    = clock
        self.memory   = memory if memory is not None else \
            build_fleet_memory(clock(), self.params, self.rng)

        self.latest_batch: List[dict] = []
        self.last_history_save = clock()
        self.cycle = 0

    # ─── flags ────────────────────────────────────────────
    async def check_running(self) -> bool:
        raw = await self.store.get_running()
        if raw is True:
            return True
        if raw is False:
            return False

        await self.store.set_running(True)
        logger.info("Auto-repair: run flag was %r, reset to TRUE", raw)
        return True

    async def check_inactivity(self) -> bool:
        last_active = await self.store.get_last_active()
        if not last_active:
            return False
        return self.clock() - last_active > self.settings.inactivity_timeout * 1000

    async def mark_active(self):
        """UI heartbeat / wake: reset the inactivity clock and re-arm the run flag."""
        await self.store.set_last_active(self.clock())
        await self.store.set_running(True)

    # ─── tick ─────────────────────────────────────────────
    async def run_tick(self) -> Optional[List[dict]]:
        """Run one pass.  Returns the batch, or None when the tick was skipped."""
        try:
            if not await self.check_running():
                logger.info("Simulator paused (run flag is FALSE)")
                return None

            if await self.check_inactivity():
                logger.info("Auto-stop: no UI activity detected, pausing simulator")
                await self.store.set_running(False)
                return None
        except Exception:
            logger.exception("Store read failed - skipping tick")
            return None

        now = self.clock()
        batch = generate_telemetry_batch(
            self.memory, now, self.params, self.rng,
            predictive=self.settings.predictive_mode,
            expose_predictive=self.settings.expose_predictive,
        )
        self.latest_batch = batch
        self.cycle += 1
        logger.debug("Tick %d: %s", self.cycle, batch)

        try:
            await self.store.write_latest(batch)

            if now - self.last_history_save >= self.settings.history_interval * 1000:
                await self.store.write_history(now, batch)
                self.last_history_save = now
                logger.info("History snapshot written: %d", now)
        except Exception:
            logger.exception("Store write failed")

        if self.cycle % 30 == 0:
            logger.info("… cycle %d", self.cycle)
        return batch

    async def run_forever(self):
        """Tick, wait, repeat.  The next tick is armed only after the previous one settled."""
        logger.info(
            "Running - preset=%s, interval=%ss, predictive=%s",
            self.params.name, self.settings.tick_seconds, self.settings.predictive_mode,
        )
        while True:
            await self.run_tick()
            await asyncio.sleep(self.settings.tick_seconds)

    # ─── read side ────────────────────────────────────────
    def latest(self) -> List[dict]:
        return self.latest_batch

    def get_unit(self, compressor_id: str) -> dict:
        for record in self.latest_batch:
            if record["compressor_id"] == compressor_id:
                return record
        raise UnitNotFoundError(compressor_id)
