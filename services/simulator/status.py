"""
Status transition machine
=========================
Biased, slow-mixing Markov chain over active / inactive / offline.

A unit must dwell in its current status for the preset's minimum time
before a transition is even considered; after that a single uniform draw
walks the cumulative transition table of the current status.  Pinned
units (the fixed idle and fixed offline reference compressors) never move
and never consume a random draw.
"""

import logging
import random

from simulator.models import Status, UnitMemory
from simulator.presets import SimulationParams

logger = logging.getLogger("simulator.status")


def choose_status(unit: UnitMemory, now: int, params: SimulationParams,
                  rng: random.Random) -> Status:
    if unit.pinned is not None:
        return unit.pinned

    current = unit.state
    if now - unit.last_change < params.min_dwell_ms[current]:
        return current

    r = rng.random()
    for candidate, cumulative in params.transitions[current]:
        if r < cumulative:
            return candidate
    return current


def apply_status(unit: UnitMemory, now: int, params: SimulationParams,
                 rng: random.Random) -> bool:
    """
    Run the machine for one tick and record the transition on the unit.
    Returns True when the status changed.
    """
    status = choose_status(unit, now, params, rng)
    if status is unit.state:
        return False

    logger.info("%s: %s -> %s", unit.compressor_id, unit.state.value, status.value)
    unit.state = status
    unit.last_change = now
    # velocities must not span two operating envelopes
    unit.history.clear()
    return True
