"""
Drift engine
============
Evolves one unit's readings by a single tick.

Each metric carries two slow signals on top of its current value:
  trend - exponentially smoothed random increment (fast, autocorrelated)
  bias  - small per-metric offset re-rolled every few minutes (regime shift)

Mean reversion toward a status-dependent baseline keeps the walk bounded,
and the final clamp pins readings to the status envelope.  Offline units
are never drifted.
"""

import random

from simulator.models import METRICS, Status, UnitMemory
from simulator.presets import SimulationParams, StatusProfile


def _profile(unit: UnitMemory, params: SimulationParams) -> StatusProfile:
    return params.profiles[unit.state]


def maybe_flip_bias(unit: UnitMemory, now: int, params: SimulationParams,
                    rng: random.Random) -> bool:
    """Re-roll the unit's bias if its interval elapsed.  Returns True on re-roll."""
    if now - unit.bias_last_flip < unit.bias_interval:
        return False

    profile = _profile(unit, params)
    for m in METRICS:
        unit.bias[m] = (rng.random() - 0.5) * profile.trend_scale[m] * profile.bias_ratio
    unit.bias_last_flip = now
    return True


def clamp_readings(unit: UnitMemory, params: SimulationParams) -> None:
    envelope = _profile(unit, params).envelope
    for m in METRICS:
        lo, hi = envelope[m]
        unit.readings[m] = min(max(unit.readings[m], lo), hi)


def apply_drift(unit: UnitMemory, now: int, params: SimulationParams,
                rng: random.Random) -> None:
    """Advance unit.readings by one tick (no-op for offline units)."""
    if unit.state is Status.OFFLINE:
        return

    profile = _profile(unit, params)
    maybe_flip_bias(unit, now, params, rng)

    # 1) smoothed random increment, 2) drift by trend + bias
    for m in METRICS:
        unit.trend[m] = unit.trend[m] * params.trend_decay \
            + (rng.random() - 0.5) * profile.trend_scale[m]
        unit.readings[m] += unit.trend[m] + unit.bias[m]

    # 3) cross-metric coupling
    unit.readings["vibration"] += unit.trend["temperature"] * params.temp_to_vibration
    unit.readings["pressure"]  += unit.trend["flow"] * params.flow_to_pressure

    # 4) pull back toward the status baseline
    for m in METRICS:
        unit.readings[m] += (profile.baseline[m] - unit.readings[m]) * params.pull_rate[m]

    # 5) clamp to the physical envelope of the current status
    clamp_readings(unit, params)
