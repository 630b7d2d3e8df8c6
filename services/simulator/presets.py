"""
Simulation parameter presets
============================
Every tunable number of the simulator lives here, grouped into one frozen
SimulationParams table.  Historical tunings are kept as named presets
rather than separate code paths:

  tuned   - current dashboard tuning (default).  Tight active envelope
            (temperature 80-86 degC), slow-mixing status chain with dwell
            times in minutes, 15 s warning lock, slow bias regime shifts.
  classic - first-generation tuning.  Wide envelopes, 30 s lock, dwell
            times in seconds, no bias layer.

Select one with SIMULATOR_PRESET (see config.py).
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from simulator.models import Status


@dataclass(frozen=True)
class Band:
    """Soft advisory band: readings outside it earn an observation note."""
    low:  Optional[float] = None
    high: Optional[float] = None


@dataclass(frozen=True)
class Threshold:
    medium:          float
    high:            float
    higher_is_worse: bool = True   # False for pressure / flow (low is bad)


@dataclass(frozen=True)
class StatusProfile:
    """Drift behaviour of a unit while it sits in one status."""
    baseline:    Dict[str, float]
    envelope:    Dict[str, Tuple[float, float]]   # clamp (min, max)
    trend_scale: Dict[str, float]
    bias_ratio:  float                            # bias magnitude relative to trend_scale
    advisory:    Dict[str, Band]


@dataclass(frozen=True)
class SimulationParams:
    name: str

    # --- drift -------------------------------------------------------------
    trend_decay:      float
    pull_rate:        Dict[str, float]
    temp_to_vibration: float                      # heat -> vibration coupling
    flow_to_pressure:  float                      # flow loss -> pressure drop (negative)
    bias_interval_ms: Tuple[int, int]             # per-unit re-roll cadence is drawn from this
    profiles:         Dict[Status, StatusProfile]

    # --- status machine ----------------------------------------------------
    min_dwell_ms: Dict[Status, int]
    transitions:  Dict[Status, Tuple[Tuple[Status, float], ...]]   # cumulative walk

    # --- warnings ----------------------------------------------------------
    thresholds:           Dict[str, Threshold]
    idle_thresholds:      Dict[str, Threshold]
    inactive_score_floor: float
    lock_window_ms:       int
    clearly_abnormal:     Dict[str, Band]         # reading outside band -> high is believable

    # --- risk / AI ---------------------------------------------------------
    risk_reference:            Dict[str, float]
    risk_weights:              Dict[str, float]
    medium_bonus:              float
    high_bonus:                float
    inactive_risk_ranges:      Dict[str, Tuple[float, float]]  # keyed by severity value
    fixed_inactive_risk_ceiling: float
    ai_high_risk:              float
    ai_emerging_risk:          float
    ai_idle_min_risk:          float

    # --- predictive escalation --------------------------------------------
    history_size:           int
    horizon_seconds:        float
    predictive_weights:     Dict[str, float]
    predictive_noise_floor: float
    predictive_medium:      float
    predictive_high:        float
    predictive_override:    float
    predictive_alert:       float


# ─── tuned (default) ──────────────────────────────────────
TUNED = SimulationParams(
    name="tuned",
    trend_decay=0.85,
    pull_rate={"temperature": 0.01, "vibration": 0.01, "pressure": 0.01, "flow": 0.02},
    temp_to_vibration=0.05,
    flow_to_pressure=-0.03,
    bias_interval_ms=(90_000, 180_000),
    profiles={
        Status.ACTIVE: StatusProfile(
            baseline={"temperature": 82.0, "vibration": 3.0, "pressure": 100.0, "flow": 205.0},
            envelope={
                "temperature": (80.0, 86.0),
                "vibration":   (2.0, 4.9),
                "pressure":    (95.5, 104.0),
                "flow":        (170.0, 230.0),
            },
            trend_scale={"temperature": 0.08, "vibration": 0.04, "pressure": 0.03, "flow": 0.15},
            bias_ratio=0.5,
            advisory={
                "temperature": Band(80.8, 83.5),
                "vibration":   Band(2.4, 3.8),
                "pressure":    Band(99.0, 101.5),
                "flow":        Band(195.0, 215.0),
            },
        ),
        Status.INACTIVE: StatusProfile(
            baseline={"temperature": 77.0, "vibration": 2.2, "pressure": 100.0, "flow": 125.0},
            envelope={
                "temperature": (74.0, 82.0),
                "vibration":   (1.2, 3.4),
                "pressure":    (97.0, 103.0),
                "flow":        (110.0, 140.0),
            },
            trend_scale={"temperature": 0.03, "vibration": 0.015, "pressure": 0.01, "flow": 0.05},
            bias_ratio=0.3,
            advisory={
                "temperature": Band(None, 79.5),
                "vibration":   Band(None, 2.8),
                "pressure":    Band(98.5, 101.5),
                "flow":        Band(115.0, 135.0),
            },
        ),
    },
    min_dwell_ms={
        Status.ACTIVE:   20 * 60_000,
        Status.INACTIVE: 5 * 60_000,
        Status.OFFLINE:  30 * 60_000,
    },
    transitions={
        Status.ACTIVE:   ((Status.ACTIVE, 0.999), (Status.INACTIVE, 0.9997), (Status.OFFLINE, 1.0)),
        Status.INACTIVE: ((Status.INACTIVE, 0.92), (Status.ACTIVE, 0.985), (Status.OFFLINE, 1.0)),
        Status.OFFLINE:  ((Status.OFFLINE, 0.98), (Status.INACTIVE, 1.0)),
    },
    thresholds={
        "temperature": Threshold(84.5, 85.5),
        "vibration":   Threshold(4.2, 4.6),
        "pressure":    Threshold(97.0, 96.0, higher_is_worse=False),
        "flow":        Threshold(182.0, 175.0, higher_is_worse=False),
    },
    idle_thresholds={
        "temperature": Threshold(80.5, 81.5),
        "vibration":   Threshold(3.0, 3.3),
        "pressure":    Threshold(97.8, 97.3, higher_is_worse=False),
        "flow":        Threshold(113.0, 111.0, higher_is_worse=False),
    },
    inactive_score_floor=0.2,
    lock_window_ms=15_000,
    clearly_abnormal={
        "temperature": Band(None, 85.0),
        "vibration":   Band(None, 4.5),
        "pressure":    Band(96.5, 103.5),
        "flow":        Band(178.0, None),
    },
    risk_reference={"temperature": 82.0, "vibration": 3.5, "pressure": 100.0, "flow": 205.0},
    risk_weights={"temperature": 0.35, "vibration": 0.35, "pressure": 0.2, "flow": 0.1},
    medium_bonus=2.0,
    high_bonus=4.0,
    inactive_risk_ranges={"normal": (0.5, 2.5), "medium": (3.0, 6.0), "high": (5.0, 8.0)},
    fixed_inactive_risk_ceiling=3.0,
    ai_high_risk=8.0,
    ai_emerging_risk=5.0,
    ai_idle_min_risk=4.0,
    history_size=30,
    horizon_seconds=600.0,
    predictive_weights={"temperature": 0.4, "vibration": 0.3, "flow": 0.2, "pressure": 0.1},
    predictive_noise_floor=0.05,
    predictive_medium=0.55,
    predictive_high=0.85,
    predictive_override=0.3,
    predictive_alert=0.7,
)


# ─── classic ──────────────────────────────────────────────
_CLASSIC_ENVELOPE = {
    "temperature": (74.0, 95.0),
    "vibration":   (1.5, 5.0),
    "pressure":    (96.0, 104.0),
}

CLASSIC = SimulationParams(
    name="classic",
    trend_decay=0.8,
    pull_rate={"temperature": 0.01, "vibration": 0.01, "pressure": 0.01, "flow": 0.02},
    temp_to_vibration=0.05,
    flow_to_pressure=-0.03,
    bias_interval_ms=(90_000, 180_000),
    profiles={
        Status.ACTIVE: StatusProfile(
            baseline={"temperature": 80.0, "vibration": 3.0, "pressure": 100.0, "flow": 200.0},
            envelope={**_CLASSIC_ENVELOPE, "flow": (150.0, 230.0)},
            trend_scale={"temperature": 0.08, "vibration": 0.04, "pressure": 0.03, "flow": 0.15},
            bias_ratio=0.0,
            advisory={
                "temperature": Band(76.5, 81.5),
                "vibration":   Band(2.2, 3.8),
                "pressure":    Band(99.0, 101.5),
                "flow":        Band(195.0, 210.0),
            },
        ),
        Status.INACTIVE: StatusProfile(
            baseline={"temperature": 80.0, "vibration": 3.0, "pressure": 100.0, "flow": 125.0},
            envelope={**_CLASSIC_ENVELOPE, "flow": (100.0, 150.0)},
            trend_scale={"temperature": 0.03, "vibration": 0.015, "pressure": 0.01, "flow": 0.05},
            bias_ratio=0.0,
            advisory={
                "temperature": Band(None, 81.5),
                "vibration":   Band(None, 3.5),
                "pressure":    Band(98.5, 101.5),
                "flow":        Band(115.0, 135.0),
            },
        ),
    },
    min_dwell_ms={
        Status.ACTIVE:   30_000,
        Status.INACTIVE: 20_000,
        Status.OFFLINE:  60_000,
    },
    transitions={
        Status.ACTIVE:   ((Status.ACTIVE, 0.985), (Status.INACTIVE, 0.995), (Status.OFFLINE, 1.0)),
        Status.INACTIVE: ((Status.INACTIVE, 0.92), (Status.ACTIVE, 0.985), (Status.OFFLINE, 1.0)),
        Status.OFFLINE:  ((Status.OFFLINE, 0.98), (Status.INACTIVE, 1.0)),
    },
    thresholds={
        "temperature": Threshold(90.0, 93.0),
        "vibration":   Threshold(4.2, 4.6),
        "pressure":    Threshold(97.0, 96.0, higher_is_worse=False),
        "flow":        Threshold(170.0, 160.0, higher_is_worse=False),
    },
    idle_thresholds={
        "temperature": Threshold(90.0, 93.0),
        "vibration":   Threshold(4.2, 4.6),
        "pressure":    Threshold(97.0, 96.0, higher_is_worse=False),
        "flow":        Threshold(108.0, 104.0, higher_is_worse=False),
    },
    inactive_score_floor=0.2,
    lock_window_ms=30_000,
    clearly_abnormal={
        "temperature": Band(None, 82.0),
        "vibration":   Band(None, 4.2),
        "pressure":    Band(97.0, 103.0),
        "flow":        Band(185.0, None),
    },
    risk_reference={"temperature": 80.0, "vibration": 4.0, "pressure": 100.0, "flow": 200.0},
    risk_weights={"temperature": 0.3, "vibration": 0.3, "pressure": 0.2, "flow": 0.3},
    medium_bonus=2.0,
    high_bonus=4.0,
    inactive_risk_ranges={"normal": (0.5, 2.5), "medium": (3.0, 6.0), "high": (5.0, 8.0)},
    fixed_inactive_risk_ceiling=3.0,
    ai_high_risk=8.0,
    ai_emerging_risk=6.0,
    ai_idle_min_risk=4.0,
    history_size=30,
    horizon_seconds=900.0,
    predictive_weights={"temperature": 0.4, "vibration": 0.3, "flow": 0.2, "pressure": 0.1},
    predictive_noise_floor=0.05,
    predictive_medium=0.55,
    predictive_high=0.85,
    predictive_override=0.3,
    predictive_alert=0.7,
)


PRESETS: Dict[str, SimulationParams] = {
    TUNED.name:   TUNED,
    CLASSIC.name: CLASSIC,
}


def get_preset(name: str) -> SimulationParams:
    """Look up a preset by name.  Raises KeyError for unknown names."""
    return PRESETS[name.strip().lower()]
