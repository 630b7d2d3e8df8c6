"""
Warning evaluation
==================
Maps a unit's current readings to a warning severity and event type.

Decision order per tick:
  1. High override  - any metric at high severity wins immediately and
                      restarts the lock (never for inactive units).
  2. Lock           - a non-normal warning younger than the lock window is
                      returned unchanged, so noisy readings crossing a
                      threshold back and forth do not flap the dashboard.
  3. Medium         - the highest-scoring medium metric, else normal.
  4. Predictive     - optional velocity-based escalation (predictive.py).

finalize_severity() applies the post-evaluation sanity checks to the
reported value only; the locked state kept in unit memory is not touched.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, TYPE_CHECKING

from simulator.models import METRICS, EventType, Severity, Status, WarningState
from simulator.presets import SimulationParams, Threshold

if TYPE_CHECKING:
    from simulator.predictive import Prediction


# ─── Event catalogue ──────────────────────────────────────
# Each metric maps to:
#   event – event type reported when the metric drives the warning
#   kind  – 'high' or 'low' (which side of the threshold is bad)
EVENT_DEFINITIONS: dict = {
    "temperature": {"event": EventType.OVERHEATING, "kind": "high"},
    "vibration":   {"event": EventType.VIBRATION,   "kind": "high"},
    "pressure":    {"event": EventType.PRESSURE,    "kind": "low"},
    "flow":        {"event": EventType.LOW_FLOW,    "kind": "low"},
}

EVENT_FOR_METRIC: Dict[str, EventType] = {m: d["event"] for m, d in EVENT_DEFINITIONS.items()}


@dataclass(frozen=True)
class Candidate:
    metric:     str
    severity:   Severity
    score:      float
    event_type: EventType


def severity_for(value: float, threshold: Threshold) -> Severity:
    if threshold.higher_is_worse:
        if value >= threshold.high:
            return Severity.HIGH
        if value >= threshold.medium:
            return Severity.MEDIUM
        return Severity.NORMAL

    if value <= threshold.high:
        return Severity.HIGH
    if value <= threshold.medium:
        return Severity.MEDIUM
    return Severity.NORMAL


def normalize_score(value: float, threshold: Threshold) -> float:
    """How far into the warning band a reading is, 0 (at medium) to 1 (at high)."""
    if threshold.higher_is_worse:
        raw = (value - threshold.medium) / (threshold.high - threshold.medium)
    else:
        raw = (threshold.medium - value) / (threshold.medium - threshold.high)
    return min(max(raw, 0.0), 1.0)


def score_readings(readings: Dict[str, float], thresholds: Dict[str, Threshold]) -> List[Candidate]:
    return [
        Candidate(
            metric=m,
            severity=severity_for(readings[m], thresholds[m]),
            score=normalize_score(readings[m], thresholds[m]),
            event_type=EVENT_FOR_METRIC[m],
        )
        for m in METRICS
    ]


def thresholds_for(status: Status, params: SimulationParams) -> Dict[str, Threshold]:
    return params.idle_thresholds if status is Status.INACTIVE else params.thresholds


def _best(candidates: List[Candidate]) -> Optional[Candidate]:
    # max() keeps the first of equal scores, i.e. METRICS order breaks ties
    return max(candidates, key=lambda c: c.score) if candidates else None


def _settle(previous: WarningState, severity: Severity, event_type: EventType,
            now: int) -> WarningState:
    if severity is Severity.NORMAL and previous.severity is Severity.NORMAL:
        return previous
    return WarningState(severity, event_type, now)


def lock_active(state: WarningState, now: int, params: SimulationParams) -> bool:
    return state.severity not in (Severity.NORMAL, Severity.NONE) \
        and now - state.start_time < params.lock_window_ms


def evaluate_warning(
    readings:       Dict[str, float],
    status:         Status,
    previous:       WarningState,
    now:            int,
    params:         SimulationParams,
    fixed_inactive: bool = False,
    prediction:     Optional["Prediction"] = None,
) -> WarningState:
    """
    Return the next warning state for one unit.

    *prediction* is only consulted for active units; pass None to evaluate
    on current-value thresholds alone.
    """
    idle = status is Status.INACTIVE or fixed_inactive
    if idle and previous.severity is Severity.HIGH:
        # a HIGH carried over from active operation is held as MEDIUM
        previous = WarningState(Severity.MEDIUM, previous.event_type, previous.start_time)
    candidates = score_readings(readings, thresholds_for(status, params))

    # 1) High override, regardless of lock
    if not idle:
        high = _best([c for c in candidates if c.severity is Severity.HIGH and c.score > 0])
        if high is not None:
            return WarningState(Severity.HIGH, high.event_type, now)

    # 2) Inside the lock window: keep what we have
    if lock_active(previous, now, params):
        return previous

    # 3) Medium evaluation; idle units report anything above medium as medium
    floor = params.inactive_score_floor if idle else 0.0
    medium = _best([
        c for c in candidates
        if c.severity in (Severity.MEDIUM, Severity.HIGH) and c.score > floor
    ])
    severity = Severity.MEDIUM if medium else Severity.NORMAL
    event_type = medium.event_type if medium else EventType.NORMAL

    # 4) Predictive escalation
    if prediction is not None and not idle:
        severity, event_type = escalate(severity, event_type, prediction, params)

    return _settle(previous, severity, event_type, now)


def escalate(severity: Severity, event_type: EventType, prediction: "Prediction",
             params: SimulationParams):
    """Fold a velocity prediction into a threshold-based (severity, event_type) pick."""
    if prediction.event_type is EventType.NORMAL:
        return severity, event_type

    if prediction.score >= params.predictive_high:
        return Severity.HIGH, prediction.event_type

    if severity is Severity.NORMAL:
        if prediction.score >= params.predictive_medium:
            return Severity.MEDIUM, prediction.event_type
        return severity, event_type

    if prediction.event_type is not event_type \
            and prediction.urgency[prediction.metric] >= params.predictive_override:
        return severity, prediction.event_type

    return severity, event_type


def clearly_abnormal(readings: Dict[str, float], params: SimulationParams) -> bool:
    for m in METRICS:
        band = params.clearly_abnormal[m]
        if band.high is not None and readings[m] > band.high:
            return True
        if band.low is not None and readings[m] < band.low:
            return True
    return False


def finalize_severity(severity: Severity, status: Status, readings: Dict[str, float],
                      params: SimulationParams, fixed_inactive: bool = False) -> Severity:
    """Sanity checks on the reported severity (the locked state is left alone)."""
    if severity is not Severity.HIGH:
        return severity
    if fixed_inactive or status is Status.INACTIVE:
        return Severity.MEDIUM
    if status is Status.ACTIVE and not clearly_abnormal(readings, params):
        return Severity.MEDIUM
    return severity
