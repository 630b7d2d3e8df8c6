"""
Predictive escalation
=====================
Velocity-based estimate of how soon a unit will cross its medium warning
thresholds.

From the last two history samples we take per-metric velocity, project the
time needed to reach the medium threshold at that velocity, and map it to
an urgency in [0, 1] against a fixed horizon:

    urgency = 1 - min(seconds_to_threshold / horizon, 1)

Per-metric urgencies are combined with fixed weights into one score.
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from simulator.anomalies import EVENT_FOR_METRIC
from simulator.models import METRICS, EventType, Sample
from simulator.presets import SimulationParams, Threshold


@dataclass(frozen=True)
class Prediction:
    score:                float
    event_type:           EventType                # NORMAL when nothing beats the noise floor
    metric:               Optional[str]
    urgency:              Dict[str, float]
    seconds_to_threshold: Dict[str, float]

    @property
    def minutes_to_threshold(self) -> Optional[float]:
        if self.metric is None:
            return None
        seconds = self.seconds_to_threshold[self.metric]
        return None if math.isinf(seconds) else round(seconds / 60.0, 1)


def time_to_threshold(value: float, velocity: float, threshold: Threshold) -> float:
    """Seconds until *value* reaches the medium threshold (inf if never, 0 if past it)."""
    if threshold.higher_is_worse:
        gap, closing = threshold.medium - value, velocity
    else:
        gap, closing = value - threshold.medium, -velocity

    if gap <= 0:
        return 0.0
    if closing <= 0:
        return math.inf
    return gap / closing


def urgency_for(seconds: float, horizon: float) -> float:
    if math.isinf(seconds):
        return 0.0
    return 1.0 - min(seconds / horizon, 1.0)


def predict(history: Sequence[Sample], params: SimulationParams,
            thresholds: Dict[str, Threshold]) -> Optional[Prediction]:
    """Return a Prediction, or None when fewer than two samples are available."""
    if len(history) < 2:
        return None

    prev, last = history[-2], history[-1]
    dt = (last.timestamp - prev.timestamp) / 1000.0
    if dt <= 0:
        return None

    urgency: Dict[str, float] = {}
    seconds: Dict[str, float] = {}
    for m in METRICS:
        velocity = (last.readings[m] - prev.readings[m]) / dt
        seconds[m] = time_to_threshold(last.readings[m], velocity, thresholds[m])
        urgency[m] = urgency_for(seconds[m], params.horizon_seconds)

    score = sum(urgency[m] * params.predictive_weights[m] for m in METRICS)
    score = min(max(score, 0.0), 1.0)

    top = max(METRICS, key=lambda m: urgency[m])
    if urgency[top] <= params.predictive_noise_floor:
        return Prediction(score, EventType.NORMAL, None, urgency, seconds)
    return Prediction(score, EVENT_FOR_METRIC[top], top, urgency, seconds)
