"""
Risk score and AI-alert layer
=============================
Active units score the weighted positive deviations from a reference
operating point plus a flat bonus for medium / high warnings.  Idle units
draw from a severity-dependent range (sparse idle telemetry), offline
units are always 0.

The AI alert is a rule layer on top of the warning decision, not a model:
it fires on high combined risk, on an emerging medium pattern, on a
confirmed deviation, or (predictive mode) on a strong velocity forecast.
"""

import random
from dataclasses import dataclass
from typing import Dict, Optional

from simulator.models import EventType, Severity, Status
from simulator.predictive import Prediction
from simulator.presets import SimulationParams

# higher-is-worse metrics deviate upward, the others downward
_UPWARD = {"temperature", "vibration"}


@dataclass(frozen=True)
class AIAlert:
    alert:  bool
    reason: str


def contributions(readings: Dict[str, float], params: SimulationParams) -> Dict[str, float]:
    """Per-metric weighted deviation from the reference point (never negative)."""
    out = {}
    for m, weight in params.risk_weights.items():
        ref = params.risk_reference[m]
        dev = readings[m] - ref if m in _UPWARD else ref - readings[m]
        out[m] = max(0.0, dev) * weight
    return out


def risk_score(status: Status, severity: Severity, readings: Optional[Dict[str, float]],
               params: SimulationParams, rng: random.Random,
               fixed_inactive: bool = False) -> float:
    if status is Status.OFFLINE:
        return 0.0

    if status is Status.ACTIVE:
        score = sum(contributions(readings, params).values())
        if severity is Severity.MEDIUM:
            score += params.medium_bonus
        elif severity is Severity.HIGH:
            score += params.high_bonus
    else:
        key = severity.value if severity.value in params.inactive_risk_ranges else "normal"
        lo, hi = params.inactive_risk_ranges[key]
        score = lo + rng.random() * (hi - lo)

    if fixed_inactive:
        score = min(score, params.fixed_inactive_risk_ceiling)
    return round(max(score, 0.0), 2)


def ai_alert(status: Status, severity: Severity, event_type: EventType, score: float,
             params: SimulationParams, prediction: Optional[Prediction] = None) -> AIAlert:
    if status is Status.OFFLINE:
        return AIAlert(False, "No AI alert (unit offline, no telemetry).")

    if status is Status.INACTIVE:
        if severity is Severity.MEDIUM \
                and event_type in (EventType.VIBRATION, EventType.PRESSURE) \
                and score >= params.ai_idle_min_risk:
            return AIAlert(
                True,
                "AI detected an idle-state trend that could impact reliability "
                "on the next startup.",
            )
        return AIAlert(False, "No AI alert (idle-state behavior within acceptable range).")

    alert = AIAlert(False, "No AI alert.")
    if score > params.ai_high_risk:
        alert = AIAlert(True, "AI detected high combined risk pattern.")
    elif severity is Severity.MEDIUM and score > params.ai_emerging_risk:
        alert = AIAlert(True, "AI detected an emerging risk pattern.")

    if severity not in (Severity.NORMAL, Severity.NONE) \
            and event_type not in (EventType.NORMAL, EventType.NONE):
        alert = AIAlert(True, f"AI confirmed {event_type.value} deviation.")

    if not alert.alert and prediction is not None and prediction.metric is not None \
            and prediction.score >= params.predictive_alert:
        minutes = prediction.minutes_to_threshold
        eta = f"~{minutes:g} min" if minutes is not None else "the near term"
        alert = AIAlert(
            True,
            f"AI predicts {prediction.metric} will reach its warning threshold in {eta}.",
        )
    return alert


_EARLY_REASONS = {
    "temperature": "AI early detection: subtle overheating trend detected.",
    "vibration":   "AI early detection: vibration pattern indicates early mechanical wear.",
    "pressure":    "AI early detection: pressure behavior suggests process instability.",
    "flow":        "AI early detection: flow pattern indicates early capacity loss.",
}


def early_detection_reason(readings: Dict[str, float], params: SimulationParams) -> str:
    """Explain an alert that fired while thresholds still read normal."""
    parts = contributions(readings, params)
    top = max(parts, key=parts.get)
    if parts[top] <= 0:
        return "AI early detection: multi-parameter deviation detected."
    return _EARLY_REASONS[top]
