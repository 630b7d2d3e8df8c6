"""
Insight text
============
Builds the four audience-specific strings attached to each record
(operator message, manager, engineer, maintenance) plus a trailing
observations clause.

Observations compare readings against soft advisory bands that sit inside
the hard warning thresholds, so the dashboard can surface qualitative notes
("temperature slightly elevated") while the warning is still normal.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from simulator.models import METRICS, EventType, Severity, Status
from simulator.presets import SimulationParams


@dataclass(frozen=True)
class Insights:
    message:     str
    manager:     str
    engineer:    str
    maintenance: str


# (metric, side) -> note, per status.  side is "low" or "high".
_ACTIVE_NOTES = {
    ("temperature", "high"): "temperature slightly elevated",
    ("temperature", "low"):  "temperature slightly below typical range",
    ("vibration", "high"):   "vibration trending upward",
    ("vibration", "low"):    "vibration lower than usual",
    ("pressure", "low"):     "pressure slightly below baseline",
    ("pressure", "high"):    "pressure slightly above baseline",
    ("flow", "low"):         "flow approaching lower bound of normal",
    ("flow", "high"):        "flow near upper bound of normal",
}

_IDLE_NOTES = {
    ("temperature", "high"): "temperature slightly elevated during idle state",
    ("temperature", "low"):  "temperature slightly low during idle state",
    ("vibration", "high"):   "vibration higher than expected for idle operation",
    ("vibration", "low"):    "vibration lower than expected for idle operation",
    ("pressure", "low"):     "pressure slightly below expected idle baseline",
    ("pressure", "high"):    "pressure slightly above expected idle baseline",
    ("flow", "low"):         "flow slightly low for idle state",
    ("flow", "high"):        "flow slightly high for idle state",
}


def build_observations(status: Status, readings: Optional[Dict[str, float]],
                       params: SimulationParams) -> str:
    if status is Status.OFFLINE or readings is None:
        return "Observations: baseline conditions assumed stable while unit is offline."

    advisory = params.profiles[status].advisory
    notes_for = _ACTIVE_NOTES if status is Status.ACTIVE else _IDLE_NOTES

    notes: List[str] = []
    for m in METRICS:
        band = advisory[m]
        if band.high is not None and readings[m] > band.high:
            notes.append(notes_for[(m, "high")])
        elif band.low is not None and readings[m] < band.low:
            notes.append(notes_for[(m, "low")])

    if not notes:
        return "Observations: parameters stable across all metrics."
    return "Observations: " + ", ".join(notes) + "."


def _with(obs: str, message: str, manager: str, engineer: str, maintenance: str) -> Insights:
    return Insights(
        message=f"{message} {obs}",
        manager=f"{manager} {obs}",
        engineer=f"{engineer} {obs}",
        maintenance=f"{maintenance} {obs}",
    )


def build_insights(
    status:     Status,
    severity:   Severity,
    event_type: EventType,
    ai_alert:   bool,
    readings:   Optional[Dict[str, float]],
    params:     SimulationParams,
) -> Insights:
    obs = build_observations(status, readings, params)
    event = event_type.value

    if status is Status.OFFLINE:
        return _with(
            obs,
            "Compressor offline: no telemetry.",
            "Unit offline: no current production impact.",
            "Unit offline: AI monitoring paused until the compressor returns to operation.",
            "Check power, connectivity, and safety interlocks if shutdown was not expected.",
        )

    if status is Status.INACTIVE and severity is Severity.NORMAL:
        return _with(
            obs,
            "Compressor inactive: sensors online, no anomalies.",
            "Idle unit: no production risk.",
            "Parameters stable during inactivity.",
            "Routine checks only, no immediate action.",
        )

    if status is Status.INACTIVE and severity is Severity.MEDIUM:
        return _with(
            obs,
            f"Inactive compressor with mild {event} deviation: review before next startup.",
            "No production impact while the unit is idle, but follow up before restart.",
            f"Review {event} trend history and plan checks before the next startup.",
            f"Inspect {event} components before bringing the compressor back online.",
        )

    if status is Status.ACTIVE and ai_alert and severity is Severity.MEDIUM \
            and event_type is EventType.NORMAL:
        return _with(
            obs,
            "AI detected early risk pattern: parameters look normal but trends are shifting.",
            "Emerging risk: monitor this compressor to avoid downtime.",
            "Review vibration, flow, and temperature trends.",
            "Plan inspection in the next maintenance window.",
        )

    if severity is Severity.NORMAL:
        return _with(
            obs,
            "Operating normally.",
            "Compressor healthy: no production risk.",
            "Parameters within expected range.",
            "Continue routine preventive maintenance.",
        )

    if severity is Severity.MEDIUM:
        return _with(
            obs,
            f"Medium {event} deviation detected.",
            "Emerging operational risk: monitor this unit.",
            f"Review {event} trend history and process conditions.",
            f"Inspect {event} components in the next maintenance window.",
        )

    if severity is Severity.HIGH:
        return _with(
            obs,
            f"High {event} deviation: immediate attention required.",
            "High operational risk: potential production impact.",
            f"Critical {event} deviation: perform root cause analysis.",
            f"Treat as urgent: schedule immediate inspection for {event}.",
        )

    return Insights(obs, obs, obs, obs)
