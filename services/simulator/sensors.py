"""
Fleet definition and per-unit record generation
================================================
Six compressors share one drift / warning pipeline.  Two of them are
reference units whose status is pinned by configuration:

  compressor_5 - permanently inactive (idle reference)
  compressor_6 - permanently offline  (no telemetry reference)

The remaining four move through the status machine.

Per unit, per tick:
  status -> drift -> history sample -> prediction -> warning (locked)
  -> risk score -> AI alert -> sanity checks -> early-detection upgrade
  -> insights -> CompressorReading
"""

import random
from collections import deque
from dataclasses import dataclass
from typing import Dict, List, Optional

from simulator.anomalies import evaluate_warning, finalize_severity, thresholds_for
from simulator.drift import apply_drift
from simulator.insights import build_insights
from simulator.models import (
    CompressorReading, EventType, Sample, Severity, Status, UnitMemory, WarningState,
)
from simulator.predictive import predict
from simulator.presets import SimulationParams
from simulator.risk import ai_alert, early_detection_reason, risk_score
from simulator.status import apply_status


@dataclass(frozen=True)
class CompressorConfig:
    compressor_id: str
    pinned:        Optional[Status] = None   # None -> driven by the status machine


# --- Fleet catalogue ------------------------------------------------------
FLEET: List[CompressorConfig] = [
    CompressorConfig("compressor_1"),
    CompressorConfig("compressor_2"),
    CompressorConfig("compressor_3"),
    CompressorConfig("compressor_4"),
    CompressorConfig("compressor_5", pinned=Status.INACTIVE),   # fixed idle unit
    CompressorConfig("compressor_6", pinned=Status.OFFLINE),    # fixed offline unit
]

COMPRESSORS = [c.compressor_id for c in FLEET]


# --- Memory construction --------------------------------------------------
def new_unit_memory(config: CompressorConfig, now: int, params: SimulationParams,
                    rng: random.Random) -> UnitMemory:
    """Fresh memory sitting on the baseline of its starting status."""
    state = config.pinned or Status.ACTIVE
    profile = params.profiles.get(state, params.profiles[Status.ACTIVE])
    lo, hi = params.bias_interval_ms
    return UnitMemory(
        compressor_id=config.compressor_id,
        readings=dict(profile.baseline),
        state=state,
        last_change=now,
        warning_state=WarningState(Severity.NORMAL, EventType.NORMAL, now),
        bias_interval=rng.randint(lo, hi),
        bias_last_flip=now,
        history=deque(maxlen=params.history_size),
        pinned=config.pinned,
    )


def build_fleet_memory(now: int, params: SimulationParams, rng: random.Random,
                       fleet: Optional[List[CompressorConfig]] = None) -> Dict[str, UnitMemory]:
    if fleet is None:
        fleet = FLEET
    return {c.compressor_id: new_unit_memory(c, now, params, rng) for c in fleet}


# --- Record generation ----------------------------------------------------
def _offline_record(unit: UnitMemory, now: int, params: SimulationParams) -> CompressorReading:
    text = build_insights(Status.OFFLINE, Severity.NONE, EventType.NONE, False, None, params)
    return CompressorReading(
        compressor_id=unit.compressor_id,
        timestamp=now,
        status=Status.OFFLINE,
        warning=Severity.NONE,
        event_type=EventType.NONE,
        risk_score=0.0,
        ai_alert=False,
        ai_reason="No AI alert (unit offline, no telemetry).",
        message=text.message,
        insights_manager=text.manager,
        insights_engineer=text.engineer,
        insights_maintenance=text.maintenance,
    )


def generate_compressor_record(unit: UnitMemory, now: int, params: SimulationParams,
                               rng: random.Random, predictive: bool = True) -> CompressorReading:
    """Advance one unit by a tick and build its output record."""
    apply_status(unit, now, params, rng)
    status = unit.state

    if status is Status.OFFLINE:
        return _offline_record(unit, now, params)

    apply_drift(unit, now, params, rng)
    readings = dict(unit.readings)
    unit.history.append(Sample(now, readings))

    prediction = None
    if predictive and status is Status.ACTIVE and not unit.fixed_inactive:
        prediction = predict(unit.history, params, thresholds_for(status, params))

    unit.warning_state = evaluate_warning(
        readings, status, unit.warning_state, now, params,
        fixed_inactive=unit.fixed_inactive, prediction=prediction,
    )
    severity = unit.warning_state.severity
    event_type = unit.warning_state.event_type

    score = risk_score(status, severity, readings, params, rng,
                       fixed_inactive=unit.fixed_inactive)
    alert = ai_alert(status, severity, event_type, score, params, prediction)
    reason = alert.reason

    severity = finalize_severity(severity, status, readings, params,
                                 fixed_inactive=unit.fixed_inactive)

    # AI catches it before the thresholds do
    if status is Status.ACTIVE and alert.alert and severity is Severity.NORMAL:
        severity = Severity.MEDIUM
        reason = early_detection_reason(readings, params)

    text = build_insights(status, severity, event_type, alert.alert, readings, params)

    return CompressorReading(
        compressor_id=unit.compressor_id,
        timestamp=now,
        status=status,
        temperature=round(readings["temperature"], 2),
        vibration=round(readings["vibration"], 2),
        pressure=round(readings["pressure"], 2),
        flow_rate=round(readings["flow"], 2),
        warning=severity,
        event_type=event_type,
        risk_score=score,
        ai_alert=alert.alert,
        ai_reason=reason,
        message=text.message,
        insights_manager=text.manager,
        insights_engineer=text.engineer,
        insights_maintenance=text.maintenance,
        predictive_score=round(prediction.score, 3) if prediction else None,
        predicted_event=prediction.event_type if prediction else None,
        minutes_to_threshold=prediction.minutes_to_threshold if prediction else None,
    )


def generate_telemetry_batch(memory: Dict[str, UnitMemory], now: int,
                             params: SimulationParams, rng: random.Random,
                             predictive: bool = True,
                             expose_predictive: bool = False) -> List[dict]:
    """
    Produce one record per unit, in fleet order.
    Returns a list of JSON-ready dicts for the store and the read API.
    """
    return [
        generate_compressor_record(unit, now, params, rng, predictive)
        .to_record(expose_predictive)
        for unit in memory.values()
    ]
