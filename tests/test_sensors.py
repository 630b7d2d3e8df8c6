"""
TwinTech Simulator - Unit Tests: fleet and per-unit record pipeline

End-to-end properties of the generated records: envelopes, offline
shape, pinned units, rounding, determinism under a fixed seed.

Run: pytest tests/test_sensors.py -v
"""
import random
from dataclasses import replace

from conftest import T0
from simulator.models import PREDICTIVE_FIELDS, EventType, Severity, Status, WarningState
from simulator.sensors import (
    COMPRESSORS,
    build_fleet_memory,
    generate_compressor_record,
    generate_telemetry_batch,
)

READING_KEYS = {"temperature": "temperature", "vibration": "vibration",
                "pressure": "pressure", "flow": "flow_rate"}


def run(params, seed, ticks, predictive=True):
    rng = random.Random(seed)
    memory = build_fleet_memory(T0, params, rng)
    batches = []
    now = T0
    for _ in range(ticks):
        now += 2000
        batches.append(generate_telemetry_batch(memory, now, params, rng, predictive=predictive))
    return batches


# ── Fleet ─────────────────────────────────────────────────────────────────────

class TestFleet:
    def test_six_compressors(self):
        assert COMPRESSORS == [f"compressor_{i}" for i in range(1, 7)]

    def test_pinned_units(self, params, rng):
        memory = build_fleet_memory(T0, params, rng)
        assert memory["compressor_5"].state is Status.INACTIVE
        assert memory["compressor_5"].fixed_inactive
        assert memory["compressor_6"].state is Status.OFFLINE
        for cid in COMPRESSORS[:4]:
            assert memory[cid].state is Status.ACTIVE
            assert memory[cid].pinned is None

    def test_batch_in_fleet_order(self, params):
        batch = run(params, 1, 1)[0]
        assert [r["compressor_id"] for r in batch] == COMPRESSORS


# ── Offline records ───────────────────────────────────────────────────────────

class TestOfflineRecord:
    def test_offline_shape(self, params):
        for batch in run(params, 2, 20):
            record = batch[5]
            assert record["status"] == "offline"
            assert record["risk_score"] == 0
            assert record["ai_alert"] is False
            assert record["warning"] == "none"
            assert record["event_type"] == "none"
            for key in READING_KEYS.values():
                assert record[key] is None


# ── Properties over many ticks ────────────────────────────────────────────────

class TestProperties:
    def test_readings_inside_status_envelope(self, classic):
        for batch in run(classic, 3, 1500):
            for record in batch:
                status = Status(record["status"])
                if status is Status.OFFLINE:
                    continue
                envelope = classic.profiles[status].envelope
                for metric, key in READING_KEYS.items():
                    lo, hi = envelope[metric]
                    assert lo <= record[key] <= hi

    def test_tuned_active_temperature_between_80_and_86(self, params):
        for batch in run(params, 4, 500):
            for record in batch:
                if record["status"] == "active":
                    assert 80.0 <= record["temperature"] <= 86.0

    def test_fixed_idle_never_high_and_capped(self, params):
        for batch in run(params, 5, 1000):
            record = batch[4]
            assert record["status"] == "inactive"
            assert record["warning"] != "high"
            assert record["risk_score"] <= params.fixed_inactive_risk_ceiling

    def test_idle_units_never_high_across_transitions(self, classic):
        idle_records = 0
        for batch in run(classic, 11, 2000):
            for record in batch[:4]:
                if record["status"] == "inactive":
                    idle_records += 1
                    assert record["warning"] != "high"
        assert idle_records > 0

    def test_risk_rounded_and_non_negative(self, params):
        for batch in run(params, 6, 300):
            for record in batch:
                assert record["risk_score"] >= 0
                assert record["risk_score"] == round(record["risk_score"], 2)

    def test_same_seed_same_output(self, params):
        assert run(params, 7, 200) == run(params, 7, 200)

    def test_different_seed_different_output(self, params):
        assert run(params, 7, 50) != run(params, 8, 50)


# ── End-to-end scenarios ──────────────────────────────────────────────────────

class TestScenarios:
    def test_steady_state_is_stable(self, active_unit, params, rng):
        record = generate_compressor_record(active_unit, T0 + 2000, params, rng)
        assert record.status is Status.ACTIVE
        assert record.warning is Severity.NORMAL
        assert record.ai_alert is False
        assert record.message.startswith("Operating normally.")

    def test_locked_high_survives_the_pipeline(self, active_unit, params, rng):
        active_unit.readings["temperature"] = 86.0
        active_unit.warning_state = WarningState(Severity.HIGH, EventType.OVERHEATING, T0 + 1000)
        record = generate_compressor_record(active_unit, T0 + 2000, params, rng)
        assert record.warning is Severity.HIGH
        assert record.event_type is EventType.OVERHEATING
        assert record.ai_alert is True
        assert record.ai_reason == "AI confirmed overheating deviation."

    def test_high_is_downgraded_when_readings_recover(self, active_unit, params, rng):
        active_unit.warning_state = WarningState(Severity.HIGH, EventType.OVERHEATING, T0 + 1000)
        record = generate_compressor_record(active_unit, T0 + 2000, params, rng)
        assert record.warning is Severity.MEDIUM
        assert active_unit.warning_state.severity is Severity.HIGH

    def test_high_does_not_follow_unit_into_idle(self, active_unit, params, rng):
        active_unit.warning_state = WarningState(Severity.HIGH, EventType.OVERHEATING, T0 + 1000)
        active_unit.state = Status.INACTIVE
        active_unit.readings = dict(params.profiles[Status.INACTIVE].baseline)
        record = generate_compressor_record(active_unit, T0 + 2000, params, rng)
        assert record.status is Status.INACTIVE
        assert record.warning is Severity.MEDIUM
        assert record.event_type is EventType.OVERHEATING
        assert params.inactive_risk_ranges["medium"][0] <= record.risk_score \
            <= params.inactive_risk_ranges["medium"][1]
        assert record.message.startswith("Inactive compressor with mild overheating deviation")

    def test_alert_on_normal_upgrades_to_medium(self, active_unit, params, rng):
        eager = replace(params, ai_high_risk=1.0)
        active_unit.readings.update(temperature=84.0, vibration=3.9, pressure=97.6, flow=185.0)
        record = generate_compressor_record(active_unit, T0 + 2000, eager, rng)
        assert record.event_type is EventType.NORMAL
        assert record.ai_alert is True
        assert record.warning is Severity.MEDIUM
        assert record.ai_reason == "AI early detection: flow pattern indicates early capacity loss."
        assert record.message.startswith("AI detected early risk pattern")
        assert active_unit.warning_state.severity is Severity.NORMAL

    def test_predictive_fields_hidden_by_default(self, params):
        batch = run(params, 9, 3)[-1]
        assert all(PREDICTIVE_FIELDS.isdisjoint(record) for record in batch)

    def test_predictive_fields_exposed_on_request(self, params):
        rng = random.Random(9)
        memory = build_fleet_memory(T0, params, rng)
        generate_telemetry_batch(memory, T0 + 2000, params, rng)
        batch = generate_telemetry_batch(memory, T0 + 4000, params, rng, expose_predictive=True)
        active = batch[0]
        assert PREDICTIVE_FIELDS <= set(active)
        assert active["predictive_score"] is not None
        assert batch[5]["predictive_score"] is None

    def test_predictive_mode_off_changes_nothing_without_history(self, params):
        assert run(params, 10, 1, predictive=False) == run(params, 10, 1, predictive=True)
