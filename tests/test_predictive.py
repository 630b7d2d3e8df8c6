"""
TwinTech Simulator - Unit Tests: predictive escalation (velocity forecast)

Run: pytest tests/test_predictive.py -v
"""
import math

import pytest

from conftest import T0
from simulator.models import EventType, Sample, Status
from simulator.predictive import predict, time_to_threshold, urgency_for
from simulator.presets import Threshold


def sample(params, t, **overrides):
    readings = dict(params.profiles[Status.ACTIVE].baseline)
    readings.update(overrides)
    return Sample(t, readings)


# ── time_to_threshold ─────────────────────────────────────────────────────────

class TestTimeToThreshold:
    HOT = Threshold(84.5, 85.5)
    LOW = Threshold(97.0, 96.0, higher_is_worse=False)

    def test_rising_toward_upper_threshold(self):
        assert time_to_threshold(82.0, 0.01, self.HOT) == pytest.approx(250.0)

    def test_moving_away_is_infinite(self):
        assert math.isinf(time_to_threshold(82.0, -0.01, self.HOT))
        assert math.isinf(time_to_threshold(82.0, 0.0, self.HOT))

    def test_already_past_is_zero(self):
        assert time_to_threshold(85.0, -1.0, self.HOT) == 0.0
        assert time_to_threshold(96.5, 1.0, self.LOW) == 0.0

    def test_falling_toward_lower_threshold(self):
        assert time_to_threshold(98.0, -0.01, self.LOW) == pytest.approx(100.0)
        assert math.isinf(time_to_threshold(98.0, 0.01, self.LOW))


# ── urgency ───────────────────────────────────────────────────────────────────

class TestUrgency:
    def test_linear_inside_horizon(self):
        assert urgency_for(300.0, 600.0) == pytest.approx(0.5)

    def test_bounds(self):
        assert urgency_for(0.0, 600.0) == 1.0
        assert urgency_for(1200.0, 600.0) == 0.0
        assert urgency_for(math.inf, 600.0) == 0.0


# ── predict ───────────────────────────────────────────────────────────────────

class TestPredict:
    def test_needs_two_samples(self, params):
        assert predict([], params, params.thresholds) is None
        assert predict([sample(params, T0)], params, params.thresholds) is None

    def test_non_increasing_timestamps_give_nothing(self, params):
        history = [sample(params, T0), sample(params, T0)]
        assert predict(history, params, params.thresholds) is None

    def test_flat_history_is_quiet(self, params):
        history = [sample(params, T0), sample(params, T0 + 2000)]
        p = predict(history, params, params.thresholds)
        assert p.score == 0.0
        assert p.event_type is EventType.NORMAL
        assert p.metric is None
        assert p.minutes_to_threshold is None

    def test_rising_temperature(self, params):
        # +0.5 degC over 10 s -> 0.05 degC/s, 2.0 degC to go -> 40 s
        history = [sample(params, T0, temperature=82.0),
                   sample(params, T0 + 10_000, temperature=82.5)]
        p = predict(history, params, params.thresholds)
        assert p.metric == "temperature"
        assert p.event_type is EventType.OVERHEATING
        assert p.seconds_to_threshold["temperature"] == pytest.approx(40.0)
        assert p.urgency["temperature"] == pytest.approx(1 - 40.0 / 600.0)
        assert p.score == pytest.approx(0.4 * (1 - 40.0 / 600.0))
        assert p.minutes_to_threshold == pytest.approx(0.7)

    def test_only_last_two_samples_count(self, params):
        history = [sample(params, T0, temperature=80.0),
                   sample(params, T0 + 2000, temperature=83.0),
                   sample(params, T0 + 4000, temperature=83.0)]
        p = predict(history, params, params.thresholds)
        assert p.score == 0.0

    def test_falling_flow_names_low_flow(self, params):
        history = [sample(params, T0, flow=200.0),
                   sample(params, T0 + 2000, flow=190.0)]
        p = predict(history, params, params.thresholds)
        assert p.event_type is EventType.LOW_FLOW

    def test_weights_favour_temperature(self, params):
        w = params.predictive_weights
        assert w["temperature"] > w["vibration"] > w["flow"] > w["pressure"]
        assert sum(w.values()) == pytest.approx(1.0)

    def test_everything_past_threshold_saturates(self, params):
        history = [sample(params, T0, temperature=85.0, vibration=4.4, pressure=96.5, flow=176.0),
                   sample(params, T0 + 2000, temperature=85.0, vibration=4.4, pressure=96.5, flow=176.0)]
        p = predict(history, params, params.thresholds)
        assert p.score == pytest.approx(1.0)
        assert p.event_type is EventType.OVERHEATING
