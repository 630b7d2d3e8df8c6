"""
TwinTech Simulator - Test Fixtures (conftest.py)
Shared fixtures: in-memory store, seeded RNG, controllable clock.
"""
import random

import pytest

from simulator.config import Settings, StoreCredentials
from simulator.models import Status
from simulator.presets import CLASSIC, TUNED
from simulator.sensors import CompressorConfig, new_unit_memory

T0 = 1_700_000_000_000


# ── Helpers ───────────────────────────────────────────────────────────────────

class FixedRandom(random.Random):
    """random() always returns the same value; integer helpers stay seeded."""

    def __init__(self, value=0.5):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


class ExplodingRandom(random.Random):
    def random(self):
        raise AssertionError("random draw not expected")


class FakeClock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


class FakeStore:
    """In-memory stand-in for TelemetryStore."""

    def __init__(self, running=True, last_active=None):
        self.running = running
        self.last_active = last_active
        self.latest = None
        self.history = []
        self.fail_reads = False
        self.fail_writes = False
        self.schema_ready = False

    async def ensure_schema(self):
        self.schema_ready = True

    async def get_running(self):
        if self.fail_reads:
            raise ConnectionError("store unreachable")
        return self.running

    async def set_running(self, running):
        if self.fail_writes:
            raise ConnectionError("store unreachable")
        self.running = running

    async def get_last_active(self):
        if self.fail_reads:
            raise ConnectionError("store unreachable")
        return self.last_active

    async def set_last_active(self, timestamp_ms):
        if self.fail_writes:
            raise ConnectionError("store unreachable")
        self.last_active = timestamp_ms

    async def write_latest(self, batch):
        if self.fail_writes:
            raise ConnectionError("store unreachable")
        self.latest = batch

    async def write_history(self, timestamp_ms, batch):
        if self.fail_writes:
            raise ConnectionError("store unreachable")
        self.history.append((timestamp_ms, batch))


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def params():
    return TUNED


@pytest.fixture
def classic():
    return CLASSIC


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def settings():
    return Settings(credentials=StoreCredentials(password="test"), seed=42)


@pytest.fixture
def active_unit(params, rng):
    return new_unit_memory(CompressorConfig("compressor_1"), T0, params, rng)


@pytest.fixture
def idle_unit(params, rng):
    unit = new_unit_memory(CompressorConfig("compressor_2"), T0, params, rng)
    unit.state = Status.INACTIVE
    unit.readings = dict(params.profiles[Status.INACTIVE].baseline)
    return unit


@pytest.fixture
def fixed_idle_unit(params, rng):
    return new_unit_memory(
        CompressorConfig("compressor_5", pinned=Status.INACTIVE), T0, params, rng
    )
