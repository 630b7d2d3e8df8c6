"""
Domain types – unit memory, warning state and the output record schema.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Dict, Optional

from pydantic import BaseModel

METRICS = ("temperature", "vibration", "pressure", "flow")


class Status(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    OFFLINE = "offline"


class Severity(str, Enum):
    NORMAL = "normal"
    MEDIUM = "medium"
    HIGH = "high"
    NONE = "none"       # offline units only


class EventType(str, Enum):
    NORMAL = "normal"
    NONE = "none"
    OVERHEATING = "overheating"
    VIBRATION = "vibration"
    PRESSURE = "pressure"
    LOW_FLOW = "low_flow"


# ─── Unit memory ──────────────────────────────────────────
@dataclass(frozen=True)
class WarningState:
    """The currently locked warning of a unit."""
    severity:   Severity
    event_type: EventType
    start_time: int               # ms epoch


@dataclass(frozen=True)
class Sample:
    timestamp: int
    readings:  Dict[str, float]


@dataclass
class UnitMemory:
    """
    Everything the simulator remembers about one compressor between ticks.
    Owned by the orchestrator, mutated only by the pipeline steps.
    """
    compressor_id:  str
    readings:       Dict[str, float]
    state:          Status
    last_change:    int
    warning_state:  WarningState
    bias_interval:  int
    bias_last_flip: int
    trend:          Dict[str, float] = field(default_factory=lambda: {m: 0.0 for m in METRICS})
    bias:           Dict[str, float] = field(default_factory=lambda: {m: 0.0 for m in METRICS})
    history:        Deque[Sample] = field(default_factory=lambda: deque(maxlen=30))
    pinned:         Optional[Status] = None

    @property
    def fixed_inactive(self) -> bool:
        return self.pinned is Status.INACTIVE


# ─── Output record ────────────────────────────────────────
PREDICTIVE_FIELDS = {"predictive_score", "predicted_event", "minutes_to_threshold"}


class CompressorReading(BaseModel):
    """One compressor's record in a tick batch (GET /api/latest)."""
    compressor_id:        str
    timestamp:            int
    status:               Status
    temperature:          Optional[float] = None
    vibration:            Optional[float] = None
    pressure:             Optional[float] = None
    flow_rate:            Optional[float] = None
    warning:              Severity
    event_type:           EventType
    risk_score:           float
    ai_alert:             bool
    ai_reason:            str
    message:              str
    insights_manager:     str
    insights_engineer:    str
    insights_maintenance: str

    # internal predictive fields, hidden unless explicitly exposed
    predictive_score:     Optional[float] = None
    predicted_event:      Optional[EventType] = None
    minutes_to_threshold: Optional[float] = None

    def to_record(self, expose_predictive: bool = False) -> dict:
        exclude = None if expose_predictive else PREDICTIVE_FIELDS
        return self.model_dump(mode="json", exclude=exclude)
