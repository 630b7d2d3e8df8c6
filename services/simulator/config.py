"""
Configuration
=============
All settings come from environment variables (a local .env file is picked
up via python-dotenv).  See .env.example.

  STORE_CREDENTIALS           – optional JSON credential bundle for the store:
                                {"host", "port", "user", "password", "database"}.
                                Takes precedence over the DB_* variables.
  DB_HOST / DB_PORT / DB_USER / DB_PASSWORD / DB_NAME
  SIMULATOR_PRESET            – parameter preset, 'tuned' (default) or 'classic'
  SIMULATOR_SEED              – optional int, makes runs reproducible
  PREDICTIVE_MODE             – velocity-based escalation (default true)
  EXPOSE_PREDICTIVE_FIELDS    – add predictive_* fields to records (default false)
  TICK_SECONDS                – seconds between ticks (default 2)
  HISTORY_INTERVAL_SECONDS    – seconds between history snapshots (default 30)
  INACTIVITY_TIMEOUT_SECONDS  – auto-pause after this long without UI activity (default 600)
  PORT                        – HTTP port (default 5000)
  LOG_LEVEL                   – default INFO

A missing or malformed value raises ConfigError; the service must not start.
"""

import json
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from simulator.presets import PRESETS, SimulationParams, get_preset

_TRUE_VALUES  = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off"}


class ConfigError(Exception):
    """Missing or malformed configuration.  Fatal at startup."""


class StoreCredentials(BaseModel):
    host:     str = "localhost"
    port:     int = Field(5432, ge=1, le=65535)
    user:     str = "postgres"
    password: str
    database: str = "twintech"


@dataclass(frozen=True)
class Settings:
    credentials:           StoreCredentials
    preset:                str = "tuned"
    seed:                  Optional[int] = None
    predictive_mode:       bool = True
    expose_predictive:     bool = False
    tick_seconds:          float = 2.0
    history_interval:      float = 30.0
    inactivity_timeout:    float = 600.0
    port:                  int = 5000
    log_level:             str = "INFO"

    @property
    def params(self) -> SimulationParams:
        return get_preset(self.preset)


# ─── parsing helpers ──────────────────────────────────────
def _bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _number(env: Mapping[str, str], name: str, default, cast=float, minimum=None):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} must be a {cast.__name__}, got {raw!r}") from None
    if minimum is not None and value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


def _credentials(env: Mapping[str, str]) -> StoreCredentials:
    bundle = env.get("STORE_CREDENTIALS")
    try:
        if bundle:
            try:
                data = json.loads(bundle)
            except json.JSONDecodeError as exc:
                raise ConfigError(f"STORE_CREDENTIALS is not valid JSON: {exc}") from None
            if not isinstance(data, dict):
                raise ConfigError("STORE_CREDENTIALS must be a JSON object")
            return StoreCredentials(**data)

        if not env.get("DB_PASSWORD"):
            raise ConfigError("No store credentials: set STORE_CREDENTIALS or DB_PASSWORD")
        return StoreCredentials(
            host     = env.get("DB_HOST", "localhost"),
            port     = env.get("DB_PORT", "5432"),
            user     = env.get("DB_USER", "postgres"),
            password = env["DB_PASSWORD"],
            database = env.get("DB_NAME", "twintech"),
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid store credentials: {exc.errors()}") from None


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from *env* (defaults to os.environ after loading .env)."""
    if env is None:
        load_dotenv()
        env = os.environ

    preset = env.get("SIMULATOR_PRESET", "tuned").strip().lower() or "tuned"
    if preset not in PRESETS:
        raise ConfigError(f"Unknown SIMULATOR_PRESET {preset!r}; choose from {sorted(PRESETS)}")

    return Settings(
        credentials        = _credentials(env),
        preset             = preset,
        seed               = _number(env, "SIMULATOR_SEED", None, cast=int),
        predictive_mode    = _bool(env, "PREDICTIVE_MODE", True),
        expose_predictive  = _bool(env, "EXPOSE_PREDICTIVE_FIELDS", False),
        tick_seconds       = _number(env, "TICK_SECONDS", 2.0, minimum=0.1),
        history_interval   = _number(env, "HISTORY_INTERVAL_SECONDS", 30.0, minimum=1.0),
        inactivity_timeout = _number(env, "INACTIVITY_TIMEOUT_SECONDS", 600.0, minimum=1.0),
        port               = _number(env, "PORT", 5000, cast=int, minimum=1),
        log_level          = env.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
