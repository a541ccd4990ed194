"""Business settings for the dining domain.

Infrastructure (databases, brokers, event store) is configured through
``domain.toml``. The knobs below are business parameters read from the
environment, with the same get/set/reset accessors the gateway factories use so
tests can pin them.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class DiningSettings:
    cart_ttl_hours: int = 24
    tax_rate: float = 0.08
    service_fee_rate: float = 0.05
    delivery_minutes: int = 20
    default_delivery_estimate_minutes: int = 30
    order_number_prefix: str = "FS"
    order_number_attempts: int = 5
    reaper_interval_seconds: int = 300
    reaper_batch_size: int = 500
    currency: str = "USD"


_ENV_PREFIX = "DINING_"


def load_settings(environ: Mapping[str, str] | None = None) -> DiningSettings:
    """Build settings from ``DINING_*`` environment variables."""
    environ = os.environ if environ is None else environ
    defaults = DiningSettings()
    values = {}
    for name, default in defaults.__dict__.items():
        raw = environ.get(f"{_ENV_PREFIX}{name.upper()}")
        if raw is None or raw == "":
            continue
        try:
            values[name] = type(default)(raw)
        except ValueError as exc:
            raise ValueError(f"Invalid value for {_ENV_PREFIX}{name.upper()}: {raw!r}") from exc
    return DiningSettings(**values)


_current_settings: DiningSettings | None = None


def get_settings() -> DiningSettings:
    """Return the active settings, loading them from the environment on first use."""
    global _current_settings
    if _current_settings is None:
        _current_settings = load_settings()
    return _current_settings


def set_settings(settings: DiningSettings) -> None:
    """Override the active settings (useful for tests)."""
    global _current_settings
    _current_settings = settings


def reset_settings() -> None:
    """Drop overrides; the next access reloads from the environment."""
    global _current_settings
    _current_settings = None
