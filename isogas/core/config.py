"""Settings and mixture input files for ISOGas.

Settings come from defaults, an optional JSON file, and ``ISOGAS_*``
environment variables, in increasing order of priority. Mixtures can be
read from JSON; conversion results are only serialized for display.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import numpy as np

from isogas.core.models import Component, ConversionResult, Mixture, OperatingConditions, ReferenceConditions
from isogas.core.state import DEFAULT_HEALTH_INTERVAL
from isogas.remote.client import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000/api/v1"

_FALSE_STRINGS = {"0", "false", "no", "off"}


@dataclass
class Settings:
    """Runtime configuration."""

    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT  # s, per attempt
    health_interval: float = DEFAULT_HEALTH_INTERVAL  # s
    max_attempts: int = 3
    backoff_base: float = 1.0  # s
    remote_enabled: bool = True
    balance_gas: str = "N2"
    reference: ReferenceConditions = field(default_factory=ReferenceConditions)


_ENV_VARS = {
    "ISOGAS_API_URL": ("api_url", str),
    "ISOGAS_TIMEOUT": ("timeout", float),
    "ISOGAS_HEALTH_INTERVAL": ("health_interval", float),
    "ISOGAS_MAX_ATTEMPTS": ("max_attempts", int),
    "ISOGAS_REMOTE": ("remote_enabled", lambda s: s.strip().lower() not in _FALSE_STRINGS),
}


def settings_from_dict(data: Mapping[str, Any], base: Settings | None = None) -> Settings:
    """Overlay the known keys of *data* on *base* (or the defaults).

    Raises:
        ValueError: On an unknown key.
    """
    settings = base or Settings()
    known = {f.name for f in fields(Settings)}
    for key, value in data.items():
        if key not in known:
            raise ValueError(f"Unknown setting '{key}'")
        if key == "reference":
            value = ReferenceConditions(**value)
        setattr(settings, key, value)
    return settings


def load_settings(path: str | Path | None = None, env: Mapping[str, str] | None = None) -> Settings:
    """Build settings from defaults, a JSON file and the environment."""
    settings = Settings()
    if path is not None:
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            settings = settings_from_dict(json.load(f), settings)
        logger.info("Loaded settings from %s", path)

    env = os.environ if env is None else env
    for var, (attr, parse) in _ENV_VARS.items():
        if var in env:
            setattr(settings, attr, parse(env[var]))
    if settings.max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {settings.max_attempts}")
    return settings


# --- Mixture input ---


def mixture_from_dict(data: Mapping[str, Any]) -> Mixture:
    """Build a Mixture from ``{"conditions": {...}, "components": [...]}``."""
    components = [
        Component(**{"id": str(i), **raw}) for i, raw in enumerate(data.get("components", []), start=1)
    ]
    conditions = OperatingConditions(**data.get("conditions", {}))
    return Mixture(components=components, conditions=conditions)


def load_mixture_json(path: str | Path) -> Mixture:
    """Load a mixture description from a JSON file."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        return mixture_from_dict(json.load(f))


# --- Result serialization ---


class _ResultEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy and enum types."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, (np.integer,)):
            return int(obj)
        if isinstance(obj, (np.floating,)):
            return float(obj)
        return super().default(obj)


def result_to_json(result: ConversionResult, indent: int = 2) -> str:
    """Serialize a conversion result for display or hand-off."""
    data = asdict(result)
    data["method"] = result.method.value
    return json.dumps(data, indent=indent, cls=_ResultEncoder, ensure_ascii=False)
