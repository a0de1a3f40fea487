"""
Runtime configuration.

Values come from the environment (a local .env is loaded first). A preset
picks the retry policy, cache TTL and cache-key granularity together; any
of those can still be overridden one by one.
"""

import os
from dataclasses import dataclass, replace
from typing import Optional

from dotenv import load_dotenv

from jobharvest.preprocessing.query_builder import DEFAULT_HOST

CACHE_KEY_SCHEMES = ("url", "search")

# Pipeline presets: the quick keyword/location crawl and the full batch crawl
PRESETS = {
    "simple": {"policy": "bounded-attempt", "cache_ttl": 30 * 60, "cache_key": "search"},
    "batch": {"policy": "consecutive-error", "cache_ttl": 60 * 60, "cache_key": "url"},
}
# Retry-policy names resolve to the preset built around them
PRESET_ALIASES = {
    "bounded-attempt": "simple",
    "consecutive-error": "batch",
}
DEFAULT_PRESET = "batch"


def resolve_preset(name: str) -> str:
    key = (name or DEFAULT_PRESET).strip().lower()
    key = PRESET_ALIASES.get(key, key)
    if key not in PRESETS:
        valid = ", ".join(sorted(list(PRESETS) + list(PRESET_ALIASES)))
        raise ValueError(f"Unknown preset '{name}'. Expected one of: {valid}")
    return key


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean, got '{raw}'")


def _env_number(name: str, default, cast=int):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got '{raw}'")
    return value


@dataclass(frozen=True)
class HarvesterConfig:
    preset: str = DEFAULT_PRESET
    policy: str = PRESETS[DEFAULT_PRESET]["policy"]
    cache_ttl: float = PRESETS[DEFAULT_PRESET]["cache_ttl"]
    cache_key: str = PRESETS[DEFAULT_PRESET]["cache_key"]
    host: str = DEFAULT_HOST
    enrich: bool = True
    max_workers: int = 5
    timeout: float = 10
    port: int = 3000
    log_dir: Optional[str] = None

    def __post_init__(self):
        if self.cache_key not in CACHE_KEY_SCHEMES:
            raise ValueError(
                f"cache_key must be one of {CACHE_KEY_SCHEMES}, got '{self.cache_key}'"
            )

    @classmethod
    def for_preset(cls, name: str, **overrides) -> "HarvesterConfig":
        preset = resolve_preset(name)
        return cls(preset=preset, **{**PRESETS[preset], **overrides})

    @classmethod
    def from_env(cls, preset: Optional[str] = None) -> "HarvesterConfig":
        """
        Load configuration from JOBHARVEST_* environment variables.

        An explicit preset takes the place of JOBHARVEST_PRESET; the other
        variables still override whatever the preset sets.
        """
        load_dotenv()
        config = cls.for_preset(preset or os.getenv("JOBHARVEST_PRESET", DEFAULT_PRESET))

        overrides = {
            "host": os.getenv("JOBHARVEST_HOST") or config.host,
            "cache_ttl": _env_number("JOBHARVEST_CACHE_TTL", config.cache_ttl, float),
            "cache_key": (os.getenv("JOBHARVEST_CACHE_KEY") or config.cache_key).lower(),
            "enrich": _env_bool("JOBHARVEST_ENRICH", config.enrich),
            "max_workers": _env_number("JOBHARVEST_MAX_WORKERS", config.max_workers),
            "timeout": _env_number("JOBHARVEST_TIMEOUT", config.timeout, float),
            "port": _env_number("PORT", config.port),
            "log_dir": os.getenv("JOBHARVEST_LOG_DIR") or None,
        }
        return replace(config, **overrides)
