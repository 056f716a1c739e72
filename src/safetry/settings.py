"""Library-wide defaults resolved from the environment.

Per-handle configuration always wins; these settings only fill the gaps
(``max_delay_ms`` when a backoff sets no cap, the jitter span, and whether
a task created for a single attempt is force-cancelled on timeout; by
default timed-out work keeps running and only its CancelToken is cancelled).

Environment variables use the ``SAFETRY_`` prefix::

    SAFETRY_MAX_DELAY_MS=10000
    SAFETRY_JITTER_MS=250
    SAFETRY_CANCEL_ON_TIMEOUT=true
"""

from __future__ import annotations

from functools import cache
import logging
import os
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from safetry.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

log = logging.getLogger(__name__)

ENV_PREFIX = "SAFETRY_"

DEFAULT_MAX_DELAY_MS = 30_000
DEFAULT_JITTER_MS = 1_000

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}

_DOTENV_LOADED = False


class Settings(BaseModel):
    """Schema for library defaults; validation lives here and nowhere else."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_delay_ms: float = Field(default=DEFAULT_MAX_DELAY_MS, ge=0)
    jitter_ms: float = Field(default=DEFAULT_JITTER_MS, ge=0)
    cancel_on_timeout: bool = Field(default=False)

    @field_validator("cancel_on_timeout", mode="before")
    @classmethod
    def normalize_bool(cls, v: Any) -> Any:
        """Accept the usual env spellings for booleans."""
        if isinstance(v, str):
            s = v.strip().lower()
            if s in _TRUTHY:
                return True
            if s in _FALSY:
                return False
        return v


def _try_load_dotenv() -> None:
    """Load a ``.env`` file once; failures leave the environment untouched."""
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    _DOTENV_LOADED = True
    try:
        from dotenv import load_dotenv

        load_dotenv()
    except Exception as exc:
        log.debug("Skipping .env loading: %s", exc)


def load_env() -> dict[str, str]:
    """Collect ``SAFETRY_*`` variables whose suffix names a Settings field."""
    values: dict[str, str] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in Settings.model_fields:
            values[field_name] = value
        else:
            log.debug("Ignoring unknown environment variable %s", key)
    return values


@cache
def _env_settings() -> Settings:
    _try_load_dotenv()
    return _build(load_env(), origin="environment")


def _build(values: Mapping[str, Any], *, origin: str) -> Settings:
    try:
        return Settings.model_validate(dict(values))
    except ValidationError as exc:
        names = [str(err["loc"][0]) for err in exc.errors() if err["loc"]]
        if origin == "environment":
            names = [ENV_PREFIX + name.upper() for name in names]
        fields = ", ".join(names)
        raise ConfigurationError(
            f"Invalid safetry settings from {origin}: {fields or exc}",
            hint="Delays must be non-negative numbers; "
            "cancel_on_timeout must be a boolean.",
        ) from exc


def resolve_settings(overrides: Mapping[str, Any] | None = None) -> Settings:
    """Resolve settings with precedence ``defaults < environment < overrides``.

    The environment layer is read once and cached; call
    ``clear_settings_cache()`` after changing ``SAFETRY_*`` variables.
    """
    base = _env_settings()
    if not overrides:
        return base
    return _build({**base.model_dump(), **overrides}, origin="overrides")


def clear_settings_cache() -> None:
    _env_settings.cache_clear()
