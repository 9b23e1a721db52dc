"""
Centralised settings loader (pydantic-settings).

Only the HTTP layer and CLI read these; the engine in `core/` takes every
knob as an argument.
"""

from __future__ import annotations
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ------------------------------------------------------------------ #
#  Master settings model
# ------------------------------------------------------------------ #
class _Settings(BaseSettings):
    # ─── runtime ─────────────────────────────────────────────────────
    env_name: str = Field("local", validation_alias="ENV_NAME")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")

    # ─── engine defaults ────────────────────────────────────────────
    default_preset: str = Field("Healthy", validation_alias="DEFAULT_PRESET")
    max_candidate_pool: int = Field(5000, ge=1, validation_alias="MAX_CANDIDATE_POOL")

    # allow other teammates’ env-vars without crashing
    model_config = SettingsConfigDict(
        extra="ignore", env_file=".env", env_file_encoding="utf-8"
    )


# ------------------------------------------------------------------ #
#  Cached singleton accessor
# ------------------------------------------------------------------ #
@lru_cache
def _cached() -> _Settings:  # pragma: no cover
    return _Settings()  # type: ignore[call-arg]


settings: _Settings = _cached()
