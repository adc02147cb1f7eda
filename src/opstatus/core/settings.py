"""Settings for the status engine.

``StatusSettings`` gathers everything the engine reads from its
environment: the name of the status resource, the target release
version, the workload annotation that carries a workload's version, the
publish queue capacity and logging knobs.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not at publish time
    - **Environment-driven:** Reads from env vars and .env files
    - **Sensible defaults:** Works out of the box against a dev cluster

Examples:
    >>> from opstatus.core.settings import StatusSettings
    >>> settings = StatusSettings(operator_name="dns", release_version="4.2.0")
    >>> settings.queue_size
    5

Tags:
    settings, configuration, pydantic, environment, opstatus
"""

from __future__ import annotations

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from opstatus.core.errors import ConfigError

DEFAULT_VERSION_ANNOTATION = "release.openshift.io/version"


class StatusSettings(BaseSettings):
    """Settings for one managed component.

    Fields
    ──────
    operator_name      : Name of the persisted status resource
    release_version    : Target release; gates version publication
    version_annotation : Workload annotation compared against release_version
    queue_size         : Capacity of the publish queue
    startup_message    : Message of the synthesized Available=False condition
    log_level          : Structlog log level
    log_json           : Force JSON (True) or console (False) output
    """

    model_config = SettingsConfigDict(
        env_prefix="OPSTATUS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ── Resource ─────────────────────────────────────────────────
    operator_name: str = "network"

    # ── Versioning ───────────────────────────────────────────────
    release_version: str = Field(
        default="",
        validation_alias=AliasChoices("RELEASE_VERSION", "OPSTATUS_RELEASE_VERSION"),
        description="Target release version; empty means unknown",
    )
    version_annotation: str = DEFAULT_VERSION_ANNOTATION

    # ── Publishing ───────────────────────────────────────────────
    queue_size: int = Field(default=5, ge=1)
    startup_message: str = "The component is starting up"

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None


def load_settings(**overrides) -> StatusSettings:
    """Build settings from the environment, raising ``ConfigError`` on bad values."""
    try:
        return StatusSettings(**overrides)
    except ValidationError as exc:
        raise ConfigError(f"Invalid status settings: {exc}", cause=exc) from exc
