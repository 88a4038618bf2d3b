"""Configuration system for protowire.

Uses pydantic-settings for declarative, layered configuration:
init kwargs -> environment variables (PROTOWIRE_*) -> .env file -> field defaults.

Per-call overrides passed to the decode entry points are applied via
resolve_config(), which creates a new config instance without mutating the
defaults. Only the decoder settings may be overridden per call.
"""

from __future__ import annotations

import functools
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from protowire.exceptions import ConfigValidationError

# Fields that can be overridden for a single decode call.
_PER_CALL_FIELDS: frozenset[str] = frozenset(
    {
        "max_recursion_depth",
        "validate_utf8",
        "discard_unknown_fields",
    }
)

# All known config field names (populated after class definition).
_ALL_FIELDS: frozenset[str] = frozenset()


class CodecConfig(BaseSettings):
    """Configuration for protowire.

    Resolution order: init kwargs -> env vars (PROTOWIRE_*) -> .env file -> defaults.

    Fields are divided into two groups:
    - **Decoder**: recursion limit, UTF-8 validation and unknown-field
      handling, overridable per call.
    - **Infrastructure**: I/O chunk size, program name and trace logging,
      NOT overridable per call. Trace settings are read once when a
      :class:`~protowire.logging.CodecLogger` is built.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROTOWIRE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Infrastructure (NOT per-call overridable) ---

    read_chunk_size: int = Field(
        default=65536,
        gt=0,
        description="Bytes requested per read() when draining a stream",
    )
    program_name: str = Field(
        default="protowire",
        description="Prefix for lines written to stderr",
    )

    # --- Decoder (per-call overridable) ---

    max_recursion_depth: int = Field(
        default=100,
        gt=0,
        description="Maximum nesting of length-delimited sub-messages on decode",
    )
    validate_utf8: bool = Field(
        default=True,
        description="Reject string fields that are not valid UTF-8",
    )
    discard_unknown_fields: bool = Field(
        default=False,
        description="Drop undeclared fields on decode instead of preserving them",
    )

    # --- Logging (NOT per-call overridable) ---

    log_level: str = Field(
        default="none",
        description="Codec trace verbosity: 'none', 'summary', 'full'",
    )
    diagnostic_mode: bool = Field(
        default=False,
        description="Store all codec records in memory for analysis",
    )


_ALL_FIELDS = frozenset(CodecConfig.model_fields.keys())


@functools.lru_cache(maxsize=1)
def default_config() -> CodecConfig:
    """Return the process-wide config loaded from the environment (cached)."""
    return CodecConfig()


def validate_overrides(overrides: dict[str, Any]) -> None:
    """Validate override keys without creating a config.

    Args:
        overrides: Mapping of config field names to new values.

    Raises:
        ConfigValidationError: If any key is unknown or non-overridable.
    """
    for key in overrides:
        if key not in _ALL_FIELDS:
            raise ConfigValidationError(f"Unknown config field: '{key}'")
        if key not in _PER_CALL_FIELDS:
            raise ConfigValidationError(
                f"Field '{key}' is an infrastructure field and cannot be "
                f"overridden per call"
            )


def resolve_config(
    defaults: CodecConfig,
    overrides: dict[str, Any] | None,
) -> CodecConfig:
    """Create a new config instance merging defaults with per-call overrides.

    Args:
        defaults: The base configuration loaded from environment.
        overrides: Per-call overrides keyed by field name.

    Returns:
        A new CodecConfig with overrides applied, or *defaults* itself when
        there is nothing to override.

    Raises:
        ConfigValidationError: If any key is unknown or non-overridable.
    """
    if not overrides:
        return defaults

    validate_overrides(overrides)

    # model_copy(update=...) skips validation; model_validate coerces types.
    merged = defaults.model_dump()
    merged.update(overrides)
    return CodecConfig.model_validate(merged)
