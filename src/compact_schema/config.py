"""Typed settings for compact schema generation.

Settings are read from ``COMPACT_SCHEMA_*`` environment variables through
``pydantic_settings.BaseSettings``. An optional TOML file supplies values too:
either a standalone ``compact_schema.toml`` or the ``[tool.compact-schema]``
table of a ``pyproject.toml``. Values from the file are passed as explicit
arguments and therefore take precedence over the environment.
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Final, cast

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from compact_schema.errors import ConfigurationError
from compact_schema.extract import PROTOCOL_PROPERTIES
from compact_schema.logging import get_logger
from compact_schema.models import LabelPolicy

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "CompactSchemaSettings",
    "load_settings",
    "resolve_config_path",
]

LOGGER = get_logger(__name__)

DEFAULT_CONFIG_PATH: Final = Path("compact_schema.toml")
_PYPROJECT: Final = "pyproject.toml"
_PYPROJECT_TABLE: Final = ("tool", "compact-schema")
_ENV_CONFIG: Final = "COMPACT_SCHEMA_CONFIG"


class CompactSchemaSettings(BaseSettings):
    """Runtime configuration for the compact schema engine and CLI."""

    model_config = SettingsConfigDict(
        env_prefix="COMPACT_SCHEMA_", case_sensitive=False, extra="ignore", frozen=True
    )

    label_policy: LabelPolicy = Field(
        default=LabelPolicy.LABELED,
        description="Render parameters as 'label: Type' (labeled) or 'Type' (positional)",
    )
    excluded_properties: Annotated[tuple[str, ...], NoDecode] = Field(
        default=tuple(sorted(PROTOCOL_PROPERTIES)),
        description="Stored property names never emitted in struct schemas",
    )
    log_level: str = Field(default="WARNING", description="Threshold for CLI logging")
    log_json: bool = Field(default=False, description="Emit CLI logs as JSON lines")

    @field_validator("excluded_properties", mode="before")
    @classmethod
    def _normalise_excluded(cls, value: object) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        if isinstance(value, (list, tuple, set, frozenset)):
            return tuple(str(part).strip() for part in value if str(part).strip())
        message = "excluded_properties must be a comma-separated string or sequence"
        raise ValueError(message)

    @field_validator("log_level", mode="after")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            message = f"Unknown log level {value!r}"
            raise ValueError(message)
        return level


def _read_toml(path: Path) -> dict[str, object]:
    try:
        with path.open("rb") as stream:
            return cast("dict[str, object]", tomllib.load(stream))
    except OSError as exc:
        message = f"Cannot read config file {path}"
        raise ConfigurationError(message, context={"path": str(path)}) from exc
    except tomllib.TOMLDecodeError as exc:
        message = f"Malformed TOML in {path}: {exc}"
        raise ConfigurationError(message, context={"path": str(path)}) from exc


def _config_table(path: Path) -> dict[str, object]:
    data = _read_toml(path)
    if path.name != _PYPROJECT:
        return data
    table: object = data
    for key in _PYPROJECT_TABLE:
        table = table.get(key, {}) if isinstance(table, Mapping) else {}
    return dict(cast("Mapping[str, object]", table)) if isinstance(table, Mapping) else {}


def resolve_config_path(start: Path | None = None) -> Path | None:
    """Find a config file, honouring ``COMPACT_SCHEMA_CONFIG`` first.

    Walks up from ``start`` (defaults to the working directory) looking for
    ``compact_schema.toml``, then for a ``pyproject.toml`` that carries a
    ``[tool.compact-schema]`` table.
    """
    env_override = os.environ.get(_ENV_CONFIG)
    if env_override:
        return Path(env_override).expanduser()
    current = (start or Path.cwd()).resolve()
    for directory in [current, *current.parents]:
        candidate = directory / DEFAULT_CONFIG_PATH
        if candidate.exists():
            return candidate
        pyproject = directory / _PYPROJECT
        if pyproject.exists() and _config_table(pyproject):
            return pyproject
    return None


def load_settings(path: Path | None = None, **overrides: object) -> CompactSchemaSettings:
    """Load settings from the environment, a config file and ``overrides``.

    Parameters
    ----------
    path : Path | None, optional
        Config file to read. When omitted, :func:`resolve_config_path` decides.
    **overrides : object
        Explicit values that win over both the file and the environment.

    Returns
    -------
    CompactSchemaSettings
        Validated settings.

    Raises
    ------
    ConfigurationError
        If the file cannot be read or validation fails. The error carries the
        validation details in its context.
    """
    config_path = path if path is not None else resolve_config_path()
    values: dict[str, object] = {}
    if config_path is not None:
        LOGGER.debug("Loading compact schema config from %s", config_path)
        table = _config_table(config_path)
        values.update({key.replace("-", "_"): value for key, value in table.items()})
    values.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return CompactSchemaSettings(**values)  # type: ignore[arg-type]
    except ValidationError as exc:
        errors = [
            {"loc": ".".join(str(part) for part in error["loc"]), "msg": error["msg"]}
            for error in exc.errors()
        ]
        message = "Failed to load compact schema settings"
        context: dict[str, object] = {"errors": errors}
        if config_path is not None:
            context["path"] = str(config_path)
        raise ConfigurationError(message, context=context) from exc
