"""RunctlSettings: CLI flags, ``RUNCTL_*`` env vars and runctl.toml merged.

Precedence, highest first: CLI flags, environment, TOML, model defaults.
Nested env overrides use ``__`` (``RUNCTL_RUNTIME__ADDRESS=...``).
"""

from __future__ import annotations

import logging
import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from runctl.config.discovery import resolve_config_path
from runctl.config.models import LocalConfig, RuntimeConfig

logger = logging.getLogger(__name__)

TOML_SECTIONS = frozenset({"runtime", "local"})


def load_toml(path: Path | None) -> dict[str, Any]:
    """Parse *path*, keeping only the known sections.

    Raises:
        click.ClickException: The file is not valid TOML.
    """
    if path is None or not path.is_file():
        return {}
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc
    unknown = sorted(set(data) - TOML_SECTIONS)
    if unknown:
        logger.warning("Ignoring unknown sections in %s: %s", path, ", ".join(unknown))
    return {key: value for key, value in data.items() if key in TOML_SECTIONS}


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by an already-parsed runctl.toml."""

    def __init__(self, settings_cls: type[BaseSettings], data: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._data = data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Parsed TOML for the settings object under construction.
_pending = threading.local()


class RunctlSettings(BaseSettings):
    """Frozen settings for one runctl invocation.

    Attributes:
        config_path: The runctl.toml that was loaded, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "RUNCTL_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    local: LocalConfig = Field(default_factory=LocalConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml_data = getattr(_pending, "toml", None) or {}
        return init_settings, env_settings, TomlSettingsSource(settings_cls, toml_data)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> RunctlSettings:
        """Build settings for a CLI invocation.

        *config_path* (``--config``) wins over discovery from *start*;
        *cli_flags* override everything else.
        """
        toml_path = resolve_config_path(config_path, start)
        _pending.toml = load_toml(toml_path)
        try:
            return cls(config_path=toml_path, **cli_flags)
        finally:
            _pending.toml = None
