# src/rotaplan/dataloader/config_loader.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from rotaplan.errors import ConfigError
from rotaplan.schemas.models import Config, RegimeParameters

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


class ConfigLoader:
    """
    @brief
    Reads config.yaml and turns it into a validated Config.

    @details
    The regime section accepts snake_case field names as well as the camelCase
    names used by the configuration form (workDays, restDays, ...). Every
    failure mode (missing file, bad YAML, schema mismatch) surfaces as a
    structured ConfigError.
    """

    def load(self, path: Path | str) -> Config:
        """
        @brief
        Load and validate configuration from a YAML file.

        @params
            path : Path | str
                Location of config.yaml.

        @returns
            Config with defaults applied.

        @raises
            ConfigError
                On missing/unreadable file, YAML syntax error, empty or
                non-mapping content, or schema violations.
        """
        data = self._read_yaml(Path(path))
        cfg = self._validate(data)
        logger.info(
            "Config loaded from %s: N=%d, M=%d, I=%d, horizon=%d",
            path,
            cfg.regime.work_days,
            cfg.regime.rest_days,
            cfg.regime.induction_days,
            cfg.regime.total_days,
        )
        return cfg

    def load_regime(self, path: Path | str) -> RegimeParameters:
        """Shortcut returning only the regime section."""
        return self.load(path).regime

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        """
        @brief
        Read YAML file into a plain dict.

        @raises
            ConfigError
                On missing file, wrong extension, I/O or syntax error,
                empty file or non-mapping root.
        """
        # (1) Existence and extension
        if not path.is_file():
            raise ConfigError(
                message=f"Configuration file not found: {path}",
                source="ConfigLoader._read_yaml",
                suggested_action="Ensure config.yaml exists and the path is correct.",
            )
        if path.suffix.lower() not in _YAML_SUFFIXES:
            raise ConfigError(
                message=f"Invalid configuration file extension: {path.suffix}",
                source="ConfigLoader._read_yaml",
                suggested_action="Use .yaml or .yml extension for configuration files.",
            )

        # (2) Parse
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                message=f"YAML parsing failed: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Fix YAML syntax/indentation.",
            ) from e
        except OSError as e:
            raise ConfigError(
                message=f"Unable to read configuration file: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Check file permissions and path accessibility.",
            ) from e

        # (3) Root structure
        if data is None:
            raise ConfigError(
                message="Configuration file is empty.",
                source="ConfigLoader._read_yaml",
                suggested_action="Populate config.yaml with at least a 'regime' section.",
            )
        if not isinstance(data, Mapping):
            raise ConfigError(
                message="Configuration root must be a mapping (key: value pairs).",
                source="ConfigLoader._read_yaml",
                suggested_action="Ensure top-level YAML structure uses key: value mappings.",
            )
        return dict(data)

    def _validate(self, data: dict[str, Any]) -> Config:
        """
        @brief
        Validate the parsed mapping against the Config schema.

        @raises
            ConfigError
                Wrapping pydantic's ValidationError with field context.
        """
        try:
            return Config.model_validate(data)
        except ValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
            raise ConfigError(
                message=f"Invalid configuration structure: {', '.join(fields)}",
                source="ConfigLoader._validate",
                suggested_action=(
                    "Check field names, types, and bounds in config.yaml. "
                    "Remove unknown keys (extra fields are forbidden)."
                ),
            ) from e


__all__ = ["ConfigLoader"]
