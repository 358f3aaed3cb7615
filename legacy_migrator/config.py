"""
Configuration for the legacy content converter.

Settings live in a JSON file (``config/migration_config.json`` by default)
with three sections::

    {
      "converter": {"canonical_base_url": "https://www.example.com", ...},
      "tables": {"products_csv": "...", "site_tree_csv": "..."},
      "migration": {"content_column": "Content", "id_column": "ID", ...}
    }

Missing keys are filled with defaults the same way the migration tool has
always done it (``setdefault`` on the loaded dict), then the ``converter``
section is validated into :class:`ConverterConfig`.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_CONFIG_FILE = os.path.join("config", "migration_config.json")
DEFAULT_BASE_URL = "https://www.example.com"


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or is invalid."""
    pass


class ConverterConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    canonical_base_url: str = DEFAULT_BASE_URL
    heading_style_limit: Literal[1, 2] = 1
    drop_column_break_marker: bool = False
    primary_heading_style: str = "h2"
    secondary_heading_style: str = "h3"
    site_hosts: List[str] = Field(default_factory=list)

    @field_validator("canonical_base_url")
    @classmethod
    def _absolute_base(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("canonical_base_url must be an absolute http(s) URL")
        return v.rstrip("/")


def apply_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Fill every section of a raw config dict with its defaults, in place."""
    config.setdefault("converter", {})
    config["converter"].setdefault("canonical_base_url", os.getenv("LEGACY_BASE_URL", DEFAULT_BASE_URL))
    config["converter"].setdefault("heading_style_limit", 1)
    config["converter"].setdefault("drop_column_break_marker", False)

    config.setdefault("tables", {})
    config["tables"].setdefault("products_csv", os.path.join("csv", "products", "product-brand-slug-map.csv"))
    config["tables"].setdefault("site_tree_csv", os.path.join("csv", "products", "sitetree-map.csv"))

    config.setdefault("migration", {})
    config["migration"].setdefault("content_column", "Content")
    config["migration"].setdefault("id_column", "ID")
    config["migration"].setdefault("output_dir", os.path.join("reports", "converted"))
    config["migration"].setdefault("limit", None)
    return config


def load_config(config_file: Optional[str] = None, *, required: bool = False) -> Dict[str, Any]:
    """
    Load a raw config dict from ``config_file`` and apply defaults.

    A missing file yields the defaults unless ``required`` is set.

    :raises ConfigError: if the file is required but missing, is not valid
        JSON, or its ``converter`` section fails validation.
    """
    path = config_file or DEFAULT_CONFIG_FILE
    config: Dict[str, Any] = {}
    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Could not decode {path}: {e}") from e
        if not isinstance(config, dict):
            raise ConfigError(f"{path} must contain a JSON object")
    elif required:
        raise ConfigError(f"Config file not found: {path}")

    apply_defaults(config)
    converter_config(config)
    return config


def converter_config(config: Dict[str, Any]) -> ConverterConfig:
    """Validate the ``converter`` section of a raw config dict."""
    try:
        return ConverterConfig(**config.get("converter", {}))
    except ValidationError as e:
        raise ConfigError(f"Invalid converter configuration: {e}") from e
