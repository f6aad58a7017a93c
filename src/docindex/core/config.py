"""Configuration loading and validation."""

import logging
import os
from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ..indexing.models import DEFAULT_KIND_ORDER, EntryOrdering, ItemKind

logger = logging.getLogger(__name__)

OutputFormat = Literal["json", "sidebar-js"]


class DocIndexConfig(BaseSettings):
    """Settings for a sidebar index build."""
    output_dir: Path = Field(default=Path("target/doc"))
    output_format: OutputFormat = "sidebar-js"
    ordering: EntryOrdering = EntryOrdering.ALPHABETICAL
    # Kind tags in sidebar order; omitted kinds follow in default order.
    # NoDecode keeps DOCINDEX_KIND_ORDER a plain comma list rather than JSON.
    kind_order: Annotated[List[ItemKind], NoDecode] = Field(default_factory=lambda: list(DEFAULT_KIND_ORDER))
    combined_file_name: str = "sidebar-index.json"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="DOCINDEX_", env_file=".env", extra="ignore")

    @field_validator("kind_order", mode="before")
    @classmethod
    def parse_kind_order(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = [part for part in v.split(",") if part.strip()]
        if not isinstance(v, list):
            return v
        kinds = [ItemKind.parse(item) for item in v]
        if len(set(kinds)) != len(kinds):
            raise ValueError(f"kind_order lists a kind more than once: {v}")
        return kinds + [kind for kind in DEFAULT_KIND_ORDER if kind not in kinds]

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level: {v!r}")
        return level

    @field_validator("combined_file_name")
    @classmethod
    def validate_combined_file_name(cls, v: str) -> str:
        if not v or "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"combined_file_name must be a plain file name, got {v!r}")
        return v


def load_config(config_path: Path = Path("docindex.yaml")) -> DocIndexConfig:
    """Load build configuration from a YAML file.

    A missing file falls back to defaults (plus any DOCINDEX_* environment
    variables).
    """
    if not config_path.exists():
        logger.warning(
            f"Config file not found: {config_path}. Using default configuration."
        )
        return DocIndexConfig()

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")

    data = _expand_env_vars(data.get("docindex", data))
    return DocIndexConfig(**data)


def _expand_env_vars(data: Any, _path: str = "") -> Any:
    """Recursively expand ``${VAR}`` references in config data."""
    if isinstance(data, dict):
        return {k: _expand_env_vars(v, f"{_path}.{k}" if _path else k) for k, v in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item, f"{_path}[{i}]") for i, item in enumerate(data)]
    elif isinstance(data, str) and data.startswith("${") and data.endswith("}"):
        env_var = data[2:-1]
        value = os.environ.get(env_var)
        if value is None:
            logger.warning(
                f"Environment variable '{env_var}' not set (referenced at config path: {_path or 'root'}). "
                f"The literal string '{data}' will be used."
            )
            return data
        return value
    return data


def config_summary(config: DocIndexConfig) -> Dict[str, str]:
    """Flatten the effective settings for display."""
    return {
        "output_dir": str(config.output_dir),
        "output_format": config.output_format,
        "ordering": config.ordering.value,
        "kind_order": ",".join(kind.value for kind in config.kind_order),
        "combined_file_name": config.combined_file_name,
        "log_level": config.log_level,
    }
