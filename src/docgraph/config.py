"""Configuration for docgraph.

Settings come from an optional YAML file and are overridden by CLI options:
- entry_points: files or directories handed to the front end
- mode: "file" merges every file into one global scope, "modules" turns
  each file into its own module reflection
- exclude_*: filters applied while converting
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .core.errors import ConfigError


class LoggingSettings(BaseModel):
    level: str = Field(default="INFO", description="Log level for structlog output")
    json_format: bool = Field(default=False, description="Emit JSON log lines")


class Settings(BaseModel):
    """docgraph settings."""

    name: str = Field(default="Documentation", description="Name of the project reflection")
    entry_points: List[Path] = Field(
        default_factory=list,
        description="Source files or directories to document",
    )
    mode: Literal["file", "modules"] = Field(
        default="file",
        description="How files map onto the graph",
    )
    exclude_private: bool = Field(default=False, description="Drop private members")
    exclude_not_exported: bool = Field(
        default=False,
        description="Drop top-level declarations that are neither exported nor ambient",
    )
    exclude_externals: bool = Field(default=False, description="Skip files marked external")
    external_patterns: List[str] = Field(
        default_factory=list,
        description="Glob patterns (posix paths) of files whose declarations are external",
    )
    out: Path = Field(
        default_factory=lambda: Path("docs.json").resolve(),
        description="Where the serialized graph is written",
    )
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("entry_points", mode="before")
    def _coerce_entry_points(cls, value: List[str | Path] | str | Path) -> List[Path]:
        if isinstance(value, (str, Path)):
            value = [value]
        return [Path(item).expanduser() for item in value]

    @field_validator("out", mode="before")
    def _coerce_path(cls, value: str | Path) -> Path:
        return Path(value).expanduser().resolve()


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load configuration from YAML if provided, otherwise use defaults."""
    path = config_path or Path("docgraph.yaml")
    if not path.exists():
        if config_path is not None:
            raise ConfigError.parse_error(str(path), "file does not exist")
        return Settings()
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError.parse_error(str(path), str(exc)) from exc
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    try:
        return Settings(**data)
    except ValidationError as exc:
        first = exc.errors()[0]
        field_name = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
        raise ConfigError.invalid_value(field_name, first.get("msg", str(exc))) from exc
