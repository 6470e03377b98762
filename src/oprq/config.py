"""Project configuration (``oprq.config.json``) and per-run generation settings."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .parser.base import OprqError

CONFIG_FILE_NAME = "oprq.config.json"


class ConfigError(OprqError):
    """Raised when the config file cannot be read or validated.

    ``kind`` is one of ``not_found``, ``parse_error``, ``permission_denied``,
    ``invalid`` or ``unknown``.
    """

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind


class LibraryVersion(str, Enum):
    V3 = "v3"
    V4 = "v4"
    V5 = "v5"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class GenerateFlags(_CamelModel):
    query_hook: bool = Field(default=True, alias="queryHook")
    mutation_hook: bool = Field(default=True, alias="mutationHook")
    suspense_hook: bool = Field(default=False, alias="suspenseHook")
    infinite_query_hook: bool = Field(default=False, alias="infiniteQueryHook")


class GenerationConfig(GenerateFlags):
    """Hook flags plus the target React Query version and import path. Read-only to the core."""

    library_version: LibraryVersion = Field(default=LibraryVersion.V5, alias="libraryVersion")
    import_path: str | None = Field(default=None, alias="importPath")


class SpecConfig(_CamelModel):
    url: str
    description: str | None = None


class ReactQuerySettings(_CamelModel):
    version: LibraryVersion | None = None
    import_path: str | None = Field(default=None, alias="importPath")


class ProjectConfig(_CamelModel):
    """The contents of ``oprq.config.json``. Unknown keys are preserved."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    output_path: str | None = Field(default=None, alias="outputPath")
    react_query_version: LibraryVersion | None = Field(default=None, alias="reactQueryVersion")
    react_query: ReactQuerySettings = Field(default_factory=ReactQuerySettings, alias="reactQuery")
    generate: GenerateFlags = Field(default_factory=GenerateFlags)
    specs: dict[str, SpecConfig] = {}

    @property
    def library_version(self) -> LibraryVersion | None:
        return self.react_query_version or self.react_query.version

    def generation_config(self, **overrides) -> GenerationConfig:
        """Build the per-run config; ``None`` overrides are ignored."""
        values = self.generate.model_dump()
        if self.library_version is not None:
            values["library_version"] = self.library_version
        if self.react_query.import_path:
            values["import_path"] = self.react_query.import_path
        values.update({k: v for k, v in overrides.items() if v is not None})
        return GenerationConfig(**values)


def get_config_path(cwd: Path | None = None) -> Path:
    return (cwd or Path.cwd()) / CONFIG_FILE_NAME


def load_config(config_path: Path) -> ProjectConfig:
    """Load and validate a config file, raising ConfigError with a kind on failure."""
    try:
        content = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigError("not_found", f"{config_path.name} not found") from e
    except PermissionError as e:
        raise ConfigError("permission_denied", f"Permission denied: {config_path}") from e
    except OSError as e:
        raise ConfigError("unknown", str(e)) from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError("parse_error", f"Invalid JSON in {config_path.name}") from e

    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError("invalid", f"Invalid {config_path.name}: {e}") from e


def load_config_or_default(config_path: Path) -> ProjectConfig:
    """Like load_config, but a missing file yields the defaults."""
    try:
        return load_config(config_path)
    except ConfigError as e:
        if e.kind != "not_found":
            raise
        return ProjectConfig()
