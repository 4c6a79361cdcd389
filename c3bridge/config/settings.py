"""Settings model with automatic environment variable support."""

import os
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from c3bridge.core.errors import ConfigError
from c3bridge.models.toolchain import ToolchainVersion


DEFAULT_MIN_VERSION = "0.6.0"

# Ambient variables the compiler process may inherit
DEFAULT_ENV_ALLOWLIST = (
    "PATH",
    "HOME",
    "TMPDIR",
    "TEMP",
    "TMP",
    "SYSTEMROOT",
    "LANG",
    "LC_ALL",
)

DIRECTIVE_FORMATS = ("cargo", "flags", "json")


def _default_cache_path() -> Path:
    if "XDG_CACHE_HOME" in os.environ:
        return Path(os.environ["XDG_CACHE_HOME"]) / "c3bridge"
    return Path.home() / ".cache" / "c3bridge"


class C3BridgeSettings(BaseSettings):
    """c3bridge settings.

    Precedence order (highest to lowest):
    1. Environment variables (``C3BRIDGE_*``)
    2. Constructor arguments (config file data)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="C3BRIDGE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Environment variables override file configuration."""
        return (env_settings, init_settings, file_secret_settings)

    compiler_path: Path | None = Field(
        default=None,
        description="Explicit path to the c3c executable (skips discovery)",
    )
    min_version: str = Field(
        default=DEFAULT_MIN_VERSION,
        description="Minimum supported c3c version",
    )
    log_level: str = "WARNING"

    cache_path: Path = Field(
        default_factory=_default_cache_path,
        description="Directory for the compilation cache index",
    )
    cache_strategy: str = Field(
        default="shared",
        description="Cache strategy: 'shared' (persistent) or 'disabled'",
    )
    cache_ttl_hours: int = Field(default=24 * 7, ge=1)

    directive_format: str = Field(
        default="cargo",
        description="Linkage directive format: 'cargo', 'flags' or 'json'",
    )
    env_allowlist: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Extra environment variables passed through to c3c",
    )
    output_dir: Path | None = Field(
        default=None,
        description="Default artifact directory (falls back to $OUT_DIR, then ./build)",
    )
    build_log: bool = Field(
        default=False,
        description="Write compiler output to <output_dir>/<name>.build.log",
    )

    @field_validator("env_allowlist", mode="before")
    @classmethod
    def decode_env_allowlist(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            return [name.strip() for name in v.split(",") if name.strip()]
        if isinstance(v, list | tuple):
            return [str(name).strip() for name in v if str(name).strip()]
        return []

    @field_validator("min_version")
    @classmethod
    def validate_min_version(cls, v: str) -> str:
        if ToolchainVersion.parse(v) is None:
            raise ValueError(f"Invalid minimum version: {v!r}")
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a recognized value."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        upper_v = v.strip().upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return upper_v

    @field_validator("cache_strategy")
    @classmethod
    def validate_cache_strategy(cls, v: str) -> str:
        lower_v = v.strip().lower()
        if lower_v not in ("shared", "disabled"):
            raise ValueError("Cache strategy must be 'shared' or 'disabled'")
        return lower_v

    @field_validator("directive_format")
    @classmethod
    def validate_directive_format(cls, v: str) -> str:
        lower_v = v.strip().lower()
        if lower_v not in DIRECTIVE_FORMATS:
            raise ValueError(f"Directive format must be one of {list(DIRECTIVE_FORMATS)}")
        return lower_v

    @property
    def minimum_version(self) -> ToolchainVersion:
        version = ToolchainVersion.parse(self.min_version)
        if version is None:
            raise ConfigError(f"Invalid minimum compiler version: {self.min_version!r}")
        return version

    def default_output_dir(self) -> Path:
        """Configured output dir, else cargo's ``OUT_DIR``, else ``./build``."""
        if self.output_dir is not None:
            return self.output_dir
        out_dir = os.environ.get("OUT_DIR")
        if out_dir:
            return Path(out_dir)
        return Path.cwd() / "build"
