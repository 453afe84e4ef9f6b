from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from netlabel.core.exceptions import ConfigError
from netlabel.core.utils import env_str

CONFIG_ENV_VAR = "NETLABEL_CONFIG"


class SamplerConfig(BaseModel):
    sample_interval_seconds: float = 0.1
    history_depth: int = 10  # 0.1 * 10 = 1s of history

    @field_validator("sample_interval_seconds")
    @classmethod
    def _interval_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("sample_interval_seconds must be > 0")
        return v

    @field_validator("history_depth")
    @classmethod
    def _depth_min(cls, v: int) -> int:
        if v < 2:
            raise ValueError("history_depth must be >= 2")
        return v


class InterfaceConfig(BaseModel):
    source: Literal["procfs", "psutil"] = "procfs"
    proc_path: str = "/proc/net/dev"
    loopback_name: str = "lo"
    virtual_prefixes: list[str] = Field(
        default_factory=lambda: ["ifb", "lxdbr", "virbr", "br", "vnet", "tun", "tap"]
    )


class DisplayConfig(BaseModel):
    min_speed_bytes: float = 1024  # 1 KiB/s to bother showing anything
    hide_seconds: float = 1.0
    idle_text: str = "-"
    down_glyph: str = "↓"
    up_glyph: str = "↑"
    shared_idle_timestamp: bool = False

    @field_validator("min_speed_bytes", "hide_seconds")
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must be >= 0")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    log_dir: str | None = None


class UIConfig(BaseModel):
    enabled: bool = True


class AppConfig(BaseModel):
    sampler: SamplerConfig = Field(default_factory=SamplerConfig)
    interfaces: InterfaceConfig = Field(default_factory=InterfaceConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    ui: UIConfig = Field(default_factory=UIConfig)


def load_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed reading config yaml: {path}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")
    return raw


def load_config(config_path: str | Path | None = None) -> AppConfig:
    load_dotenv(override=False)
    if config_path is None:
        config_path = env_str(CONFIG_ENV_VAR)
    raw = load_yaml(Path(config_path)) if config_path else {}

    try:
        return AppConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
