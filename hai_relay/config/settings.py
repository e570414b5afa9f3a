"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置。
默认值即上游中继的固定常量（端口、上游地址、切片大小等）。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("RELAY_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """中继服务配置。"""

    # ---- 监听 ----
    host: str = Field(default="0.0.0.0", description="监听地址")
    port: int = Field(default=8000, ge=1, le=65535, description="监听端口")

    # ---- 上游 ----
    upstream_base_url: str = Field(
        default="https://www.juchats.com",
        description="上游站点根地址，createDialog 与 completions 均基于此拼接",
    )
    http_timeout: float = Field(default=120.0, ge=1.0, description="HTTP 超时时间（秒）")

    # ---- 模型 ----
    default_model: str = Field(
        default="gpt-4o-mini",
        description="请求未携带 model 时使用的模型名，同时回显在响应中",
    )
    fallback_mode_id: int = Field(default=36, description="未知模型名回退的上游 modeId")

    # ---- 伪流式输出 ----
    stream_chunk_size: int = Field(default=50, ge=1, description="每个 SSE 分片的字符数")
    stream_chunk_delay: float = Field(default=0.05, ge=0.0, description="分片之间的停顿（秒）")

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_level: str = Field(default="INFO", description="日志级别")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("upstream_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
