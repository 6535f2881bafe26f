"""Application configuration handling."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Mapping

import yaml
from pydantic import BaseModel, Field, field_validator

APP_VERSION = "1.0.0"
ENV_PREFIX = "VAGENT_"
DEFAULT_CONFIG_PATH = Path("~/.config/vector-agent/config.yaml")

_YAML_KEY_MAP: Mapping[tuple[str, ...], str] = {
    ("storage", "db_path"): "db_path",
    ("storage", "blob_dir"): "blob_dir",
    ("embeddings", "backend"): "embedding_backend",
    ("embeddings", "model"): "embedding_model",
    ("embeddings", "dim"): "embedding_dim",
    ("completion", "backend"): "completion_backend",
    ("completion", "model"): "completion_model",
    ("openai", "api_key"): "openai_api_key",
    ("chunking", "max_chunk_size_tokens"): "default_max_chunk_size_tokens",
    ("chunking", "chunk_overlap_tokens"): "default_chunk_overlap_tokens",
    ("retrieval", "max_results"): "default_max_results",
    ("retrieval", "score_threshold"): "default_score_threshold",
    ("web_search", "max_results"): "web_search_max_results",
    ("ingest", "workers"): "ingest_workers",
    ("ingest", "url_fetch_timeout"): "url_fetch_timeout",
    ("server", "cors_origins"): "cors_origins",
}


class Settings(BaseModel):
    """Runtime configuration loaded from YAML file and environment variables."""

    db_path: Path = Field(default=Path.home() / ".vector-agent" / "vagent.db")
    blob_dir: Path = Field(default=Path.home() / ".vector-agent" / "files")
    embedding_backend: Literal["hashed", "openai"] = "hashed"
    embedding_model: str = "text-embedding-ada-002"
    embedding_dim: int = Field(default=384, gt=0)
    completion_backend: Literal["extractive", "openai"] = "extractive"
    completion_model: str = "gpt-4"
    openai_api_key: str | None = None
    default_max_chunk_size_tokens: int = Field(default=1000, gt=0)
    default_chunk_overlap_tokens: int = Field(default=200, gt=0)
    default_max_results: int = Field(default=5, gt=0)
    default_score_threshold: float = 0.7
    web_search_max_results: int = Field(default=3, gt=0)
    ingest_workers: int = Field(default=4, gt=0)
    url_fetch_timeout: float = 30.0
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    model_config = {
        "validate_assignment": True,
        "extra": "ignore",
    }

    @field_validator("db_path", "blob_dir", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        if isinstance(value, Path):
            return value.expanduser()
        if isinstance(value, str):
            return Path(value).expanduser()
        raise TypeError("storage paths must be a path or string")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> "Settings":
        """Load YAML config and overlay env vars; fall back to defaults."""
        config_path = cls._resolve_config_path(path)
        data: dict[str, Any] = {}
        if config_path and config_path.exists():
            with config_path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
            data.update(_flatten_yaml(raw))
        data.update(_load_env_overrides())
        return cls(**data)

    @staticmethod
    def _resolve_config_path(path: Path | None) -> Path | None:
        if path is not None:
            return path.expanduser()
        env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
        if env_path:
            return Path(env_path).expanduser()
        resolved_default = DEFAULT_CONFIG_PATH.expanduser()
        return resolved_default if resolved_default.exists() else None


def _flatten_yaml(raw: Mapping[str, Any], prefix: tuple[str, ...] = ()) -> dict[str, Any]:
    """Flatten nested YAML configuration to Settings field names."""
    flat: dict[str, Any] = {}
    for key, value in raw.items():
        next_prefix = prefix + (key,)
        if isinstance(value, Mapping):
            flat.update(_flatten_yaml(value, prefix=next_prefix))
        else:
            mapped_key = _YAML_KEY_MAP.get(next_prefix)
            if mapped_key:
                flat[mapped_key] = value
            elif key in Settings.model_fields:
                flat[key] = value
    return flat


def _load_env_overrides() -> dict[str, Any]:
    """Map environment variables with VAGENT_ prefix into Settings fields."""
    overrides: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in Settings.model_fields:
            overrides[field_name] = value
    if "openai_api_key" not in overrides and os.environ.get("OPENAI_API_KEY"):
        overrides["openai_api_key"] = os.environ["OPENAI_API_KEY"]
    return overrides


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor for dependency injection."""
    return Settings.from_yaml()


__all__ = ["Settings", "get_settings"]
