from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class StorageConfig:
    data_root: Path


def get_storage_config() -> StorageConfig:
    root = os.getenv("DATA_ROOT", "./roi_data")
    return StorageConfig(data_root=Path(root).resolve())


@dataclass(frozen=True)
class CacheConfig:
    ttl_seconds: float = 300.0
    fetch_timeout_seconds: float | None = 5.0


def get_cache_config() -> CacheConfig:
    ttl = float(os.getenv("CONFIG_CACHE_TTL_SEC", "300"))
    timeout = os.getenv("CONFIG_FETCH_TIMEOUT_SEC", "5.0")
    # empty string disables the fetch timeout
    return CacheConfig(ttl_seconds=ttl, fetch_timeout_seconds=float(timeout) if timeout else None)


@dataclass(frozen=True)
class APIConfig:
    api_key: str | None = None
    rate_limit_n: int = 10
    rate_limit_window_sec: float = 1.0
    port: int = 8000


def get_api_config() -> APIConfig:
    return APIConfig(
        api_key=os.getenv("API_KEY") or None,
        rate_limit_n=int(os.getenv("RATE_LIMIT_N", "10")),
        rate_limit_window_sec=float(os.getenv("RATE_LIMIT_WINDOW_SEC", "1.0")),
        port=int(os.getenv("PORT", "8000")),
    )
