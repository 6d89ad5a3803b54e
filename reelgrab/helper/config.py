"""
reelgrab settings, read from the environment (and reelgrab.env if present)
"""

import os
import sys
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

ENV_FILE = "reelgrab.env"
PUBLIC_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "public")


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _to_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return float(value)


def _split_csv(value: Optional[str], default: List[str]) -> List[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    python_bin: str = sys.executable
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "info"
    reload: bool = False
    chunk_size: int = 64 * 1024
    extractor_timeout: Optional[float] = None  # seconds, None waits forever
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    public_dir: str = PUBLIC_DIR
    ssl_keyfile: Optional[str] = None
    ssl_certfile: Optional[str] = None


def load_settings() -> Settings:
    """builds settings from the current environment"""
    load_dotenv(ENV_FILE)
    env = os.environ
    return Settings(
        python_bin=env.get("REELGRAB_PYTHON_BIN") or sys.executable,
        host=env.get("REELGRAB_HOST", "0.0.0.0"),
        port=int(env.get("REELGRAB_PORT", "3000")),
        log_level=env.get("REELGRAB_LOG_LEVEL", "info").lower(),
        reload=_to_bool(env.get("REELGRAB_RELOAD")),
        chunk_size=int(env.get("REELGRAB_CHUNK_SIZE", str(64 * 1024))),
        extractor_timeout=_to_float(env.get("REELGRAB_EXTRACTOR_TIMEOUT")),
        cors_origins=_split_csv(env.get("REELGRAB_CORS_ORIGINS"), ["*"]),
        public_dir=env.get("REELGRAB_PUBLIC_DIR") or PUBLIC_DIR,
        ssl_keyfile=env.get("SSL_KEYFILE"),
        ssl_certfile=env.get("SSL_CERTFILE"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """cached settings accessor, call get_settings.cache_clear() to re-read"""
    return load_settings()
