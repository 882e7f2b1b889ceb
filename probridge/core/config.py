from __future__ import annotations

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

ApiType = Literal["classic", "open"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # app
    log_level: str = "INFO"
    app_env: str = "dev"
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # backend selection
    api_type: ApiType = "open"

    # ProPresenter
    propresenter_host: str = "127.0.0.1"
    propresenter_port: int = 50001
    propresenter_base_path: str = ""
    propresenter_base_url: Optional[str] = None

    # public base for slide thumbnails (the browser fetches them directly)
    public_thumbnail_base_url: Optional[str] = None

    # http
    request_timeout_s: float = 10.0

    # retry (fixed delay, no growth)
    connect_retry_delay_s: float = 1.0
    stream_retry_delay_s: float = 2.0
    authenticate_delay_s: float = 0.1

    # presentation thumbnails
    slide_quality: str = "200"
    stream_slide_quality: str = "300"

    # polling
    clock_poll_interval_s: float = 1.0
    slide_index_poll_enabled: bool = False
    slide_index_poll_interval_s: float = 1.0


def resolve_base_url(s: Settings) -> str:
    """
    Explicit base URL wins; otherwise host:port plus an optional path prefix
    (reverse-proxy / ingress deployments).
    """
    if s.propresenter_base_url:
        return s.propresenter_base_url.rstrip("/")

    prefix = s.propresenter_base_path.strip()
    if prefix and not prefix.startswith("/"):
        prefix = "/" + prefix
    return f"http://{s.propresenter_host}:{s.propresenter_port}{prefix.rstrip('/')}"


def resolve_classic_url(s: Settings) -> str:
    return f"ws://{s.propresenter_host}:{s.propresenter_port}/remote"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
