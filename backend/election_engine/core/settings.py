from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field


class Settings(BaseModel):
    registry_owner_id: str = Field(default="owner")
    vote_grace_seconds: int = Field(default=0, ge=0)
    event_log_path: Optional[str] = Field(default=None)
    audit_log_file: Optional[str] = Field(default="election_audit.log")
    jwt_secret: str = Field(default="your-secret-key")
    jwt_algorithm: str = Field(default="HS256")
    vote_rate_limit: str = Field(default="30/minute")


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name, default)
    if value == "":
        return None
    return value


def _load_settings() -> Settings:
    env = os.getenv
    owner = env("REGISTRY_OWNER_ID", "owner") or "owner"
    grace = int(env("VOTE_GRACE_SECONDS", "0") or "0")
    jwt_secret = env("JWT_SECRET", "your-secret-key") or "your-secret-key"
    jwt_algorithm = env("JWT_ALGORITHM", "HS256") or "HS256"
    rate_limit = env("VOTE_RATE_LIMIT", "30/minute") or "30/minute"
    return Settings(
        registry_owner_id=owner,
        vote_grace_seconds=grace,
        event_log_path=_env("EVENT_LOG_PATH"),
        audit_log_file=_env("AUDIT_LOG_FILE", "election_audit.log"),
        jwt_secret=jwt_secret,
        jwt_algorithm=jwt_algorithm,
        vote_rate_limit=rate_limit,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return _load_settings()


def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()


__all__ = ["Settings", "get_settings", "reload_settings"]
