"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "campus_placement"

    # "mongo" for the document database, "memory" for local runs and tests
    store_backend: str = "mongo"

    # JWT Auth
    jwt_secret_key: str = "campus-placement-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # Accept any password at login (demo deployments only)
    demo_login: bool = False

    # Web3Forms email relay
    web3forms_key: str = ""
    web3forms_url: str = "https://api.web3forms.com/submit"
    notification_from_name: str = "Campus Placement Cell"
    notification_reply_to: str = "no-reply@campus-portal.local"
    notification_timeout_seconds: float = 10.0

    # Business rules
    audit_log_limit: int = 1000
    enforce_application_cap: bool = True

    # App
    cors_origins: List[str] = ["http://localhost:3000"]
    log_level: str = "INFO"
    debug: bool = True

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
