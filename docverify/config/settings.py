"""
Application Settings.

Centraliza toda configuração via .env / variáveis de ambiente.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configurações carregadas de variáveis de ambiente."""

    # --- App ---
    env: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    log_json: bool = False

    # --- Database ---
    database_url: str = "sqlite+aiosqlite:///docverify.db"

    # --- Object Storage (S3 / MinIO) ---
    storage_endpoint_url: str | None = None      # None = AWS S3
    storage_access_key: str = ""
    storage_secret_key: str = ""
    storage_region: str = "us-east-1"
    storage_container: str = "documents"

    # --- Analysis (Gemini) ---
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    analysis_min_confidence: float = 0.7
    analysis_timeout_seconds: float = 60.0

    # --- Upload ---
    upload_allowed_content_types: list[str] = ["application/pdf", "image/jpeg", "image/png"]
    upload_max_file_size_bytes: int = 10 * 1024 * 1024
    upload_max_file_size_by_type: dict[str, int] = {}

    # --- Auth ---
    admin_roles: list[str] = ["admin", "system-admin"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    """Singleton de settings."""
    return Settings()
