"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Case Register settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        stt_provider: Which recognition backend to use ("google").
        google_credentials_path: Service-account JSON for Google Speech-to-Text.
        max_upload_bytes: Upper bound for a single uploaded audio file.
        storage_path: JSON file backing the client-side local storage.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Speech recognition ---
    stt_provider: str = "google"
    google_credentials_path: str = "google-credentials.json"
    speech_language_code: str = "te-IN"  # Telugu
    speech_model: str = "default"
    speech_use_enhanced: bool = True
    speech_enable_punctuation: bool = True
    speech_sample_rate: int = 16000  # Must match the converter output

    # --- Upload handling ---
    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MiB
    upload_dir: str = "data/uploads"  # Per-request temp files live here

    # --- Application ---
    app_host: str = "0.0.0.0"  # Bind address for the FastAPI server
    app_port: int = 3001
    log_level: str = "INFO"  # Python logging level
    cors_origins: list[str] = [
        "http://localhost:8501",  # Streamlit
        "http://localhost:3000",  # Dev frontend
    ]

    # --- Client ---
    api_base_url: str = "http://localhost:3001"
    api_timeout: float = 30.0  # Seconds before the client gives up waiting
    continuous_mode: bool = False  # Restart recording after each transcription

    # --- Local storage ---
    storage_path: str = "data/local_storage.json"
    exports_dir: str = "data/exports"  # .docx output for non-browser callers


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()
