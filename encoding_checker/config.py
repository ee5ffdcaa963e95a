from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Logging configuration
    log_level: str = "INFO"
    log_file_path: str = "logs/encoding_checker.log"
    log_retention_days: int = 30

    # Scanning
    read_chunk_size_kb: int = 64  # Bytes fed to the charset detector per call
    progress_log_interval_percent: int = 10  # Log a progress summary every N percent
    shutdown_timeout_seconds: float = 5.0  # Wait this long for a cancelled scan on shutdown

    # Preferences
    preferences_file_path: str = "preferences.json"
    default_file_masks: str = "*.txt\n*.cs\n*.py\n*.xml\n*.json"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(env_file="settings.env", extra="ignore")

    @property
    def log_directory(self) -> Path:
        return Path(self.log_file_path).parent

    @property
    def read_chunk_size(self) -> int:
        return max(1, self.read_chunk_size_kb) * 1024
