"""Application settings loader from YAML configuration."""
import yaml
from pathlib import Path
from dataclasses import dataclass


@dataclass
class AppSettings:
    """Application-wide settings loaded from settings.yaml."""

    # App info
    app_name: str
    app_version: str

    # Logging
    log_level: str
    log_max_file_size_mb: int
    log_backup_count: int

    # Retry
    retry_max_retries: int
    retry_initial_delay_seconds: int
    retry_backoff_factor: int

    # Categorizer
    fuzzy_match_threshold: int

    # Paths, relative to the SpendFlow home directory
    config_file: str
    oauth_token_file: str

    # Google API
    google_api_scopes: list

    @classmethod
    def load(cls, config_path: Path = None) -> "AppSettings":
        """Load settings from YAML file."""
        if config_path is None:
            config_path = Path(__file__).parent / "settings.yaml"

        if not config_path.exists():
            raise FileNotFoundError(f"Settings file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)

        return cls(
            app_name=config["app"]["name"],
            app_version=config["app"]["version"],
            log_level=config["logging"]["level"],
            log_max_file_size_mb=config["logging"]["max_file_size_mb"],
            log_backup_count=config["logging"]["backup_count"],
            retry_max_retries=config["retry"]["max_retries"],
            retry_initial_delay_seconds=config["retry"]["initial_delay_seconds"],
            retry_backoff_factor=config["retry"]["backoff_factor"],
            fuzzy_match_threshold=config["categorizer"]["fuzzy_match_threshold"],
            config_file=config["paths"]["config_file"],
            oauth_token_file=config["paths"]["oauth_token_file"],
            google_api_scopes=config["google_api"]["scopes"]
        )


# Global settings instance
_settings: AppSettings = None


def get_settings() -> AppSettings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings.load()
    return _settings
