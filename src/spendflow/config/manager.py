"""Run configuration loaded from YAML."""
import re
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from spendflow.config.settings import get_settings
from spendflow.utils.exceptions import ConfigError
from spendflow.utils.formatting import SUPPORTED_LOCALES
from spendflow.utils.logger import get_home_dir

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Config:
    """System configuration.

    Built once by the entry point and passed unchanged through a run.
    """
    search_query: str
    spreadsheet_id: str
    recipients: Tuple[str, ...]
    sheet_name: str = "Transactions"
    timezone: str = "America/Bogota"
    locale: str = "es"
    cc: Tuple[str, ...] = field(default_factory=tuple)
    sender_name: str = "SpendFlow Reports"
    parser: str = "debit_purchase"
    custom_pattern: Optional[str] = None
    allow_whole_amounts: bool = False
    category_label: str = "UNCATEGORIZED"
    merchant_categories_path: Optional[str] = None
    log_level: str = "INFO"
    # Authentication: use either service account OR OAuth
    service_account_path: Optional[str] = None
    delegated_user: Optional[str] = None
    oauth_client_secrets: Optional[str] = None
    oauth_token_path: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "recipients", _as_tuple(self.recipients))
        object.__setattr__(self, "cc", _as_tuple(self.cc))

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        known = {f for f in cls.__dataclass_fields__}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigError(f"Incomplete configuration: {e}") from e

    def to_dict(self) -> dict:
        data = asdict(self)
        data["recipients"] = list(self.recipients)
        data["cc"] = list(self.cc)
        return data


def _as_tuple(value) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    return tuple(str(part).strip() for part in value)


class ConfigManager:
    """Loads, saves and validates the run configuration."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_dir = get_home_dir()
        if config_file is None:
            config_file = self.config_dir / get_settings().config_file
        self.config_file = Path(config_file)

    def load_config(self) -> Optional[Config]:
        """Load configuration from YAML file, or None when it does not exist."""
        if not self.config_file.exists():
            return None

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load configuration: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration must be a mapping: {self.config_file}")
        return Config.from_dict(data)

    def save_config(self, config: Config) -> None:
        """Save configuration as YAML."""
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                yaml.safe_dump(config.to_dict(), f, allow_unicode=True, sort_keys=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration: {e}") from e

    def validate_config(self, config: Config) -> tuple[bool, str]:
        """Validate configuration values."""
        if not config.search_query or not config.search_query.strip():
            return False, "Search query is required"

        if not config.spreadsheet_id:
            return False, "Spreadsheet ID is required"

        if not config.sheet_name:
            return False, "Sheet name is required"

        if not config.recipients:
            return False, "At least one recipient is required"

        for address in (*config.recipients, *config.cc):
            if not EMAIL_PATTERN.match(address):
                return False, f"Invalid e-mail address: {address}"

        try:
            ZoneInfo(config.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            return False, f"Unknown timezone: {config.timezone}"

        if config.locale not in SUPPORTED_LOCALES:
            return False, f"Unsupported locale: {config.locale}"

        if not isinstance(config.log_level, str) or config.log_level.upper() not in LOG_LEVELS:
            return False, f"Invalid log level: {config.log_level}"

        from spendflow.transactions.parser import get_parser

        try:
            get_parser(config.parser, config.custom_pattern)
        except ConfigError as e:
            return False, str(e)

        has_service_account = config.service_account_path and Path(config.service_account_path).exists()
        has_oauth = config.oauth_client_secrets and Path(config.oauth_client_secrets).exists()

        if not has_service_account and not has_oauth:
            return False, "Either service account or OAuth client secrets is required"

        if has_service_account and not has_oauth and not config.delegated_user:
            return False, "Service account access to Gmail requires delegated_user"

        if config.merchant_categories_path and not Path(config.merchant_categories_path).exists():
            return False, f"Merchant categories file not found: {config.merchant_categories_path}"

        return True, "Configuration is valid"
