"""Google API credentials for the mailbox, spreadsheet and Drive export."""
from pathlib import Path
from typing import Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from spendflow.config.settings import get_settings
from spendflow.utils.exceptions import ConfigError
from spendflow.utils.logger import get_logger, get_home_dir

logger = get_logger()


def get_scopes() -> list:
    return list(get_settings().google_api_scopes)


def get_default_token_path() -> Path:
    home = get_home_dir()
    home.mkdir(parents=True, exist_ok=True)
    return home / get_settings().oauth_token_file


def get_credentials(
    service_account_path: Optional[str] = None,
    delegated_user: Optional[str] = None,
    oauth_client_secrets: Optional[str] = None,
    oauth_token_path: Optional[str] = None,
):
    """Resolve credentials, preferring a service account over OAuth.

    A service account only reaches Gmail through domain-wide delegation,
    so it acts as ``delegated_user`` when one is given. The OAuth token is
    cached as authorized-user JSON at ``oauth_token_path`` (or under the
    SpendFlow home directory).

    Raises:
        ConfigError: neither method is usable
    """
    if service_account_path and Path(service_account_path).is_file():
        return _service_account_credentials(service_account_path, delegated_user)
    if oauth_client_secrets:
        token_path = Path(oauth_token_path) if oauth_token_path else get_default_token_path()
        return _oauth_credentials(Path(oauth_client_secrets), token_path)
    raise ConfigError(
        "No authentication method configured; set service_account_path or oauth_client_secrets"
    )


def _service_account_credentials(path: str, delegated_user: Optional[str]):
    logger.info("Authenticating with service account")
    creds = service_account.Credentials.from_service_account_file(path, scopes=get_scopes())
    return creds.with_subject(delegated_user) if delegated_user else creds


def _oauth_credentials(client_secrets: Path, token_path: Path) -> Credentials:
    logger.info("Authenticating with OAuth client")
    creds = _read_token(token_path)
    if creds is not None and creds.valid:
        return creds

    if creds is not None and creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
        except RefreshError as e:
            logger.warning(f"Stored OAuth token could not be refreshed: {e}")
        else:
            _write_token(creds, token_path)
            return creds

    if not client_secrets.is_file():
        raise ConfigError(f"OAuth client secrets not found: {client_secrets}")
    logger.info("Opening browser for OAuth consent")
    flow = InstalledAppFlow.from_client_secrets_file(str(client_secrets), get_scopes())
    creds = flow.run_local_server(port=0)
    _write_token(creds, token_path)
    return creds


def _read_token(token_path: Path) -> Optional[Credentials]:
    if not token_path.is_file():
        return None
    try:
        return Credentials.from_authorized_user_file(str(token_path), get_scopes())
    except (OSError, ValueError) as e:
        # Unreadable cache; fall through to a fresh consent.
        logger.warning(f"Ignoring unreadable OAuth token {token_path}: {e}")
        return None


def _write_token(creds: Credentials, token_path: Path) -> None:
    token_path.parent.mkdir(parents=True, exist_ok=True)
    token_path.write_text(creds.to_json(), encoding="utf-8")
    logger.debug(f"Saved OAuth token to {token_path}")
