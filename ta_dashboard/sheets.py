"""Google Sheets API client for reading the dashboard spreadsheet."""

import logging
from pathlib import Path
from typing import Any, Optional, Protocol

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from .config import Config
from .models import Tab

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]

CLIENT_SECRETS_PATH = Path(__file__).parent.parent / "config" / "credentials.json"


class TabularSource(Protocol):
    """Anything that can return every tab of a spreadsheet with its grid data."""

    def fetch_tabs(self, spreadsheet_id: str) -> list[Tab]: ...


def get_credentials(config: Config):
    """Get service account credentials, or get or refresh OAuth user credentials."""
    if config.credentials_file:
        key_path = Path(config.credentials_file)
        if not key_path.exists():
            raise FileNotFoundError(f"Service account key file not found: {key_path}")
        return service_account.Credentials.from_service_account_file(
            str(key_path), scopes=SCOPES
        )

    token_path = Path(config.token_file)
    creds = None

    if token_path.exists():
        creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)

    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            logger.info("Refreshing expired Sheets credentials")
            creds.refresh(Request())
        else:
            if not CLIENT_SECRETS_PATH.exists():
                raise FileNotFoundError(
                    f"Credentials file not found: {CLIENT_SECRETS_PATH}. "
                    "Set GOOGLE_APPLICATION_CREDENTIALS to a service account key, "
                    "or download credentials.json from Google Cloud Console."
                )
            logger.info("Starting OAuth flow for Sheets")
            flow = InstalledAppFlow.from_client_secrets_file(
                str(CLIENT_SECRETS_PATH), SCOPES
            )
            creds = flow.run_local_server(port=0)

        token_path.parent.mkdir(parents=True, exist_ok=True)
        with open(token_path, "w") as token:
            token.write(creds.to_json())
            logger.info(f"Saved Sheets credentials to {token_path}")

    return creds


def tabs_from_spreadsheet(payload: dict[str, Any]) -> list[Tab]:
    """Convert a spreadsheets.get response with grid data into tabs."""
    tabs = []
    for sheet in payload.get("sheets", []):
        title = sheet.get("properties", {}).get("title", "")
        grids = sheet.get("data") or [{}]
        rows = []
        for row_data in grids[0].get("rowData", []):
            values = row_data.get("values") or []
            rows.append([cell.get("formattedValue") for cell in values])
        tabs.append(Tab(title=title, rows=rows))
    return tabs


class SheetsSource:
    """Reads spreadsheets through the Sheets v4 API."""

    def __init__(self, credentials) -> None:
        self.credentials = credentials

    def fetch_tabs(self, spreadsheet_id: str) -> list[Tab]:
        service = build("sheets", "v4", credentials=self.credentials, cache_discovery=False)
        response = (
            service.spreadsheets()
            .get(spreadsheetId=spreadsheet_id, includeGridData=True)
            .execute()
        )
        tabs = tabs_from_spreadsheet(response)
        logger.info(f"Fetched {len(tabs)} tabs: {[tab.title for tab in tabs]}")
        return tabs


def build_source(config: Config) -> Optional[SheetsSource]:
    """Create a Sheets source, or None when credentials are missing or unusable."""
    try:
        creds = get_credentials(config)
    except (FileNotFoundError, ValueError, GoogleAuthError) as e:
        logger.warning(f"Google Sheets API unavailable: {e}")
        logger.info("Running in development mode with mock data")
        return None

    logger.info("Google Sheets API initialized successfully")
    return SheetsSource(creds)
