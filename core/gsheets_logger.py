"""
Google Sheets store for search history.

Persists history entries when running on Streamlit Cloud (where local
files are ephemeral).

Sheets structure:
- search-history-YYYY-MM-DD: Daily search history
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import gspread
from google.oauth2.service_account import Credentials

from core.history import HISTORY_COLUMNS, HistoryEntry
from core.structured_logging import get_logger

# Module-level logger
_logger = get_logger("core.gsheets_logger")


class GoogleSheetsHistoryStore:
    """
    Writes history entries to Google Sheets with daily sheet rotation.

    Each day gets its own sheet (tab) within the spreadsheet:
    - search-history-2026-10-18
    """

    name = "gsheets"

    SCOPES = [
        'https://www.googleapis.com/auth/spreadsheets',
        'https://www.googleapis.com/auth/drive'
    ]

    SHEET_PREFIX = "search-history"

    def __init__(
        self,
        spreadsheet_id: str,
        credentials_dict: Optional[Dict[str, Any]] = None,
        client=None,
    ):
        """
        Initialize the Google Sheets store.

        Args:
            spreadsheet_id: The Google Sheets spreadsheet ID
            credentials_dict: Service account credentials as a dict
            client: Pre-authorized gspread client (skips credentials)
        """
        self.spreadsheet_id = spreadsheet_id
        self.credentials_dict = credentials_dict
        self._client = client
        self._spreadsheet = None
        self._sheet_cache = {}  # Cache worksheet references

    def _get_client(self):
        """Get or create the gspread client."""
        if self._client is None:
            credentials = Credentials.from_service_account_info(
                self.credentials_dict,
                scopes=self.SCOPES
            )
            self._client = gspread.authorize(credentials)
        return self._client

    def _get_spreadsheet(self):
        """Get or open the spreadsheet."""
        if self._spreadsheet is None:
            client = self._get_client()
            self._spreadsheet = client.open_by_key(self.spreadsheet_id)
        return self._spreadsheet

    def _get_or_create_sheet(self, sheet_name: str, columns: List[str]):
        """Get existing sheet or create new one with headers."""
        if sheet_name in self._sheet_cache:
            return self._sheet_cache[sheet_name]

        spreadsheet = self._get_spreadsheet()

        try:
            worksheet = spreadsheet.worksheet(sheet_name)
        except gspread.WorksheetNotFound:
            worksheet = spreadsheet.add_worksheet(
                title=sheet_name,
                rows=1000,
                cols=len(columns)
            )
            worksheet.append_row(columns, value_input_option='RAW')

        self._sheet_cache[sheet_name] = worksheet
        return worksheet

    def _get_today_sheet_name(self) -> str:
        """Get sheet name for today."""
        return f"{self.SHEET_PREFIX}-{datetime.now().strftime('%Y-%m-%d')}"

    def write(self, entry: HistoryEntry) -> None:
        """Append one entry. Raises on failure; the history logger handles it."""
        worksheet = self._get_or_create_sheet(self._get_today_sheet_name(), HISTORY_COLUMNS)
        row = entry.to_row()
        # Cell limit is 50,000 characters
        row[3] = row[3][:50000]
        worksheet.append_row(row, value_input_option='RAW')


def create_gsheets_store(
    spreadsheet_id: Optional[str],
    credentials_dict: Optional[Dict[str, Any]],
) -> Optional[GoogleSheetsHistoryStore]:
    """
    Build the Google Sheets store if it is configured.

    Returns:
        GoogleSheetsHistoryStore, or None if spreadsheet/credentials
        are not configured
    """
    if not spreadsheet_id or not credentials_dict:
        _logger.info(
            "Google Sheets history not configured",
            extra={"event": "gsheets_disabled"},
        )
        return None

    return GoogleSheetsHistoryStore(spreadsheet_id, credentials_dict)
