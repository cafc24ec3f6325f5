"""
Tests for the Google Sheets history store.

The gspread client is mocked; no network access.
"""

from unittest.mock import Mock

import gspread
import pytest

from core.gsheets_logger import GoogleSheetsHistoryStore, create_gsheets_store
from core.history import HISTORY_COLUMNS, HistoryEntry


@pytest.fixture
def worksheet():
    return Mock()


@pytest.fixture
def spreadsheet(worksheet):
    spreadsheet = Mock()
    spreadsheet.worksheet.return_value = worksheet
    return spreadsheet


@pytest.fixture
def client(spreadsheet):
    client = Mock()
    client.open_by_key.return_value = spreadsheet
    return client


@pytest.fixture
def store(client):
    return GoogleSheetsHistoryStore("sheet-123", client=client)


class TestGoogleSheetsHistoryStore:
    """Test writing entries to daily tabs."""

    def test_write_appends_row(self, store, client, worksheet):
        store.write(HistoryEntry(query="tents", user_id="u1", results='{"count": 0}', timestamp="ts"))

        client.open_by_key.assert_called_once_with("sheet-123")
        worksheet.append_row.assert_called_once_with(
            ["ts", "u1", "tents", '{"count": 0}'], value_input_option='RAW'
        )

    def test_daily_sheet_name(self, store, spreadsheet):
        store.write(HistoryEntry(query="tents", timestamp="ts"))
        sheet_name = spreadsheet.worksheet.call_args[0][0]
        assert sheet_name.startswith("search-history-")
        assert sheet_name == store._get_today_sheet_name()

    def test_creates_missing_sheet_with_headers(self, store, spreadsheet):
        new_sheet = Mock()
        spreadsheet.worksheet.side_effect = gspread.WorksheetNotFound("missing")
        spreadsheet.add_worksheet.return_value = new_sheet

        store.write(HistoryEntry(query="tents", timestamp="ts"))

        assert spreadsheet.add_worksheet.call_args.kwargs["cols"] == len(HISTORY_COLUMNS)
        assert new_sheet.append_row.call_args_list[0][0][0] == HISTORY_COLUMNS
        assert new_sheet.append_row.call_count == 2

    def test_worksheet_cached(self, store, spreadsheet):
        store.write(HistoryEntry(query="a", timestamp="ts"))
        store.write(HistoryEntry(query="b", timestamp="ts"))
        assert spreadsheet.worksheet.call_count == 1

    def test_long_results_truncated(self, store, worksheet):
        store.write(HistoryEntry(query="tents", results="x" * 60000, timestamp="ts"))
        row = worksheet.append_row.call_args[0][0]
        assert len(row[3]) == 50000

    def test_write_errors_propagate(self, store, worksheet):
        worksheet.append_row.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(RuntimeError):
            store.write(HistoryEntry(query="tents", timestamp="ts"))


class TestCreateGsheetsStore:
    """Test the configuration helper."""

    @pytest.mark.parametrize("spreadsheet_id,credentials", [
        (None, {"type": "service_account"}),
        ("sheet-123", None),
        ("", {}),
    ])
    def test_not_configured(self, spreadsheet_id, credentials):
        assert create_gsheets_store(spreadsheet_id, credentials) is None

    def test_configured(self):
        store = create_gsheets_store("sheet-123", {"type": "service_account"})
        assert isinstance(store, GoogleSheetsHistoryStore)
        assert store.spreadsheet_id == "sheet-123"
