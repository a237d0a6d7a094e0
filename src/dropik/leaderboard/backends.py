"""
Storage backends for the leaderboard server.

Google Sheets is the production store: an API-key client can only
read, a service-account client can read and append. A JSON file store
covers local development without any credentials.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from dropik.config.settings import SheetsSettings, ServerSettings
from dropik.leaderboard.base import LeaderboardBackend, LeaderboardBackendError
from dropik.leaderboard.models import LeaderboardEntry, sort_entries, utc_timestamp

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class SheetsBackend(LeaderboardBackend):
    """Shared read path for Google Sheets backends.

    The googleapiclient calls are blocking, so each request runs in a
    worker thread.
    """

    def __init__(self, spreadsheet_id: str, sheet_range: str, service: Any):
        self.spreadsheet_id = spreadsheet_id
        self.sheet_range = sheet_range
        self._service = service
        if not spreadsheet_id:
            logger.warning("Spreadsheet id is not set, leaderboard reads will fail")

    async def get_leaderboard(self) -> List[LeaderboardEntry]:
        try:
            response = await asyncio.to_thread(self._read_values)
        except Exception as e:
            logger.error(f"Error fetching leaderboard data from Google Sheets: {e}")
            raise LeaderboardBackendError(str(e)) from e

        rows = response.get("values", [])
        # First row is the header
        return sort_entries(LeaderboardEntry.from_row(row) for row in rows[1:])

    def _read_values(self) -> dict:
        return self._service.spreadsheets().values().get(
            spreadsheetId=self.spreadsheet_id,
            range=self.sheet_range,
        ).execute()


class ReadOnlySheetsBackend(SheetsBackend):
    """API-key access: public reads only."""

    read_only = True

    @classmethod
    def from_settings(cls, settings: SheetsSettings) -> "ReadOnlySheetsBackend":
        from googleapiclient.discovery import build

        service = build(
            "sheets", "v4",
            developerKey=settings.api_key,
            cache_discovery=False,
        )
        logger.info("Google Sheets client ready (read-only, API key)")
        return cls(settings.sheet_id, settings.sheet_range, service)

    async def add_score(self, entry: LeaderboardEntry) -> bool:
        logger.error("add_score requires service account credentials")
        return False


class ServiceAccountSheetsBackend(SheetsBackend):
    """Service-account access: reads and appends rows."""

    @classmethod
    def from_settings(cls, settings: SheetsSettings) -> "ServiceAccountSheetsBackend":
        from google.oauth2 import service_account
        from googleapiclient.discovery import build

        credentials = service_account.Credentials.from_service_account_info(
            {
                "type": "service_account",
                "client_email": settings.service_account_email,
                "private_key": settings.private_key,
                "token_uri": "https://oauth2.googleapis.com/token",
            },
            scopes=SHEETS_SCOPES,
        )
        service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        logger.info(f"Google Sheets client ready (service account {settings.service_account_email})")
        return cls(settings.sheet_id, settings.sheet_range, service)

    async def add_score(self, entry: LeaderboardEntry) -> bool:
        timestamp = entry.timestamp or utc_timestamp()
        try:
            await asyncio.to_thread(
                self._append_row,
                [entry.nickname, str(entry.score), timestamp],
            )
        except Exception as e:
            logger.error(f"Error adding entry to Google Sheets: {e}")
            return False
        logger.info(f"Leaderboard row appended: {entry.nickname} {entry.score}")
        return True

    def _append_row(self, row: List[str]) -> dict:
        return self._service.spreadsheets().values().append(
            spreadsheetId=self.spreadsheet_id,
            range=self.sheet_range,
            valueInputOption="USER_ENTERED",
            insertDataOption="INSERT_ROWS",
            body={"values": [row]},
        ).execute()


class JsonFileBackend(LeaderboardBackend):
    """Leaderboard kept in a local JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def get_leaderboard(self) -> List[LeaderboardEntry]:
        async with self._lock:
            return sort_entries(self._load())

    async def add_score(self, entry: LeaderboardEntry) -> bool:
        async with self._lock:
            entries = self._load()
            entries.append(LeaderboardEntry(
                nickname=entry.nickname,
                score=entry.score,
                timestamp=entry.timestamp or utc_timestamp(),
            ))
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "w", encoding="utf-8") as f:
                    json.dump([e.to_dict() for e in entries], f, ensure_ascii=False, indent=2)
            except OSError as e:
                logger.error(f"Failed to save leaderboard: {e}")
                return False
            return True

    def _load(self) -> List[LeaderboardEntry]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise LeaderboardBackendError(f"Cannot read {self.path}: {e}") from e
        return [LeaderboardEntry.from_dict(row) for row in data]


def create_backend(
    sheets: SheetsSettings,
    server: Optional[ServerSettings] = None,
) -> LeaderboardBackend:
    """Pick the strongest backend the configured credentials allow."""
    if sheets.sheet_id and sheets.has_service_account:
        return ServiceAccountSheetsBackend.from_settings(sheets)
    if sheets.sheet_id and sheets.api_key:
        return ReadOnlySheetsBackend.from_settings(sheets)

    server = server or ServerSettings()
    logger.warning(
        f"Google Sheets credentials not set, using local file {server.store_path}"
    )
    return JsonFileBackend(server.store_path)
