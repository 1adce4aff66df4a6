"""Read access to the synced SQLite databases.

``neko_game.db`` holds the ``games`` and ``game_sessions`` tables and
``gacha_data.db`` holds ``gacha_logs``. Both are produced elsewhere and only
ever read here; every row is validated before it reaches the analysis code,
and a single bad row rejects the whole batch.
"""

import calendar
import sqlite3
from collections.abc import Iterator
from contextlib import closing, contextmanager
from datetime import date
from pathlib import Path
from typing import Any

import structlog

from ..models import QUALITY_LEVELS, DrawRecord, GameSummary, SessionRecord, parse_timestamp
from .banners import normalize_banner_name
from .errors import DataIntegrityError, StorageError
from .repo_sync import GACHA_DATABASE, GAME_DATABASE

log = structlog.stdlib.get_logger()

DEFAULT_LOOKBACK_MONTHS = 6


def session_since_date(reference: date, months: int = DEFAULT_LOOKBACK_MONTHS) -> date:
    """Start of the session lookback window.

    Steps back whole calendar months, clamping the day to the length of the
    target month (Aug 31 minus 6 months is Feb 28 or 29).
    """
    if months < 0:
        raise ValueError(f"months must not be negative, got {months}")
    month_index = reference.year * 12 + reference.month - 1 - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(reference.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _require_timestamp(row_id: Any, field: str, value: Any) -> str:
    if not isinstance(value, str):
        raise DataIntegrityError(f"Invalid {field} on record {row_id}", record_id=row_id, field=field, value=value)
    try:
        parse_timestamp(value)
    except ValueError as e:
        raise DataIntegrityError(f"Unparseable {field} on record {row_id}", record_id=row_id, field=field, value=value) from e
    return value


def _check_unique(seen: set[int], row_id: Any) -> None:
    if not _is_int(row_id):
        raise DataIntegrityError(f"Record id must be an integer, got {row_id!r}", record_id=row_id, field="id", value=row_id)
    if row_id in seen:
        raise DataIntegrityError(f"Duplicate record id {row_id}", record_id=row_id, field="id", value=row_id)
    seen.add(row_id)


def validate_draw_rows(rows: list[sqlite3.Row] | list[dict[str, Any]]) -> list[DrawRecord]:
    """Turn raw ``gacha_logs`` rows into records, preserving their order.

    Raises:
        DataIntegrityError: On the first malformed row
    """
    seen: set[int] = set()
    records = []
    for row in rows:
        row_id = row["id"]
        _check_unique(seen, row_id)

        quality = row["quality_level"]
        if not _is_int(quality) or quality not in QUALITY_LEVELS:
            raise DataIntegrityError(
                f"Invalid quality_level on record {row_id}",
                record_id=row_id,
                field="quality_level",
                value=quality,
            )

        banner = row["card_pool_type"]
        if not isinstance(banner, str) or not banner:
            raise DataIntegrityError(f"Missing card_pool_type on record {row_id}", record_id=row_id, field="card_pool_type", value=banner)

        records.append(DrawRecord(
            id=row_id,
            player_id=str(row["player_id"]),
            name=str(row["name"] or ""),
            quality_level=quality,
            card_pool_type=normalize_banner_name(banner),
            timestamp=_require_timestamp(row_id, "timestamp", row["timestamp"]),
        ))
    return records


def validate_session_rows(rows: list[sqlite3.Row] | list[dict[str, Any]]) -> list[SessionRecord]:
    """Turn raw ``game_sessions`` rows into records, preserving their order.

    Raises:
        DataIntegrityError: On the first malformed row
    """
    seen: set[int] = set()
    sessions = []
    for row in rows:
        row_id = row["id"]
        _check_unique(seen, row_id)

        duration = row["duration"]
        if not _is_int(duration) or duration < 0:
            raise DataIntegrityError(
                f"Duration must be a non-negative integer on session {row_id}",
                record_id=row_id,
                field="duration",
                value=duration,
            )

        end_time = row["end_time"]
        if end_time is not None:
            end_time = _require_timestamp(row_id, "end_time", end_time)

        sessions.append(SessionRecord(
            id=row_id,
            game_id=row["game_id"],
            start_time=_require_timestamp(row_id, "start_time", row["start_time"]),
            end_time=end_time,
            duration=duration,
        ))
    return sessions


class RecordStoreService:
    """Read-only queries over the two local databases."""

    def __init__(self, data_directory: Path) -> None:
        self.data_directory = data_directory
        log.debug("Record store initialized", data_directory=str(data_directory))

    @property
    def game_database(self) -> Path:
        return self.data_directory / GAME_DATABASE

    @property
    def gacha_database(self) -> Path:
        return self.data_directory / GACHA_DATABASE

    @contextmanager
    def _connect(self, path: Path) -> Iterator[sqlite3.Connection]:
        """Open a database read-only.

        Raises:
            StorageError: If the file is missing or cannot be opened
        """
        if not path.is_file():
            raise StorageError(
                f"{path.name} has not been downloaded yet; run a sync first",
                database=str(path),
            )
        try:
            conn = sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True, timeout=5.0)
        except sqlite3.Error as e:
            raise StorageError(f"Could not open {path.name}", database=str(path), original_error=e) from e

        conn.row_factory = sqlite3.Row
        with closing(conn):
            yield conn

    def _query(self, path: Path, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        with self._connect(path) as conn:
            try:
                rows = conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise StorageError(f"Query on {path.name} failed", database=str(path), query=sql, original_error=e) from e
        log.debug("Query executed", database=path.name, rows=len(rows))
        return rows

    def fetch_player_ids(self) -> list[str]:
        """Every player id with at least one pull."""
        rows = self._query(self.gacha_database, "SELECT DISTINCT player_id FROM gacha_logs ORDER BY player_id")
        return [str(row["player_id"]) for row in rows]

    def fetch_draw_history(self, player_id: str) -> list[DrawRecord]:
        """A player's pulls, most recent (highest id) first."""
        rows = self._query(
            self.gacha_database,
            "SELECT id, player_id, name, quality_level, card_pool_type, timestamp "
            "FROM gacha_logs WHERE player_id = ? ORDER BY id DESC",
            (player_id,),
        )
        records = validate_draw_rows(rows)
        log.info("Draw history loaded", player_id=player_id, records=len(records))
        return records

    def fetch_sessions(self, game_id: int, since: date) -> list[SessionRecord]:
        """Sessions of a title that started on or after a date, newest first."""
        rows = self._query(
            self.game_database,
            "SELECT id, game_id, start_time, end_time, duration FROM game_sessions "
            "WHERE game_id = ? AND start_time >= ? ORDER BY start_time DESC",
            (game_id, since.isoformat()),
        )
        return validate_session_rows(rows)

    def fetch_game_summaries(self) -> list[GameSummary]:
        """All titles with their total playtime over every session."""
        rows = self._query(
            self.game_database,
            "SELECT g.id, g.name, g.icon, COALESCE(SUM(s.duration), 0) AS total_time "
            "FROM games g LEFT JOIN game_sessions s ON s.game_id = g.id "
            "GROUP BY g.id, g.name, g.icon ORDER BY g.id",
        )
        return [self._to_summary(row) for row in rows]

    def fetch_game_summary(self, game_id: int) -> GameSummary | None:
        """One title's name and icon with its total recomputed from sessions."""
        rows = self._query(self.game_database, "SELECT id, name, icon FROM games WHERE id = ?", (game_id,))
        if not rows:
            return None
        total = self._query(
            self.game_database,
            "SELECT COALESCE(SUM(duration), 0) AS total_time FROM game_sessions WHERE game_id = ?",
            (game_id,),
        )[0]["total_time"]
        return self._to_summary({**dict(rows[0]), "total_time": total})

    @staticmethod
    def _to_summary(row: sqlite3.Row | dict[str, Any]) -> GameSummary:
        total = row["total_time"]
        if not _is_int(total) or total < 0:
            raise DataIntegrityError(
                f"Invalid total playtime for game {row['id']}",
                record_id=row["id"],
                field="total_time",
                value=total,
            )
        return GameSummary(id=row["id"], name=str(row["name"]), icon=row["icon"], total_time=total)
