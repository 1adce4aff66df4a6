"""File system service for the synced data files."""

import os
from datetime import datetime, timezone
from pathlib import Path

import structlog

log = structlog.stdlib.get_logger()


class FileSystemService:
    """Service for file system operations on the data directory."""

    def __init__(self, base_path: Path | None = None) -> None:
        """Initialize the file system service.

        Args:
            base_path: Data directory (defaults to current working directory)
        """
        self.base_path = base_path or Path.cwd()
        log.debug("File system service initialized", base_path=str(self.base_path))

    async def write_bytes(self, data: bytes, path: Path) -> None:
        """Write a file atomically.

        The content goes to a sibling temporary file first and is moved into
        place only once fully written, so a reader never sees a partial
        database.

        Raises:
            OSError: If the file cannot be written
        """
        self.ensure_directory(path.parent)
        temp_path = path.with_suffix(path.suffix + ".tmp")

        try:
            with open(temp_path, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            temp_path.replace(path)
        except OSError as e:
            log.error("Failed to write file", path=str(path), error=str(e))
            temp_path.unlink(missing_ok=True)
            raise

        log.info("File written", path=str(path), size=len(data))

    def get_modified_time(self, path: Path) -> datetime | None:
        """Last modification time as an aware UTC datetime, or None if missing."""
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            return None
        return datetime.fromtimestamp(mtime, tz=timezone.utc)

    def ensure_directory(self, path: Path) -> None:
        """Ensure that a directory exists, creating it if necessary.

        Raises:
            OSError: If the path exists as a file or cannot be created
        """
        if path.exists():
            if not path.is_dir():
                log.error("Path exists but is not a directory", path=str(path))
                raise NotADirectoryError(f"Path exists but is not a directory: {path}")
            return

        log.debug("Creating directory", path=str(path))
        path.mkdir(parents=True, exist_ok=True)
