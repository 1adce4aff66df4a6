"""Main entry point for the Neko Companion application.

This module provides:
- Command-line argument parsing
- Application initialization and dependency injection
- The plain-text report used with --no-tui
"""

import argparse
import asyncio
import signal
import sys
from dataclasses import replace
from pathlib import Path

import structlog

from neko_companion.models import AppConfig, SyncResult
from neko_companion.services.config import ConfigurationService
from neko_companion.services.errors import AppError, ConfigurationError, get_error_service, handle_error
from neko_companion.services.filesystem import FileSystemService
from neko_companion.services.http_client import HttpClientService
from neko_companion.services.logging import setup_logging
from neko_companion.services.repo_sync import GACHA_DATABASE, GAME_DATABASE, RepoSyncService, format_update_time
from neko_companion.services.reports import build_banner_reports, format_hours, sort_games_by_time
from neko_companion.services.storage import RecordStoreService
from neko_companion.ui.widgets.luck import format_average


log = structlog.stdlib.get_logger()

VERSION = "0.1.0"


class ApplicationContext:
    """Container for application services.

    Services are created lazily from the current configuration and rebuilt
    when the configuration changes.
    """

    def __init__(self, config_path: Path | None = None) -> None:
        self._config_path: Path | None = config_path

        self._config_service: ConfigurationService | None = None
        self._http_client: HttpClientService | None = None
        self._filesystem: FileSystemService | None = None
        self._record_store: RecordStoreService | None = None
        self._repo_sync: RepoSyncService | None = None

        self._config: AppConfig | None = None
        self._shutdown_requested: bool = False

    @property
    def config_service(self) -> ConfigurationService:
        if self._config_service is None:
            self._config_service = ConfigurationService(config_path=self._config_path)
        return self._config_service

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            self._config = self.config_service.load_config()
        return self._config

    @property
    def http_client(self) -> HttpClientService:
        if self._http_client is None:
            self._http_client = HttpClientService(rate_limit_delay=self.config.request_delay)
        return self._http_client

    @property
    def filesystem(self) -> FileSystemService:
        if self._filesystem is None:
            self._filesystem = FileSystemService(base_path=self.config.data_directory)
        return self._filesystem

    @property
    def record_store(self) -> RecordStoreService:
        if self._record_store is None:
            self._record_store = RecordStoreService(self.config.data_directory)
        return self._record_store

    @property
    def repo_sync(self) -> RepoSyncService:
        """Sync service for the configured repository.

        Raises:
            ConfigurationError: If no repository URL is set or it is invalid
        """
        if self._repo_sync is None:
            if not self.config.repo_url:
                raise ConfigurationError(
                    "No repository is configured",
                    setting="repo_url",
                    expected="a GitHub or Gitee repository URL",
                )
            self._repo_sync = RepoSyncService(
                http_client=self.http_client,
                filesystem=self.filesystem,
                repo_url=self.config.repo_url,
                token=self.config.token,
                data_directory=self.config.data_directory,
                tolerance_seconds=self.config.sync_tolerance_seconds,
            )
        return self._repo_sync

    def reload_config(self, config: AppConfig) -> None:
        """Adopt a new configuration; dependent services are rebuilt on next use."""
        self._config = config
        self._filesystem = None
        self._record_store = None
        self._repo_sync = None
        if self._http_client is not None:
            self._http_client.rate_limit_delay = config.request_delay
        log.info("Configuration reloaded", data_directory=str(config.data_directory))

    async def run_sync(self) -> list[SyncResult]:
        """Sync both data files and remember the repository update times."""
        results = await self.repo_sync.sync_all()

        updated = {
            result.file_name: format_update_time(result.remote_updated, self.config.utc_offset_hours)
            for result in results
            if result.remote_updated is not None
        }
        if updated:
            config = replace(
                self.config,
                game_data_updated=updated.get(GAME_DATABASE, self.config.game_data_updated),
                gacha_data_updated=updated.get(GACHA_DATABASE, self.config.gacha_data_updated),
            )
            self.config_service.save_config(config)
            self._config = config

        return results

    def request_shutdown(self) -> None:
        self._shutdown_requested = True
        log.info("Shutdown requested")

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_requested

    async def cleanup(self) -> None:
        """Close network connections."""
        if self._http_client is not None:
            await self._http_client.close()
            self._http_client = None
        self._repo_sync = None
        log.debug("Application cleanup complete")


class ParsedArgs:
    """Type-safe container for parsed command-line arguments."""

    def __init__(
        self,
        config: Path | None,
        log_level: str,
        log_dir: Path | None,
        no_tui: bool,
        sync: bool,
        player: str | None,
    ) -> None:
        self.config: Path | None = config
        self.log_level: str = log_level
        self.log_dir: Path | None = log_dir
        self.no_tui: bool = no_tui
        self.sync: bool = sync
        self.player: str | None = player


def parse_arguments(argv: list[str] | None = None) -> ParsedArgs:
    parser = argparse.ArgumentParser(
        prog="neko-companion",
        description="Browse gacha pull history and play time synced from a git repository",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  neko-companion                        Start the TUI application
  neko-companion --sync --no-tui        Sync, then print a text report
  neko-companion --no-tui --player 100  Report on one player only
        """
    )

    _ = parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    _ = parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: ~/.config/neko-companion/config.json)"
    )
    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set the logging level (default: from configuration)"
    )
    _ = parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for rotating log files (default: ./logs when the TUI runs)"
    )
    _ = parser.add_argument("--no-tui", action="store_true", help="Print a text report instead of starting the TUI")
    _ = parser.add_argument("--sync", action="store_true", help="Sync the data files before anything else")
    _ = parser.add_argument("--player", default=None, help="Only report on this player UID")

    ns = parser.parse_args(argv)

    return ParsedArgs(
        config=ns.config,
        log_level=ns.log_level,
        log_dir=ns.log_dir,
        no_tui=bool(ns.no_tui),
        sync=bool(ns.sync),
        player=ns.player,
    )


def render_text_report(store: RecordStoreService, config: AppConfig, player_id: str | None = None) -> str:
    """Per-banner averages for each player and total time per game."""
    lines: list[str] = []

    player_ids = [player_id] if player_id else store.fetch_player_ids()
    for uid in player_ids:
        lines.append(f"Player {uid}")
        records = store.fetch_draw_history(uid)
        for report in build_banner_reports(records, config.standard_pool_names):
            if report.total_pulls == 0:
                continue
            line = (
                f"  {report.label:<20} pulls {report.total_pulls:>5}"
                f"  5★ avg {format_average(report.average_gap, report.average_tier):>6}"
                f"  4★ avg {format_average(report.four_star_average, report.four_star_tier):>6}"
            )
            if report.featured_average is not None:
                line += f"  featured avg {format_average(report.featured_average, report.featured_tier):>6}"
            lines.append(line)

    lines.append("Play time")
    for game in sort_games_by_time(store.fetch_game_summaries()):
        lines.append(f"  {game.name:<30} {format_hours(game.total_time):>8} h")

    return "\n".join(lines)


def setup_signal_handlers(context: ApplicationContext) -> None:
    def signal_handler(signum: int, frame: object) -> None:
        _ = frame
        log.info("Received signal", signal=signal.Signals(signum).name)
        context.request_shutdown()

    _ = signal.signal(signal.SIGTERM, signal_handler)


async def run_sync(context: ApplicationContext) -> None:
    """Sync from the command line and print one line per file."""
    try:
        results = await context.run_sync()
    finally:
        await context.cleanup()
    for result in results:
        print(f"{result.file_name}: {result.action.value}")


async def run_tui(context: ApplicationContext) -> int:
    from neko_companion.ui.app import NekoCompanionApp

    log.info("Starting TUI application")
    try:
        app = NekoCompanionApp(config_service=context.config_service)
        app.set_app_context(context)
        await app.run_async()
        log.info("TUI application exited normally")
        return 0
    finally:
        await context.cleanup()


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the application."""
    args = parse_arguments(argv)
    context = ApplicationContext(config_path=args.config)

    log_dir = args.log_dir
    if log_dir is None and not args.no_tui:
        log_dir = Path("logs")

    _ = setup_logging(
        log_level=args.log_level or context.config.log_level,
        log_dir=log_dir,
        tui_mode=not args.no_tui,
    )
    log.info("Starting Neko Companion", version=VERSION, config_path=str(context.config_service.config_path))
    setup_signal_handlers(context)

    try:
        if args.sync:
            asyncio.run(run_sync(context))

        if args.no_tui:
            print(render_text_report(context.record_store, context.config, args.player))
            exit_code = 0
        else:
            exit_code = asyncio.run(run_tui(context))

    except KeyboardInterrupt:
        log.info("Application interrupted by user")
        exit_code = 130

    except AppError as e:
        user_error = handle_error(e, operation="command line run", component="main")
        print(get_error_service().create_user_message(user_error), file=sys.stderr)
        exit_code = 1

    log.info("Application exiting", exit_code=exit_code)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
