"""Property-based tests for error handling across HTTP client, file system and error services."""

import asyncio
import sqlite3
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock, patch

import httpx
import pytest
from hypothesis import given, strategies as st, settings

from neko_companion.services import (
    AppError,
    ErrorCategory,
    ErrorHandlingService,
    FileSystemService,
    HttpClientService,
    NetworkError,
    StorageError,
)


def status_error(status_code: int, headers: dict[str, str] | None = None) -> httpx.HTTPStatusError:
    mock_response = Mock()
    mock_response.status_code = status_code
    mock_response.headers = headers or {}
    return httpx.HTTPStatusError(f"HTTP {status_code}", request=Mock(), response=mock_response)


def ok_response(content: bytes = b"[]") -> Mock:
    response = Mock()
    response.status_code = 200
    response.content = content
    response.raise_for_status = Mock()
    return response


class TestErrorHandlingProperties:
    """Property-based tests for user-friendly error handling."""

    @given(
        url=st.text(min_size=10, max_size=100).map(lambda x: f"https://example.com/{x.replace('/', '_')}"),
        error_type=st.sampled_from([
            "network_error",
            "timeout_error",
            "http_4xx_error",
            "http_5xx_error"
        ]),
        error_message=st.text(min_size=5, max_size=100)
    )
    @pytest.mark.asyncio
    @settings(deadline=None)  # HTTP client setup/teardown is slow
    async def test_http_client_logs_technical_details(
        self,
        url: str,
        error_type: str,
        error_message: str
    ) -> None:
        """Every failed request is logged with the URL, attempt and error type."""
        client = HttpClientService(timeout=1.0, max_retries=1, base_delay=0.0, rate_limit_delay=0.0)

        if error_type == "network_error":
            mock_error: Exception = httpx.ConnectError(error_message)
        elif error_type == "timeout_error":
            mock_error = httpx.TimeoutException(error_message)
        elif error_type == "http_4xx_error":
            mock_error = status_error(404)
        else:
            mock_error = status_error(500)

        with patch.object(client._client, 'get', side_effect=mock_error):
            with patch('neko_companion.services.http_client.log') as mock_logger:
                with pytest.raises((httpx.HTTPError, httpx.TimeoutException)):
                    await client.get(url)

                assert mock_logger.warning.called
                for call in mock_logger.warning.call_args_list:
                    assert {'url', 'attempt', 'error_type'} <= set(call.kwargs)

        await client.close()

    @given(
        error=st.sampled_from([
            httpx.ConnectError("refused"),
            httpx.ReadTimeout("slow"),
            status_error(401),
            status_error(503),
            sqlite3.OperationalError("database is locked"),
            PermissionError("denied"),
            FileNotFoundError("gone"),
            ValueError("bad value"),
            TypeError("bad type"),
            RuntimeError("boom"),
        ])
    )
    def test_every_error_converts_to_user_message(self, error: Exception) -> None:
        """Any exception becomes a non-empty message with a category."""
        service = ErrorHandlingService()

        with patch('neko_companion.services.errors.log'):
            friendly = service.handle_error(error, operation="sync", component="test")

        assert friendly.message
        assert isinstance(friendly.category, ErrorCategory)
        assert service.create_user_message(friendly).startswith(friendly.message)
        assert len(service.get_recent_errors()) == 1


class TestErrorConversionExamples:
    """Unit test examples for error classification."""

    def handle(self, error: Exception, context: dict[str, str] | None = None):
        service = ErrorHandlingService()
        with patch('neko_companion.services.errors.log'):
            return service.handle_error(error, operation="op", component="test", context=context)

    def test_http_status_messages(self) -> None:
        assert self.handle(status_error(401)).message.startswith("Authentication failed")
        assert self.handle(status_error(404)).category is ErrorCategory.NETWORK
        assert "HTTP error 418" in self.handle(status_error(418)).message

    def test_token_suggestions_for_auth_failures(self) -> None:
        friendly = NetworkError("Forbidden", status_code=403).to_user_friendly()

        assert any("token" in action for action in friendly.suggested_actions)

    def test_sqlite_error_is_storage(self) -> None:
        friendly = self.handle(sqlite3.DatabaseError("file is not a database"), {"database": "gacha_data.db"})

        assert friendly.category is ErrorCategory.STORAGE
        assert "gacha_data.db" in (friendly.technical_details or "")

    def test_app_errors_pass_through(self) -> None:
        error = StorageError("missing", database="neko_game.db")

        assert self.handle(error).message == "missing"

    def test_unexpected_error(self) -> None:
        friendly = self.handle(RuntimeError("boom"))

        assert friendly.category is ErrorCategory.UNEXPECTED
        assert "RuntimeError" in (friendly.technical_details or "")

    def test_history_is_bounded(self) -> None:
        service = ErrorHandlingService(max_history_size=3)
        with patch('neko_companion.services.errors.log'):
            for index in range(5):
                service.handle_error(AppError(f"error {index}"), operation="op", component="test")

        assert [e.message for e in service.get_recent_errors()] == ["error 2", "error 3", "error 4"]
        assert service.get_error_count_by_category() == {ErrorCategory.UNEXPECTED: 3}

    def test_user_message_lists_at_most_three_suggestions(self) -> None:
        friendly = NetworkError("Offline").to_user_friendly()
        message = ErrorHandlingService().create_user_message(friendly)

        assert message.count("•") == 3
        assert ErrorHandlingService().create_user_message(friendly, include_suggestions=False) == "Offline"


class TestHttpClientErrorHandlingExamples:
    """Unit test examples for HTTP client error handling."""

    @pytest.mark.asyncio
    async def test_network_error_handling(self) -> None:
        client = HttpClientService(timeout=1.0, max_retries=1, base_delay=0.0, rate_limit_delay=0.0)

        with patch.object(client._client, 'get', side_effect=httpx.ConnectError("Connection failed")) as mock_get:
            with pytest.raises(httpx.ConnectError):
                await client.get("https://example.com/test")
            assert mock_get.call_count == 2

        await client.close()

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self) -> None:
        client = HttpClientService(timeout=1.0, max_retries=3, base_delay=0.0, rate_limit_delay=0.0)

        with patch.object(client._client, 'get', side_effect=status_error(404)) as mock_get:
            with pytest.raises(httpx.HTTPStatusError):
                await client.get("https://example.com/nonexistent")
            assert mock_get.call_count == 1

        await client.close()

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self) -> None:
        client = HttpClientService(timeout=1.0, max_retries=2, base_delay=0.0, rate_limit_delay=0.0)

        with patch.object(client._client, 'get', side_effect=[status_error(502), ok_response(b'{"ok": true}')]):
            response = await client.get("https://example.com/flaky")
            assert response.status_code == 200

        await client.close()

    @pytest.mark.asyncio
    async def test_rate_limiting_handling(self) -> None:
        """429 responses are retried after the retry-after delay."""
        client = HttpClientService(timeout=1.0, max_retries=2, base_delay=0.1, rate_limit_delay=0.0)

        call_count = 0

        def mock_get(*args, **kwargs):
            nonlocal call_count
            call_count += 1
            if call_count <= 2:
                raise status_error(429, {"retry-after": "0.1"})
            return ok_response(b"success")

        with patch.object(client._client, 'get', side_effect=mock_get):
            response = await client.get("https://example.com/rate-limited")
            assert response.status_code == 200
            assert call_count == 3

        await client.close()

    def test_retry_delay_is_capped(self) -> None:
        client = HttpClientService(base_delay=1.0, max_delay=5.0)

        assert client._retry_delay(status_error(503), 10) == 5.0
        assert client._retry_delay(status_error(429, {"retry-after": "120"}), 0) == 5.0
        assert client._retry_delay(status_error(429, {"retry-after": "soon"}), 1) == 2.0
        assert client._retry_delay(status_error(403), 0) is None

        asyncio.run(client.close())


class TestFileSystemErrorHandlingExamples:
    """Unit test examples for file system error handling."""

    def test_write_replaces_file(self) -> None:
        service = FileSystemService()

        with tempfile.TemporaryDirectory() as temp_dir:
            target = Path(temp_dir) / "data" / "gacha_data.db"

            asyncio.run(service.write_bytes(b"first", target))
            asyncio.run(service.write_bytes(b"second", target))

            assert target.read_bytes() == b"second"
            assert list(target.parent.iterdir()) == [target]

    def test_failed_write_keeps_existing_file(self) -> None:
        service = FileSystemService()

        with tempfile.TemporaryDirectory() as temp_dir:
            target = Path(temp_dir) / "neko_game.db"
            target.write_bytes(b"original")

            with patch('neko_companion.services.filesystem.log') as mock_logger:
                with patch('neko_companion.services.filesystem.os.fsync', side_effect=OSError("No space left on device")):
                    with pytest.raises(OSError):
                        asyncio.run(service.write_bytes(b"partial", target))

                assert mock_logger.error.called
                assert any('error' in call.kwargs for call in mock_logger.error.call_args_list)

            assert target.read_bytes() == b"original"
            assert list(Path(temp_dir).iterdir()) == [target]

    def test_modified_time(self) -> None:
        service = FileSystemService()

        with tempfile.TemporaryDirectory() as temp_dir:
            target = Path(temp_dir) / "neko_game.db"
            assert service.get_modified_time(target) is None

            target.write_bytes(b"x")
            modified = service.get_modified_time(target)

            assert modified is not None
            assert modified.tzinfo is timezone.utc
            assert abs((datetime.now(timezone.utc) - modified).total_seconds()) < 60

    def test_directory_over_file(self) -> None:
        service = FileSystemService()

        with tempfile.TemporaryDirectory() as temp_dir:
            blocker = Path(temp_dir) / "data"
            blocker.write_text("not a directory")

            with pytest.raises(NotADirectoryError):
                service.ensure_directory(blocker)
