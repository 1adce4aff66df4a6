"""Property-based tests for configuration service."""

import json
import stat
import tempfile
from dataclasses import replace
from pathlib import Path

import pytest
from hypothesis import given, strategies as st

from neko_companion.models import STANDARD_POOL_NAMES, AppConfig
from neko_companion.services import ConfigurationError, ConfigurationService


# Strategies for generating valid configuration data
name_text = st.text(min_size=1, max_size=12, alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd")))

valid_repo_urls = st.one_of(
    st.just(""),
    st.builds(lambda host, owner, repo: f"https://{host}/{owner}/{repo}", st.sampled_from(["github.com", "gitee.com"]), name_text, name_text),
)

valid_paths = st.builds(lambda x: Path.home() / "test" / x, name_text)

valid_request_delay = st.floats(min_value=0.0, max_value=60.0, allow_nan=False, allow_infinity=False)
valid_log_levels = st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])

valid_config_strategy = st.builds(
    AppConfig,
    repo_url=valid_repo_urls,
    token=st.text(max_size=40, alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd"))),
    data_directory=valid_paths,
    request_delay=valid_request_delay,
    log_level=valid_log_levels,
    utc_offset_hours=st.integers(min_value=-12, max_value=14),
    session_window_days=st.integers(min_value=1, max_value=366),
    session_lookback_months=st.integers(min_value=1, max_value=120),
    standard_pool_names=st.lists(name_text, max_size=6).map(tuple),
    sync_tolerance_seconds=st.floats(min_value=0.0, max_value=3600.0, allow_nan=False),
    game_data_updated=st.one_of(st.none(), st.just("2024-05-01 20:00:00")),
    gacha_data_updated=st.none(),
)


@given(valid_config_strategy)
def test_configuration_round_trip(config: AppConfig) -> None:
    """For any valid configuration, saving and reloading preserves every value."""
    with tempfile.TemporaryDirectory() as temp_dir:
        config_path = Path(temp_dir) / "test_config.json"
        service = ConfigurationService(config_path)

        service.save_config(config)
        loaded_config = service.load_config()

        assert loaded_config == config


def test_configuration_round_trip_example() -> None:
    """Unit test example for configuration round-trip."""
    config = AppConfig(
        repo_url="https://github.com/neko/saves",
        token="ghp_example",
        data_directory=Path.home() / "neko-data",
        request_delay=1.5,
        log_level="INFO",
        game_data_updated="2024-05-01 20:00:00",
    )

    with tempfile.TemporaryDirectory() as temp_dir:
        config_path = Path(temp_dir) / "test_config.json"
        service = ConfigurationService(config_path)

        service.save_config(config)
        loaded_config = service.load_config()

        assert loaded_config.repo_url == "https://github.com/neko/saves"
        assert loaded_config.token == "ghp_example"
        assert loaded_config.data_directory == Path.home() / "neko-data"
        assert loaded_config.request_delay == 1.5
        assert loaded_config.standard_pool_names == STANDARD_POOL_NAMES
        assert loaded_config.game_data_updated == "2024-05-01 20:00:00"
        assert loaded_config.gacha_data_updated is None


def test_saved_file_is_private() -> None:
    """The token is stored in a file only the owner can read."""
    with tempfile.TemporaryDirectory() as temp_dir:
        config_path = Path(temp_dir) / "nested" / "config.json"
        config_path.parent.mkdir()
        config_path.write_text("{}")
        config_path.chmod(0o644)
        service = ConfigurationService(config_path)

        service.save_config(replace(service.get_default_config(), token="secret"))

        assert stat.S_IMODE(config_path.stat().st_mode) == 0o600


def test_missing_fields_use_defaults() -> None:
    """Files written before newer settings existed still load."""
    with tempfile.TemporaryDirectory() as temp_dir:
        config_path = Path(temp_dir) / "config.json"
        config_path.write_text(json.dumps({
            "repo_url": "https://gitee.com/neko/saves",
            "data_directory": str(Path(temp_dir) / "data"),
            "log_level": "debug",
        }))

        config = ConfigurationService(config_path).load_config()

        assert config.repo_url == "https://gitee.com/neko/saves"
        assert config.token == ""
        assert config.log_level == "DEBUG"
        assert config.utc_offset_hours == 8
        assert config.session_window_days == 14
        assert config.sync_tolerance_seconds == 60.0


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps({"utc_offset_hours": "eight"}),
        json.dumps({"standard_pool_names": "安可"}),
        json.dumps({"repo_url": "https://gitlab.com/neko/saves"}),
    ],
)
def test_unreadable_file_falls_back_to_defaults(content: str) -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        config_path = Path(temp_dir) / "config.json"
        config_path.write_text(content)
        service = ConfigurationService(config_path)

        assert service.load_config() == service.get_default_config()


def test_missing_file_uses_defaults() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        service = ConfigurationService(Path(temp_dir) / "absent.json")

        assert service.load_config() == service.get_default_config()


# Strategies for generating invalid configuration data that will pass AppConfig construction
# but fail validation

def create_invalid_config_strategy():
    """Create strategy for invalid but constructible configs."""
    base = ConfigurationService().get_default_config()
    return st.one_of(
        # Unsupported repository host
        st.builds(lambda url: replace(base, repo_url=url), st.builds(lambda x: f"https://example.com/{x}/{x}", name_text)),

        # Relative paths
        st.builds(
            lambda p: replace(base, data_directory=Path(p)),
            st.text(min_size=1, max_size=10, alphabet=st.characters(whitelist_categories=("Ll",))),
        ),

        # Invalid request delay
        st.builds(
            lambda d: replace(base, request_delay=d),
            st.one_of(
                st.floats(min_value=61.0, max_value=120.0, allow_nan=False, allow_infinity=False),
                st.floats(max_value=-0.01, allow_nan=False, allow_infinity=False),
            ),
        ),

        # Invalid log level
        st.builds(
            lambda level: replace(base, log_level=level),
            st.text(min_size=1).filter(lambda x: x not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
        ),

        # Offsets outside real time zones
        st.builds(lambda h: replace(base, utc_offset_hours=h), st.integers(min_value=15, max_value=48)),

        # Window lengths
        st.builds(lambda d: replace(base, session_window_days=d), st.integers(max_value=0)),
        st.builds(lambda m: replace(base, session_lookback_months=m), st.integers(min_value=121, max_value=1000)),

        # Blank standard pool names
        st.just(replace(base, standard_pool_names=("安可", ""))),

        # Negative tolerance
        st.builds(lambda t: replace(base, sync_tolerance_seconds=t), st.floats(max_value=-0.01, allow_nan=False, allow_infinity=False)),
    )


@given(create_invalid_config_strategy())
def test_configuration_validation_rejects_invalid(config: AppConfig) -> None:
    """Invalid configurations are rejected with readable error messages."""
    service = ConfigurationService()
    result = service.validate_config(config)

    assert not result.is_valid
    assert len(result.errors) > 0
    assert all(isinstance(error, str) for error in result.errors)


@given(valid_config_strategy)
def test_configuration_validation_accepts_valid(config: AppConfig) -> None:
    service = ConfigurationService()
    result = service.validate_config(config)

    assert result.is_valid
    assert len(result.errors) == 0


def test_configuration_validation_examples() -> None:
    """Unit test examples for configuration validation."""
    service = ConfigurationService()
    default = service.get_default_config()

    result = service.validate_config(default)
    assert result.is_valid

    result = service.validate_config(replace(default, request_delay=120.0))
    assert not result.is_valid
    assert "request_delay should not exceed 60 seconds" in result.errors


def test_save_rejects_invalid_configuration() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        config_path = Path(temp_dir) / "config.json"
        service = ConfigurationService(config_path)

        with pytest.raises(ConfigurationError):
            service.save_config(replace(service.get_default_config(), log_level="LOUD"))
        assert not config_path.exists()
