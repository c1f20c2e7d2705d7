"""Integration tests for configuration loading with layered precedence.

Tests the real load_config() function with actual YAML files, environment
variables, dotenv files and CLI overrides to verify precedence:
defaults < YAML < ENV < CLI.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from vegacore.infrastructure.config.load import load_config

pytestmark = pytest.mark.integration


@pytest.fixture()
def yaml_config(tmp_path: Path) -> Path:
    """Write a minimal YAML config and return its path."""
    config = {
        "app_name": "vegacore-test",
        "environment": "test",
        "providers": {"provider_dir": str(tmp_path / "providers")},
        "http": {
            "timeout_seconds": 15.0,
            "user_agent": "TestAgent/1.0",
        },
        "logging": {"level": "DEBUG", "format": "console"},
        "cache": {"backend": "memory", "dir": str(tmp_path / "cache")},
        "base_url": {"ttl_seconds": 600},
        "extractors": {"max_redirect_hops": 3},
        "streams": {"excluded_qualities": ["480p"]},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config), encoding="utf-8")
    return path


class TestDefaultsOnly:
    def test_defaults_produce_valid_config(self) -> None:
        config = load_config()
        assert config.app_name == "vegacore"
        assert config.environment == "dev"
        assert config.http_timeout_seconds == 20.0
        assert config.log_level == "INFO"
        assert config.log_format == "console"  # dev -> console
        assert config.base_url.ttl_seconds == 3600
        assert config.extractors.max_redirect_hops == 2
        assert config.streams.cache_ttl_seconds == 300
        assert config.streams.max_retries == 1
        assert config.providers.search_cache_size == 10

    def test_defaults_derive_log_format_from_environment(self) -> None:
        config = load_config(cli_overrides={"environment": "prod"})
        assert config.log_format == "json"

    def test_no_filesystem_side_effects(self, tmp_path: Path) -> None:
        load_config(
            cli_overrides={
                "cache_dir": str(tmp_path / "c"),
                "provider_dir": str(tmp_path / "p"),
            }
        )
        assert list(tmp_path.iterdir()) == []


class TestYamlOverrides:
    def test_yaml_overrides_defaults(self, yaml_config: Path, tmp_path: Path) -> None:
        config = load_config(config_path=yaml_config)
        assert config.app_name == "vegacore-test"
        assert config.environment == "test"
        assert config.http_timeout_seconds == 15.0
        assert config.http_user_agent == "TestAgent/1.0"
        assert config.log_level == "DEBUG"
        assert config.cache.backend == "memory"
        assert config.cache.directory == tmp_path / "cache"
        assert config.providers.provider_dir == tmp_path / "providers"
        assert config.base_url.ttl_seconds == 600
        assert config.extractors.max_redirect_hops == 3
        assert config.streams.excluded_qualities == ["480p"]

    def test_yaml_file_not_found_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "nonexistent.yaml")

    def test_yaml_partial_override_preserves_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "partial.yaml"
        path.write_text(yaml.dump({"http": {"timeout_seconds": 99.0}}), encoding="utf-8")

        config = load_config(config_path=path)
        assert config.http_timeout_seconds == 99.0
        assert config.app_name == "vegacore"

    def test_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(config_path=path).app_name == "vegacore"

    def test_non_mapping_yaml_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config(config_path=path)

    def test_invalid_value_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(
            yaml.dump({"extractors": {"max_redirect_hops": 0}}), encoding="utf-8"
        )
        with pytest.raises(ValueError, match="max_redirect_hops"):
            load_config(config_path=path)


class TestEnvOverrides:
    def test_env_overrides_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("VEGACORE_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("VEGACORE_HTTP_TIMEOUT_SECONDS", "60.0")
        monkeypatch.setenv("VEGACORE_MAX_REDIRECT_HOPS", "4")

        config = load_config(config_path=yaml_config)
        assert config.log_level == "WARNING"
        assert config.http_timeout_seconds == 60.0
        assert config.extractors.max_redirect_hops == 4
        # YAML values not overridden by ENV stay
        assert config.app_name == "vegacore-test"

    def test_env_overrides_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VEGACORE_ENVIRONMENT", "prod")

        config = load_config()
        assert config.environment == "prod"
        assert config.log_format == "json"  # prod -> json

    def test_dotenv_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        # setenv+delenv: monkeypatch removes what load_dotenv writes.
        monkeypatch.setenv("VEGACORE_BASE_URL_TTL_SECONDS", "0")
        monkeypatch.delenv("VEGACORE_BASE_URL_TTL_SECONDS")
        dotenv = tmp_path / ".env"
        dotenv.write_text("VEGACORE_BASE_URL_TTL_SECONDS=120\n", encoding="utf-8")

        config = load_config(dotenv_path=dotenv)
        assert config.base_url.ttl_seconds == 120

    def test_dotenv_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(dotenv_path=tmp_path / ".env")


class TestCliOverrides:
    def test_cli_overrides_yaml_and_env(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("VEGACORE_LOG_LEVEL", "WARNING")

        config = load_config(
            config_path=yaml_config,
            cli_overrides={"log_level": "ERROR"},
        )
        assert config.log_level == "ERROR"

    def test_cli_overrides_with_sectioned_format(self, yaml_config: Path) -> None:
        config = load_config(
            config_path=yaml_config,
            cli_overrides={"http": {"timeout_seconds": 5.0}},
        )
        assert config.http_timeout_seconds == 5.0

    def test_flat_cli_keys(self) -> None:
        config = load_config(
            cli_overrides={"cache_backend": "memory", "max_redirect_hops": 5},
        )
        assert config.cache.backend == "memory"
        assert config.extractors.max_redirect_hops == 5


def test_sectioned_dump_roundtrips(yaml_config: Path, tmp_path: Path) -> None:
    config = load_config(config_path=yaml_config)
    dumped = tmp_path / "dumped.yaml"
    dumped.write_text(yaml.dump(config.to_sectioned_dict()), encoding="utf-8")

    assert load_config(config_path=dumped).to_sectioned_dict() == config.to_sectioned_dict()
