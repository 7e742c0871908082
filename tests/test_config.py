"""Tests for settings loading."""

from pathlib import Path

import pytest

from brewops_forms.config import (
    ConfigError,
    Settings,
    get_brewops_home,
    get_config_path,
    load_settings,
    write_settings,
)


class TestHome:
    """Tests for locating the BrewOps home."""

    def test_env_override(self, brewops_home: Path) -> None:
        assert get_brewops_home() == brewops_home
        assert get_config_path() == brewops_home / "config.yaml"

    def test_default_home(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("BREWOPS_HOME", raising=False)

        assert get_brewops_home() == Path.home() / ".config" / "brewops"


class TestLoadSettings:
    """Tests for merging defaults, file and environment."""

    def test_defaults_without_file(self, brewops_home: Path) -> None:
        settings = load_settings()

        assert settings.backend_url == "http://localhost:5000"
        assert settings.token_key == "jwtToken"
        assert settings.legacy_token_keys == ["token"]
        assert settings.session_path == brewops_home / "session.json"
        assert settings.debounce_seconds == 0.6
        assert settings.message_timeout == 3.0
        assert settings.page_size == 10
        assert settings.request_timeout == 30.0

    def test_file_values(self, brewops_home: Path) -> None:
        brewops_home.mkdir(parents=True)
        (brewops_home / "config.yaml").write_text(
            "backend_url: https://api.brewops.io\npage_size: 25\n"
        )

        settings = load_settings()

        assert settings.backend_url == "https://api.brewops.io"
        assert settings.page_size == 25

    def test_environment_beats_file(
        self, brewops_home: Path, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        brewops_home.mkdir(parents=True)
        (brewops_home / "config.yaml").write_text("backend_url: https://file.example\n")
        monkeypatch.setenv("BREWOPS_BACKEND_URL", "https://env.example")
        monkeypatch.setenv("BREWOPS_SESSION_PATH", str(tmp_path / "s.json"))

        settings = load_settings()

        assert settings.backend_url == "https://env.example"
        assert settings.session_path == tmp_path / "s.json"

    def test_empty_file(self, brewops_home: Path) -> None:
        brewops_home.mkdir(parents=True)
        (brewops_home / "config.yaml").write_text("")

        assert load_settings() == Settings()

    def test_invalid_yaml(self, brewops_home: Path) -> None:
        brewops_home.mkdir(parents=True)
        (brewops_home / "config.yaml").write_text("backend_url: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings()

    def test_not_a_mapping(self, brewops_home: Path) -> None:
        brewops_home.mkdir(parents=True)
        (brewops_home / "config.yaml").write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_settings()

    def test_invalid_value(self, brewops_home: Path) -> None:
        brewops_home.mkdir(parents=True)
        (brewops_home / "config.yaml").write_text("page_size: 0\n")

        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_settings()


class TestWriteSettings:
    """Tests for writing the config file."""

    def test_written_settings_load_back(self, brewops_home: Path) -> None:
        path = write_settings(Settings(backend_url="https://api.brewops.io"))

        assert path == brewops_home / "config.yaml"
        assert load_settings().backend_url == "https://api.brewops.io"
