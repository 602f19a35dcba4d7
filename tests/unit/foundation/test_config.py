"""Tests for configuration loading and environment overrides."""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from bindwire.foundation.config import BindwireConfig, get_config, load_config, reset_config


def write_config(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestDefaults:
    def test_builtin_defaults(self):
        config = load_config()

        assert config == BindwireConfig()
        assert config.default_manager == "default"
        assert config.mutation_policy == "marker"
        assert config.mutator_prefix == "set"
        assert config.debug is False

    def test_config_is_frozen(self):
        config = BindwireConfig()

        with pytest.raises(AttributeError):
            config.debug = True  # type: ignore[misc]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"default_manager": ""},
            {"mutation_policy": "magic"},
            {"mutator_prefix": ""},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            BindwireConfig(**kwargs)


class TestFileLoading:
    def test_project_local_file(self, tmp_path: Path):
        write_config(
            tmp_path / ".bindwire" / "config.yaml",
            "default_manager: app\nmutation_policy: convention\n",
        )

        config = load_config()

        assert config.default_manager == "app"
        assert config.mutation_policy == "convention"

    def test_user_global_file(self, tmp_path: Path):
        write_config(tmp_path / "home" / ".bindwire" / "config.yaml", "debug: true\n")

        assert load_config().debug is True

    def test_project_file_beats_user_file(self, tmp_path: Path):
        write_config(tmp_path / ".bindwire" / "config.yaml", "default_manager: project\n")
        write_config(tmp_path / "home" / ".bindwire" / "config.yaml", "default_manager: user\n")

        assert load_config().default_manager == "project"

    def test_explicit_path_beats_discovery(self, tmp_path: Path):
        write_config(tmp_path / ".bindwire" / "config.yaml", "default_manager: project\n")
        explicit = write_config(tmp_path / "custom.yaml", "default_manager: explicit\n")

        assert load_config(explicit).default_manager == "explicit"

    def test_empty_file_uses_defaults(self, tmp_path: Path):
        write_config(tmp_path / ".bindwire" / "config.yaml", "")

        assert load_config() == BindwireConfig()

    def test_invalid_yaml_is_skipped(self, tmp_path: Path, caplog):
        write_config(tmp_path / ".bindwire" / "config.yaml", "default_manager: [unclosed\n")
        write_config(tmp_path / "home" / ".bindwire" / "config.yaml", "default_manager: user\n")

        with caplog.at_level(logging.WARNING, logger="bindwire"):
            config = load_config()

        assert config.default_manager == "user"
        assert "Skipping invalid config file" in caplog.text

    def test_unknown_keys_are_ignored(self, tmp_path: Path, caplog):
        write_config(tmp_path / ".bindwire" / "config.yaml", "colour: blue\ndebug: true\n")

        with caplog.at_level(logging.WARNING, logger="bindwire"):
            config = load_config()

        assert config.debug is True
        assert "colour" in caplog.text

    def test_invalid_value_in_file(self, tmp_path: Path):
        write_config(tmp_path / ".bindwire" / "config.yaml", "mutation_policy: magic\n")

        with pytest.raises(ValueError, match="mutation_policy"):
            load_config()


class TestEnvOverrides:
    def test_env_beats_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        write_config(tmp_path / ".bindwire" / "config.yaml", "default_manager: file\n")
        monkeypatch.setenv("BINDWIRE_DEFAULT_MANAGER", "env")

        assert load_config().default_manager == "env"

    @pytest.mark.parametrize("value,expected", [("true", True), ("1", True), ("no", False)])
    def test_debug_is_parsed_as_bool(self, monkeypatch: pytest.MonkeyPatch, value, expected):
        monkeypatch.setenv("BINDWIRE_DEBUG", value)

        assert load_config().debug is expected

    def test_unrelated_env_vars_ignored(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BINDWIRE_LOG_LEVEL", "DEBUG")

        assert load_config() == BindwireConfig()


class TestGlobalConfig:
    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_reset_reloads(self, monkeypatch: pytest.MonkeyPatch):
        first = get_config()
        monkeypatch.setenv("BINDWIRE_MUTATOR_PREFIX", "update")
        reset_config()

        second = get_config()

        assert second is not first
        assert second.mutator_prefix == "update"

    def test_concurrent_first_access(self):
        with ThreadPoolExecutor(max_workers=8) as pool:
            configs = list(pool.map(lambda _: get_config(), range(32)))

        assert all(config is configs[0] for config in configs)
