"""Tests for fetchcache.config — XDG paths, atomic writes, precedence, storage root."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from fetchcache.config import (
    _atomic_write,
    get_config_dir,
    get_data_dir,
    get_storage_root,
    load_global_config,
    resolve_config,
    save_global_config,
)
from fetchcache.exceptions import ConfigError
from fetchcache.models import CacheConfig, GlobalConfig


def _write_json(path: Path, data: object) -> None:
    """Write *data* as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPathsLinux:
    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("fetchcache.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "fetchcache"
        assert result.is_dir()

    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("fetchcache.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        assert get_config_dir() == custom / "fetchcache"

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("fetchcache.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()
        assert result == tmp_path / ".local" / "share" / "fetchcache"
        assert result.is_dir()

    def test_data_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_data"
        monkeypatch.setattr("fetchcache.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_DATA_HOME", str(custom))

        assert get_data_dir() == custom / "fetchcache"


class TestXDGPathsFallback:
    def test_config_dir_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("fetchcache.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".fetchcache"

    def test_data_dir_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("fetchcache.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()
        assert result == tmp_path / ".fetchcache" / "data"
        assert result.is_dir()


# ---------------------------------------------------------------------------
# Storage root
# ---------------------------------------------------------------------------


class TestStorageRoot:
    def test_defaults_to_data_dir(self, isolated_config: Path) -> None:
        assert get_storage_root(GlobalConfig()) == isolated_config / "data" / "fetchcache"

    def test_configured_root_is_created(self, tmp_path: Path) -> None:
        root = tmp_path / "nested" / "root"
        config = GlobalConfig(cache=CacheConfig(root=str(root)))

        result = get_storage_root(config)

        assert result == root.resolve()
        assert result.is_dir()

    def test_cache_folder_not_created(self, tmp_path: Path) -> None:
        config = GlobalConfig(cache=CacheConfig(root=str(tmp_path / "root")))
        get_storage_root(config)
        assert not (tmp_path / "root" / "cached_files").exists()

    def test_unwritable_root_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        config = GlobalConfig(cache=CacheConfig(root=str(blocker / "root")))

        with pytest.raises(OSError):
            get_storage_root(config)


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_file_with_content(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        _atomic_write(target, "hello world")
        assert target.read_text(encoding="utf-8") == "hello world"

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "test.txt"
        _atomic_write(target, "deep write")
        assert target.read_text(encoding="utf-8") == "deep write"

    def test_no_temp_files_left_on_success(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        _atomic_write(target, "content")
        assert list(tmp_path.iterdir()) == [target]

    def test_no_temp_files_left_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        with patch("fetchcache.config.os.fsync", side_effect=OSError("disk error")):
            with pytest.raises(OSError, match="disk error"):
                _atomic_write(target, "will fail")
        assert list(tmp_path.iterdir()) == []


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_load_returns_defaults_when_missing(self, isolated_config: Path) -> None:
        cfg = load_global_config()
        assert cfg == GlobalConfig()
        assert cfg.cache.folder_name == "cached_files"
        assert cfg.cache.raise_for_status is False
        assert cfg.cache.root is None

    def test_save_and_load_roundtrip(self, isolated_config: Path) -> None:
        original = GlobalConfig(
            cache=CacheConfig(root="/srv/media", folder_name="media", raise_for_status=True)
        )
        save_global_config(original)
        assert load_global_config() == original

    def test_load_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        path = isolated_config / "config" / "fetchcache" / "config.json"
        path.parent.mkdir(parents=True)
        path.write_text("{invalid json!!!", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_load_invalid_schema_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "config" / "fetchcache" / "config.json", {"cache": "not-a-dict"})
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    """CLI > env > config file > defaults."""

    def test_defaults(self, isolated_config: Path) -> None:
        assert resolve_config().cache.root is None

    def test_file_value(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(cache=CacheConfig(root="/from/file")))
        assert resolve_config().cache.root == "/from/file"

    def test_env_overrides_file(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        save_global_config(GlobalConfig(cache=CacheConfig(root="/from/file")))
        monkeypatch.setenv("FETCHCACHE_ROOT", "/from/env")
        assert resolve_config().cache.root == "/from/env"

    def test_cli_overrides_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FETCHCACHE_ROOT", "/from/env")
        assert resolve_config(cli_root="/from/cli").cache.root == "/from/cli"

    def test_empty_env_ignored(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        save_global_config(GlobalConfig(cache=CacheConfig(root="/from/file")))
        monkeypatch.setenv("FETCHCACHE_ROOT", "")
        assert resolve_config().cache.root == "/from/file"

    def test_other_settings_preserved(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(cache=CacheConfig(folder_name="blobs")))
        cfg = resolve_config(cli_root="/from/cli")
        assert cfg.cache.folder_name == "blobs"
