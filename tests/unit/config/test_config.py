# pyright: reportAny=false
import tomllib
from pathlib import Path

import pytest
from pyfakefs.fake_filesystem import FakeFilesystem

from promptshelf.config import (
    CONFIG_FILE_NAME,
    Config,
    LogFormat,
    LogLevel,
)
from promptshelf.exceptions import ConfigLoadError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PROMPTSHELF_DEBUG", raising=False)
    monkeypatch.delenv("PROMPTSHELF_STORAGE__ROOT", raising=False)
    monkeypatch.delenv("PROMPTSHELF_LOGGING__LEVEL", raising=False)
    monkeypatch.delenv("PROMPTSHELF_LOGGING__FORMAT", raising=False)
    monkeypatch.delenv("PROMPTSHELF_LOGGING__FILE", raising=False)


class TestConfigDefaults:
    def test_defaults(self) -> None:
        config = Config.from_dict({})

        assert config.logging.level is LogLevel.INFO
        assert config.logging.format is LogFormat.JSON
        assert config.root == Path("~/.promptshelf").expanduser()
        assert config.source is None

    def test_log_file_defaults_under_root(self) -> None:
        config = Config.from_dict({"storage": {"root": "/shelf"}})

        assert config.log_file_path == Path("/shelf/logs/promptshelf.log")

    def test_explicit_log_file(self) -> None:
        config = Config.from_dict({"logging": {"file": "/var/log/shelf.log"}})

        assert config.log_file_path == Path("/var/log/shelf.log")

    def test_invalid_enum_falls_back(self) -> None:
        config = Config.from_dict({"logging": {"level": "loud", "format": "xml"}})

        assert config.logging.level is LogLevel.INFO
        assert config.logging.format is LogFormat.JSON

    def test_level_is_case_insensitive(self) -> None:
        config = Config.from_dict({"logging": {"level": "DEBUG"}})

        assert config.logging.level is LogLevel.DEBUG


class TestConfigFromFile:
    def test_loads_valid_toml_file(self, fs: FakeFilesystem) -> None:
        content = """
[storage]
root = "/data/shelf"

[logging]
level = "debug"
format = "text"
"""
        path = Path("/test/config.toml")
        fs.create_file(path, contents=content)

        config = Config.from_file(path)

        assert config.root == Path("/data/shelf")
        assert config.logging.level is LogLevel.DEBUG
        assert config.logging.format is LogFormat.TEXT
        assert config.source == path

    def test_raises_file_not_found_for_missing_file(self, fs: FakeFilesystem) -> None:
        with pytest.raises(FileNotFoundError):
            _ = Config.from_file(Path("/test/missing.toml"))

    def test_raises_config_load_error_for_invalid_toml(self, fs: FakeFilesystem) -> None:
        content = """
[section
key = "unclosed bracket"
"""
        path = Path("/test/invalid.toml")
        fs.create_file(path, contents=content)

        with pytest.raises(ConfigLoadError) as exc_info:
            _ = Config.from_file(path)

        assert exc_info.value.path == path
        assert exc_info.value.line == 2


class TestConfigLoad:
    def test_reads_config_from_storage_root(
        self, fs: FakeFilesystem, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PROMPTSHELF_STORAGE__ROOT", "/shelf")
        fs.create_file(f"/shelf/{CONFIG_FILE_NAME}", contents='[logging]\nlevel = "warning"\n')

        config = Config.load()

        assert config.root == Path("/shelf")
        assert config.logging.level is LogLevel.WARNING
        assert config.source == Path("/shelf") / CONFIG_FILE_NAME

    def test_missing_file_uses_defaults(
        self, fs: FakeFilesystem, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PROMPTSHELF_STORAGE__ROOT", "/empty")

        config = Config.load()

        assert config.logging.level is LogLevel.INFO
        assert config.source is None

    def test_env_overrides_file(
        self, fs: FakeFilesystem, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        fs.create_file("/cfg.toml", contents='[logging]\nlevel = "warning"\n')
        monkeypatch.setenv("PROMPTSHELF_LOGGING__LEVEL", "error")

        config = Config.load(Path("/cfg.toml"))

        assert config.logging.level is LogLevel.ERROR

    def test_env_can_be_excluded(
        self, fs: FakeFilesystem, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        fs.create_file("/cfg.toml", contents='[logging]\nlevel = "warning"\n')
        monkeypatch.setenv("PROMPTSHELF_LOGGING__LEVEL", "error")

        config = Config.load(Path("/cfg.toml"), include_env=False)

        assert config.logging.level is LogLevel.WARNING

    def test_explicit_missing_path(self, fs: FakeFilesystem) -> None:
        with pytest.raises(FileNotFoundError):
            _ = Config.load(Path("/nope.toml"), include_env=False)


class TestConfigAccess:
    def test_get_dotted_key(self) -> None:
        config = Config.from_dict({"logging": {"level": "debug"}})

        assert config.get("logging.level") == "debug"
        assert config.get("storage.missing") is None
        assert config.get("nonexistent", "fallback") == "fallback"

    def test_unknown_sections_are_kept(self) -> None:
        config = Config.from_dict({"custom": {"key": 1}})

        assert config.get("custom.key") == 1

    def test_to_dict_is_a_copy(self) -> None:
        config = Config.from_dict({})

        data = config.to_dict()
        data["logging"]["level"] = "error"

        assert config.get("logging.level") == "info"


class TestConfigWrite:
    def test_to_toml_round_trips(self) -> None:
        config = Config.from_dict({"storage": {"root": "/shelf"}})

        parsed = tomllib.loads(config.to_toml())

        assert parsed["storage"]["root"] == "/shelf"
        assert parsed["logging"]["level"] == "info"

    def test_write_defaults_to_storage_root(self, tmp_path: Path) -> None:
        config = Config.from_dict({"storage": {"root": str(tmp_path / "shelf")}})

        written = config.write()

        assert written == tmp_path / "shelf" / CONFIG_FILE_NAME
        assert Config.from_file(written).root == tmp_path / "shelf"
