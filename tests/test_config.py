"""Tests for configuration loading, saving and the YAML file store."""

from pathlib import Path

import pytest
import yaml

from repofarm.config import (
    apply_env_overrides,
    get_config_path,
    get_default_settings,
    load_config,
    merge_configs,
    save_config,
)
from repofarm.domain import Configuration, Link, RepoEntry, RepoFlag
from repofarm.exit_codes import ConfigError, DanglingReferenceError, DuplicateKeyError
from repofarm.infra.file_store import YamlFileStore

CONFIG_YAML = """\
settings:
  jobs: 4
repos:
  gg:
    path: ~/src
    url: git@host:me/gg.git
    flags: [Clone, push]
categories:
  dots:
    flags: [quick]
    repos:
      gg: ~
      nvim: {path: ~/src, url: git@host:me/nvim.git}
    links:
      nvim: {tx: ~/src/nvim, rx: ~/.config/nvim}
links:
  gitconfig: {source: ~/src/dots/gitconfig, target: ~/.gitconfig}
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("REPOFARM_CONFIG", "REPOFARM_JOBS", "REPOFARM_LOGGING_LEVEL",
                "REPOFARM_QUICK_MESSAGE", "XDG_CONFIG_HOME"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML)
    return path


class TestGetConfigPath:
    """Tests for config path resolution."""

    def test_explicit_path_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv("REPOFARM_CONFIG", "/env/config.yaml")
        assert get_config_path(tmp_path / "x.yaml") == tmp_path / "x.yaml"

    def test_env_variable(self, monkeypatch):
        monkeypatch.setenv("REPOFARM_CONFIG", "/env/config.yaml")
        assert get_config_path() == Path("/env/config.yaml")

    def test_xdg_config_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_path() == tmp_path / "repofarm" / "config.yaml"

    def test_default(self):
        assert get_config_path() == Path.home() / ".config" / "repofarm" / "config.yaml"


class TestSettings:
    """Tests for defaults, merging and environment overrides."""

    def test_defaults(self):
        settings = get_default_settings()
        assert settings["jobs"] == 1
        assert settings["quick_message"] == "repofarm: quick commit"
        assert settings["logging"]["level"] == "WARNING"

    def test_merge_configs_nested(self):
        merged = merge_configs(
            {"a": 1, "logging": {"level": "WARNING", "format": "x"}},
            {"logging": {"level": "DEBUG"}, "b": 2},
        )
        assert merged == {"a": 1, "b": 2, "logging": {"level": "DEBUG", "format": "x"}}

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("REPOFARM_JOBS", "8")
        monkeypatch.setenv("REPOFARM_LOGGING_LEVEL", "DEBUG")
        monkeypatch.setenv("REPOFARM_QUICK_MESSAGE", "wip")

        settings = apply_env_overrides(get_default_settings())

        assert settings["jobs"] == 8
        assert settings["logging"]["level"] == "DEBUG"
        assert settings["quick_message"] == "wip"

    def test_unknown_env_keys_are_ignored(self, monkeypatch):
        monkeypatch.setenv("REPOFARM_NOT_A_SETTING", "1")
        assert apply_env_overrides(get_default_settings()) == get_default_settings()

    def test_config_env_is_not_a_setting(self, monkeypatch):
        monkeypatch.setenv("REPOFARM_CONFIG", "/x.yaml")
        assert "config" not in apply_env_overrides(get_default_settings())


class TestLoadConfig:
    """Tests for load_config."""

    def test_load(self, config_file):
        config = load_config(config_file)

        assert config.path == config_file
        assert config.settings["jobs"] == 4
        assert config.settings["quick_message"] == "repofarm: quick commit"
        assert config.store.get("gg").flags == frozenset({RepoFlag.CLONE, RepoFlag.PUSH})
        assert config.categories["dots"].repo_keys == ("gg", "nvim")
        assert config.links == (Link(tx="~/src/dots/gitconfig", rx="~/.gitconfig"),)

    def test_env_beats_file_settings(self, config_file, monkeypatch):
        monkeypatch.setenv("REPOFARM_JOBS", "2")
        assert load_config(config_file).settings["jobs"] == 2

    def test_load_from_env_path(self, config_file, monkeypatch):
        monkeypatch.setenv("REPOFARM_CONFIG", str(config_file))
        assert "dots" in load_config().categories

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_dangling_reference(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("categories:\n  dev:\n    repos: [A]\n")
        with pytest.raises(DanglingReferenceError):
            load_config(path)


class TestSaveConfig:
    """Tests for save_config."""

    def test_save_writes_canonical_document(self, config_file, tmp_path):
        config = load_config(config_file)
        out = tmp_path / "out.yaml"

        written = save_config(config.with_repo(RepoEntry(name="new", path="/src"), "dots"), out)

        assert written == out
        document = yaml.safe_load(out.read_text())
        assert document["settings"] == {"jobs": 4}
        assert document["repos"]["new"] == {"path": "/src"}
        assert document["categories"]["dots"]["repos"] == ["gg", "nvim", "new"]
        assert "gitconfig" in document["links"]

    def test_saved_document_loads_back(self, config_file, tmp_path):
        config = load_config(config_file)
        out = tmp_path / "out.yaml"
        save_config(config, out)
        assert load_config(out) == config

    def test_env_overrides_are_not_written(self, config_file, tmp_path, monkeypatch):
        monkeypatch.setenv("REPOFARM_JOBS", "8")
        monkeypatch.setenv("REPOFARM_QUICK_MESSAGE", "wip")
        config = load_config(config_file)
        assert config.settings["jobs"] == 8
        out = tmp_path / "out.yaml"

        save_config(config.with_repo(RepoEntry(name="new", path="/src")), out)

        assert yaml.safe_load(out.read_text())["settings"] == {"jobs": 4}

    def test_env_overrides_do_not_create_settings(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("repos:\n  gg: {path: /src}\n")
        monkeypatch.setenv("REPOFARM_JOBS", "4")

        save_config(load_config(path))

        assert "settings" not in yaml.safe_load(path.read_text())

    def test_default_settings_are_not_written(self, tmp_path):
        config = Configuration.from_dict({}, settings=get_default_settings())
        out = tmp_path / "out.yaml"
        save_config(config.with_link(Link(tx="a", rx="b", name="ab")), out)
        assert "settings" not in yaml.safe_load(out.read_text())


class TestYamlFileStore:
    """Tests for YamlFileStore."""

    def test_write_then_read(self, tmp_path):
        store = YamlFileStore(tmp_path / "nested" / "doc.yaml")
        store.write({"b": 1, "a": [1, 2]})

        assert store.exists()
        assert store.read() == {"b": 1, "a": [1, 2]}
        # Key order is preserved on disk
        assert store.path.read_text().startswith("b:")

    def test_no_temp_files_left(self, tmp_path):
        YamlFileStore(tmp_path / "doc.yaml").write({"a": 1})
        assert [p.name for p in tmp_path.iterdir()] == ["doc.yaml"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "doc.yaml"
        path.write_text("")
        assert YamlFileStore(path).read() == {}

    def test_duplicate_keys_rejected(self, tmp_path):
        path = tmp_path / "doc.yaml"
        path.write_text("repos:\n  gg: {path: /a}\n  gg: {path: /b}\n")
        with pytest.raises(DuplicateKeyError, match="Duplicate key 'gg' in line 3"):
            YamlFileStore(path).read()

    def test_unhashable_key(self, tmp_path):
        path = tmp_path / "doc.yaml"
        path.write_text("? [a, b]\n: 1\n")
        with pytest.raises(ConfigError, match="unhashable key"):
            YamlFileStore(path).read()

    def test_unhashable_key_exits_as_config_error(self, tmp_path):
        path = tmp_path / "doc.yaml"
        path.write_text("repos:\n  ? [a, b]\n  : {path: /src}\n")
        with pytest.raises(ConfigError) as excinfo:
            load_config(path)
        assert excinfo.value.exit_code == 66

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "doc.yaml"
        path.write_text("repos: [unclosed\n")
        with pytest.raises(ConfigError, match="Malformed YAML"):
            YamlFileStore(path).read()

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "doc.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            YamlFileStore(path).read()
