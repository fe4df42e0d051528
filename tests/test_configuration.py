"""Tests for Configuration parsing, editing and resolution."""

import pytest

from repofarm.domain import Category, Configuration, Link, RepoEntry, RepoFlag
from repofarm.exit_codes import (
    CONFIG_ERROR,
    ConfigError,
    DanglingReferenceError,
    DuplicateKeyError,
)
from repofarm.services.resolver import resolve, resolve_all, validate
from repofarm.domain.store import EntryStore


DOCUMENT = {
    "repos": {
        "gg": {"path": "~/src", "url": "git@host:me/gg.git", "flags": ["clone", "push"]},
        "notes": {"path": "~/src", "url": "git@host:me/notes.git"},
    },
    "categories": {
        "dots": {
            "flags": ["quick"],
            "repos": {"gg": None, "nvim": {"path": "~/src", "url": "git@host:me/nvim.git"}},
            "links": {"nvim": {"tx": "~/src/nvim", "rx": "~/.config/nvim"}},
        },
        "work": {"repos": ["notes", "gg"]},
    },
    "links": {"gitconfig": {"tx": "~/src/dots/gitconfig", "rx": "~/.gitconfig"}},
}


class TestConfigurationFromDict:
    """Tests for building a Configuration from a document."""

    def test_store_holds_each_repository_once(self):
        config = Configuration.from_dict(DOCUMENT)
        assert sorted(config.store.keys()) == ["gg", "notes", "nvim"]

    def test_categories_keep_declared_key_order(self):
        config = Configuration.from_dict(DOCUMENT)
        assert list(config.categories) == ["dots", "work"]
        assert config.categories["dots"].repo_keys == ("gg", "nvim")
        assert config.categories["work"].repo_keys == ("notes", "gg")

    def test_category_flags_and_links(self):
        config = Configuration.from_dict(DOCUMENT)
        dots = config.category("dots")
        assert dots.has_flag(RepoFlag.QUICK)
        assert dots.links == (Link(tx="~/src/nvim", rx="~/.config/nvim"),)

    def test_global_links(self):
        config = Configuration.from_dict(DOCUMENT)
        assert [l.name for l in config.links] == ["gitconfig"]
        assert len(config.all_links()) == 2

    def test_shared_entry_resolves_to_same_object(self):
        config = Configuration.from_dict(DOCUMENT)
        dots = resolve(config.categories["dots"], config.store)
        work = resolve(config.categories["work"], config.store)
        assert dots[0] is work[1]

    def test_inline_definition_overrides_store(self):
        config = Configuration.from_dict({
            "repos": {"gg": {"path": "/old"}},
            "categories": {"dots": {"repos": {"gg": {"path": "/new"}}}},
        })
        assert config.store.get("gg").path == "/new"

    def test_inline_list_entries(self):
        config = Configuration.from_dict({
            "categories": {"dots": {"repos": [{"name": "gg", "path": "/src"}]}},
        })
        assert config.store.get("gg") == RepoEntry(name="gg", path="/src")

    def test_empty_document(self):
        config = Configuration.from_dict(None)
        assert len(config.store) == 0
        assert config.categories == {}

    def test_category_without_repos(self):
        config = Configuration.from_dict({"categories": {"empty": None}})
        assert config.categories["empty"].repo_keys == ()

    def test_dangling_reference(self):
        with pytest.raises(DanglingReferenceError) as exc_info:
            Configuration.from_dict({
                "repos": {"A": {"path": "/a"}, "B": {"path": "/b"}},
                "categories": {"dev": {"repos": ["A", "B", "C"]}},
            })
        assert exc_info.value.key == "C"
        assert exc_info.value.category == "dev"
        assert exc_info.value.exit_code == CONFIG_ERROR

    def test_skip_validation(self):
        config = Configuration.from_dict(
            {"categories": {"dev": {"repos": ["C"]}}},
            validate=False,
        )
        with pytest.raises(DanglingReferenceError):
            config.validate()

    def test_duplicate_key_in_category_list(self):
        with pytest.raises(DuplicateKeyError, match="Duplicate key 'gg'"):
            Configuration.from_dict({
                "repos": {"gg": {"path": "/src"}},
                "categories": {"dots": {"repos": ["gg", "gg"]}},
            })

    def test_unknown_top_level_section(self):
        with pytest.raises(ConfigError, match="Unknown top-level sections: hooks"):
            Configuration.from_dict({"hooks": {}})

    def test_unknown_category_field(self):
        with pytest.raises(ConfigError, match="unknown fields"):
            Configuration.from_dict({"categories": {"dots": {"repo": ["gg"]}}})

    def test_repos_must_be_mapping(self):
        with pytest.raises(ConfigError):
            Configuration.from_dict({"repos": ["gg"]})

    def test_inline_list_entry_needs_name(self):
        with pytest.raises(ConfigError, match="needs a name"):
            Configuration.from_dict({"categories": {"dots": {"repos": [{"path": "/src"}]}}})

    def test_non_string_inline_path_rejected_before_running(self):
        # A later well-formed entry must not make the document acceptable
        with pytest.raises(ConfigError, match="'a' path must be a string"):
            Configuration.from_dict({"categories": {"dev": {"repos": {
                "a": {"path": 123},
                "b": {"path": "/tmp"},
            }}}})

    def test_list_reference_must_be_a_name(self):
        with pytest.raises(ConfigError, match="Repository name"):
            Configuration.from_dict({"repos": {"gg": {}}, "categories": {"dots": {"repos": [["gg"]]}}})


class TestConfigurationEditing:
    """Tests for with_repo / with_link / to_dict."""

    def test_with_repo_adds_to_store_and_category(self):
        config = Configuration.from_dict(DOCUMENT)
        updated = config.with_repo(RepoEntry(name="new", path="/src"), "work")

        assert "new" in updated.store
        assert updated.categories["work"].repo_keys == ("notes", "gg", "new")
        # Original untouched
        assert "new" not in config.store

    def test_with_repo_creates_category(self):
        config = Configuration.from_dict({})
        updated = config.with_repo(RepoEntry(name="gg"), "fresh")
        assert updated.categories["fresh"] == Category(name="fresh", repo_keys=("gg",))

    def test_with_repo_replace_does_not_duplicate_reference(self):
        config = Configuration.from_dict(DOCUMENT)
        updated = config.with_repo(RepoEntry(name="gg", path="/elsewhere"), "work")
        assert updated.categories["work"].repo_keys == ("notes", "gg")
        assert updated.store.get("gg").path == "/elsewhere"

    def test_with_link_global_and_category(self):
        config = Configuration.from_dict({})
        link = Link(tx="a", rx="b", name="ab")
        updated = config.with_link(link).with_link(link, "dots")
        assert updated.links == (link,)
        assert updated.categories["dots"].links == (link,)
        assert updated.with_link(link) is updated

    def test_to_dict_round_trips_to_equal_configuration(self):
        config = Configuration.from_dict(DOCUMENT)
        document = config.to_dict()
        assert document["categories"]["dots"]["repos"] == ["gg", "nvim"]
        assert Configuration.from_dict(document) == config


class TestResolver:
    """Tests for the resolver service."""

    def test_resolve_in_declared_order(self):
        store = EntryStore([RepoEntry(name="a"), RepoEntry(name="b")])
        category = Category(name="c", repo_keys=("b", "a"))
        assert [e.name for e in resolve(category, store)] == ["b", "a"]

    def test_resolve_dangling(self):
        with pytest.raises(DanglingReferenceError, match="Unknown repository 'x'"):
            resolve(Category(name="c", repo_keys=("x",)), EntryStore())

    def test_resolve_all(self):
        config = Configuration.from_dict(DOCUMENT)
        resolved = resolve_all(config)
        assert set(resolved) == {"dots", "work"}
        assert [e.name for e in resolved["work"]] == ["notes", "gg"]

    def test_validate_ok(self):
        validate(Configuration.from_dict(DOCUMENT))
