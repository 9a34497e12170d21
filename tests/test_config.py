"""Tests for config loading and policy merging."""

import logging
from argparse import Namespace
from unittest.mock import MagicMock, patch

import pytest

from pacgraph.common.http_client import robust_get
from pacgraph.config import Policy, apply_config, load_config, resolve_policy
from pacgraph.constants import Constants
from pacgraph.errors import DatabaseError


@pytest.fixture
def restore_constants(monkeypatch):
    """Let monkeypatch restore every attribute apply_config may touch."""
    for attr in ("AUR_RPC_URL", "AUR_BATCH_SIZE", "AUR_MAX_WORKERS", "REQUEST_TIMEOUT",
                 "HTTP_RETRY_MAX", "HTTP_RETRY_BASE_DELAY_SEC", "PACMAN_DBPATH", "PACMAN_CONFIG"):
        monkeypatch.setattr(Constants, attr, getattr(Constants, attr))


def cli_args(**overrides):
    values = dict(SKIP_INSTALLED=False, TRUNCATE=False, NO_UNKNOWN=False, IGNORE_REPOS=[], DEPS=None)
    values.update(overrides)
    return Namespace(**values)


class TestLoadConfig:
    """Reading the YAML file."""

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("aur:\n  batch_size: 50\n")
        assert load_config(str(path)) == {"aur": {"batch_size": 50}}

    def test_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("resolve:\n  truncate: true\n")
        monkeypatch.setenv(Constants.CONFIG_ENV, str(path))
        assert load_config() == {"resolve": {"truncate": True}}

    def test_missing_file(self, tmp_path):
        assert load_config(str(tmp_path / "absent.yaml")) == {}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("aur: [unclosed\n")
        with pytest.raises(DatabaseError):
            load_config(str(path))

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(DatabaseError):
            load_config(str(path))


class TestApplyConfig:
    """Overriding Constants."""

    def test_known_keys(self, restore_constants):
        apply_config({
            "aur": {"url": "https://aur.example/rpc/", "batch_size": "20"},
            "http": {"timeout": 5},
            "pacman": {"dbpath": "/tmp/db"},
        })
        assert Constants.AUR_RPC_URL == "https://aur.example/rpc/"
        assert Constants.AUR_BATCH_SIZE == 20
        assert Constants.REQUEST_TIMEOUT == 5
        assert Constants.PACMAN_DBPATH == "/tmp/db"

    def test_invalid_value_ignored(self, restore_constants):
        before = Constants.AUR_MAX_WORKERS
        apply_config({"aur": {"max_workers": "many"}})
        assert Constants.AUR_MAX_WORKERS == before

    @pytest.mark.parametrize("section,key,attr,value", [
        ("http", "retries", "HTTP_RETRY_MAX", 0),
        ("http", "retries", "HTTP_RETRY_MAX", -2),
        ("aur", "batch_size", "AUR_BATCH_SIZE", 0),
        ("aur", "max_workers", "AUR_MAX_WORKERS", "-1"),
        ("http", "timeout", "REQUEST_TIMEOUT", 0),
        ("http", "retry_delay", "HTTP_RETRY_BASE_DELAY_SEC", -0.5),
    ])
    def test_non_positive_value_ignored(self, restore_constants, caplog, section, key, attr, value):
        before = getattr(Constants, attr)
        with caplog.at_level(logging.WARNING, logger="pacgraph.config"):
            apply_config({section: {key: value}})
        assert getattr(Constants, attr) == before
        assert "non-positive" in caplog.text

    @patch("pacgraph.common.http_client.requests.get")
    def test_zero_retries_still_sends_request(self, mock_get, restore_constants):
        res = MagicMock()
        res.status_code = 200
        res.text = "{}"
        res.headers = {}
        mock_get.return_value = res
        apply_config({"http": {"retries": 0, "timeout": 0}})
        status, _, _ = robust_get("https://aur.example/rpc/")
        assert status == 200
        assert mock_get.call_count == 1
        assert mock_get.call_args[1]["timeout"] == Constants.REQUEST_TIMEOUT > 0

    def test_unrelated_sections_ignored(self, restore_constants):
        before = Constants.AUR_RPC_URL
        apply_config({"aur": "not a mapping", "other": {"url": "x"}})
        assert Constants.AUR_RPC_URL == before


class TestResolvePolicy:
    """Merging config and command line."""

    def test_defaults(self):
        assert resolve_policy({}) == Policy()

    def test_from_config(self):
        cfg = {"resolve": {"skip_installed": True, "ignore_repos": "testing", "deps": "depends"}}
        policy = resolve_policy(cfg, cli_args())
        assert policy.skip_installed
        assert not policy.truncate
        assert policy.ignore_repos == ["testing"]
        assert policy.deps == "depends"

    def test_cli_wins(self):
        cfg = {"resolve": {"ignore_repos": ["testing"], "deps": "depends"}}
        policy = resolve_policy(cfg, cli_args(TRUNCATE=True, NO_UNKNOWN=True,
                                              IGNORE_REPOS=["custom"], DEPS="makedepends"))
        assert policy.truncate and policy.no_unknown
        assert policy.ignore_repos == ["custom"]
        assert policy.deps == "makedepends"

    def test_unknown_dependency_kind(self):
        with pytest.raises(DatabaseError):
            resolve_policy({"resolve": {"deps": "checkdepends"}})

    @pytest.mark.parametrize("key,value", [
        ("truncate", "false"),
        ("no_unknown", "no"),
        ("skip_installed", 1),
    ])
    def test_flags_must_be_booleans(self, key, value):
        with pytest.raises(DatabaseError, match=key):
            resolve_policy({"resolve": {key: value}})

    def test_boolean_flags_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("resolve:\n  truncate: false\n  no_unknown: yes\n")
        policy = resolve_policy(load_config(str(path)))
        assert not policy.truncate
        assert policy.no_unknown

    def test_resolve_section_must_be_mapping(self):
        with pytest.raises(DatabaseError):
            resolve_policy({"resolve": ["truncate"]})
