"""Tests for settings merging and config files."""

import json

import pytest

from args import parse_args
from cli_config import build_settings, load_config_file, resolve_token
from common.errors import ConfigurationError
from constants import Platform


class TestLoadConfigFile:
    """load_config_file."""

    def test_yaml_keys_normalized(self, tmp_path):
        path = tmp_path / "taginfo.yml"
        path.write_text("tag-type: release\nbase_url: https://git.example.com\ntag-format:\n  - X.X.X\n", encoding="utf-8")
        assert load_config_file(str(path)) == {
            "tag_type": "release",
            "base_url": "https://git.example.com",
            "tag_format": ["X.X.X"],
        }

    def test_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"platform": "gitea"}), encoding="utf-8")
        assert load_config_file(str(path)) == {"platform": "gitea"}

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")
        assert load_config_file(str(path)) == {}

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Config file not found"):
            load_config_file(str(tmp_path / "nope.yml"))

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_config_file(str(path))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("key: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Failed to load config file"):
            load_config_file(str(path))

    def test_default_location(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert load_config_file() == {}
        (tmp_path / ".taginfo.yml").write_text("platform: bitbucket\n", encoding="utf-8")
        assert load_config_file() == {"platform": "bitbucket"}


class TestBuildSettings:
    """build_settings precedence and validation."""

    def test_defaults(self):
        settings = build_settings(parse_args(["v1.0.0"]), {}, env={})
        assert settings.tag_name == "v1.0.0"
        assert settings.tag_type == "tags"
        assert settings.platform == "auto"
        assert settings.output_format == "json"
        assert settings.ignore_cert_errors is False
        assert settings.tag_format is None
        assert settings.wants_latest is False

    def test_cli_beats_config_beats_env(self):
        args = parse_args(["latest", "--platform", "gitea"])
        config = {"platform": "github", "owner": "from-config"}
        env = {"TAGINFO_PLATFORM": "bitbucket", "TAGINFO_OWNER": "from-env", "TAGINFO_REPO": "from-env"}
        settings = build_settings(args, config, env=env)
        assert settings.platform == "gitea"
        assert settings.owner == "from-config"
        assert settings.repo == "from-env"
        assert settings.wants_latest

    def test_tag_format_from_cli(self):
        args = parse_args(["latest", "--tag-format", "vX.X.X", "--tag-format", '["X.X.X", "X.X"]'])
        assert build_settings(args, {}, env={}).tag_format == ["vX.X.X", "X.X.X", "X.X"]

    def test_skip_certificate_check_from_env(self):
        settings = build_settings(parse_args(["v1"]), {}, env={"TAGINFO_SKIP_CERTIFICATE_CHECK": "true"})
        assert settings.ignore_cert_errors is True

    def test_skip_certificate_check_from_config(self):
        settings = build_settings(parse_args(["v1"]), {"skip_certificate_check": "no"}, env={})
        assert settings.ignore_cert_errors is False

    def test_invalid_boolean(self):
        with pytest.raises(ConfigurationError, match="Invalid boolean"):
            build_settings(parse_args(["v1"]), {"skip_certificate_check": "maybe"}, env={})

    def test_token_not_read_from_prefixed_env(self):
        settings = build_settings(parse_args(["v1"]), {}, env={"TAGINFO_TOKEN": "t"})
        assert settings.token is None

    @pytest.mark.parametrize("config,message", [
        ({"tag_type": "branches"}, "Invalid tag type"),
        ({"platform": "gitlab"}, "Unsupported platform"),
        ({"base_url": "git.example.com"}, "Invalid base URL format"),
        ({"output_format": "xml"}, "Invalid output format"),
    ])
    def test_invalid_values(self, config, message):
        with pytest.raises(ConfigurationError, match=message):
            build_settings(parse_args(["v1"]), config, env={})

    def test_blank_tag_name(self):
        with pytest.raises(ConfigurationError, match="tag-name is required"):
            build_settings(parse_args(["  "]), {}, env={})


class TestResolveToken:
    """resolve_token."""

    ENV = {"GITHUB_TOKEN": "gh", "GITEA_TOKEN": "gt", "BITBUCKET_TOKEN": "bb"}

    def test_explicit_token(self):
        assert resolve_token("mine", "github", self.ENV) == "mine"

    @pytest.mark.parametrize("platform,expected", [
        (Platform.GITHUB, "gh"),
        ("gitea", "gt"),
        (Platform.BITBUCKET, "bb"),
        ("auto", "gh"),
        (None, "gh"),
    ])
    def test_platform_variables(self, platform, expected):
        assert resolve_token(None, platform, self.ENV) == expected

    def test_gitea_falls_back_to_github_token(self):
        assert resolve_token(None, "gitea", {"GITHUB_TOKEN": "gh"}) == "gh"

    def test_no_token(self):
        assert resolve_token(None, "bitbucket", {"GITHUB_TOKEN": "gh"}) is None
