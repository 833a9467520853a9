from __future__ import annotations

import pytest

from breezy.core.inputs import (
    SettingsOverrides,
    input_key,
    read_input,
    resolve_branch,
    resolve_current_sha,
    resolve_directory,
    resolve_repository,
    resolve_settings,
)
from breezy.core.result import Err, Ok

BASE_ENV = {
    "GITHUB_REF_NAME": "main",
    "GITHUB_REPOSITORY": "acme/widget",
    "GITHUB_SHA": "abc123",
    "GITHUB_TOKEN": "env-token",
    "INPUT_LANGUAGE": "rust",
}


def test_input_key() -> None:
    assert input_key("language") == "INPUT_LANGUAGE"
    assert input_key("tag-prefix") == "INPUT_TAG-PREFIX"
    assert input_key("config file") == "INPUT_CONFIG_FILE"


def test_read_input_accepts_underscore_spelling() -> None:
    assert read_input({"INPUT_TAG-PREFIX": "r"}, "tag-prefix") == "r"
    assert read_input({"INPUT_TAG_PREFIX": "r"}, "tag-prefix") == "r"
    assert read_input({}, "tag-prefix") is None


class TestResolveBranch:
    def test_head_ref_wins(self) -> None:
        env = {"GITHUB_HEAD_REF": "feature", "GITHUB_REF_NAME": "42/merge"}
        assert resolve_branch(env) == Ok("feature")

    def test_blank_head_ref_is_skipped(self) -> None:
        env = {"GITHUB_HEAD_REF": "", "GITHUB_REF_NAME": "main"}
        assert resolve_branch(env) == Ok("main")

    def test_ref_fallback(self) -> None:
        assert resolve_branch({"GITHUB_REF": "refs/heads/release/1.x"}) == Ok("release/1.x")

    def test_tag_ref_is_not_a_branch(self) -> None:
        result = resolve_branch({"GITHUB_REF": "refs/tags/v1.0.0"})
        assert isinstance(result, Err)
        assert "branch" in result.error.message


class TestResolveRepository:
    def test_valid(self) -> None:
        assert resolve_repository({"GITHUB_REPOSITORY": "acme/widget"}) == Ok(("acme", "widget"))

    def test_missing(self) -> None:
        assert isinstance(resolve_repository({}), Err)

    @pytest.mark.parametrize("value", ["acme", "/widget", "acme/", ""])
    def test_malformed(self, value: str) -> None:
        result = resolve_repository({"GITHUB_REPOSITORY": value})
        assert isinstance(result, Err)
        assert "owner/repo" in result.error.message


def test_current_sha() -> None:
    assert resolve_current_sha({"GITHUB_SHA": " abc "}) == "abc"
    assert resolve_current_sha({"GITHUB_SHA": ""}) is None
    assert resolve_current_sha({}) is None


class TestResolveDirectory:
    @pytest.mark.parametrize("raw", [None, "", "  ", ".", "./", "././"])
    def test_root(self, raw: str | None) -> None:
        assert resolve_directory(raw) == Ok(None)

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("crates/core", "crates/core"),
            ("crates/core/", "crates/core"),
            ("./crates/core", "crates/core"),
            (" packages/web ", "packages/web"),
        ],
    )
    def test_relative(self, raw: str, expected: str) -> None:
        assert resolve_directory(raw) == Ok(expected)

    @pytest.mark.parametrize("raw", ["/abs/path", "C:\\work\\repo"])
    def test_absolute_rejected(self, raw: str) -> None:
        result = resolve_directory(raw)
        assert isinstance(result, Err)
        assert "relative" in result.error.message


class TestResolveSettings:
    def test_from_environment(self) -> None:
        result = resolve_settings(BASE_ENV)
        assert isinstance(result, Ok)
        settings = result.value
        assert settings.branch == "main"
        assert settings.owner == "acme"
        assert settings.repo == "widget"
        assert settings.token == "env-token"
        assert settings.current_sha == "abc123"
        assert settings.language == "rust"
        assert settings.tag_prefix == "v"
        assert settings.directory is None
        assert settings.config_file is None
        assert settings.dry_run is False

    def test_inputs(self) -> None:
        env = {
            **BASE_ENV,
            "INPUT_GITHUB-TOKEN": "input-token",
            "INPUT_TAG-PREFIX": "",
            "INPUT_DIRECTORY": "./crates/core",
            "INPUT_CONFIG-FILE": ".github/release.yml",
        }
        result = resolve_settings(env)
        assert isinstance(result, Ok)
        settings = result.value
        assert settings.token == "input-token"
        assert settings.tag_prefix == ""
        assert settings.directory == "crates/core"
        assert settings.config_file == ".github/release.yml"

    def test_overrides_win(self) -> None:
        overrides = SettingsOverrides(
            directory="packages/web",
            tag_prefix="release-",
            language="node",
            token="cli-token",
            dry_run=True,
        )
        result = resolve_settings({**BASE_ENV, "INPUT_DIRECTORY": "ignored"}, overrides)
        assert isinstance(result, Ok)
        settings = result.value
        assert settings.directory == "packages/web"
        assert settings.tag_prefix == "release-"
        assert settings.language == "node"
        assert settings.token == "cli-token"
        assert settings.dry_run is True

    def test_language_may_be_empty(self) -> None:
        env = {k: v for k, v in BASE_ENV.items() if k != "INPUT_LANGUAGE"}
        result = resolve_settings(env)
        assert isinstance(result, Ok)
        assert result.value.language == ""

    def test_missing_token(self) -> None:
        env = {k: v for k, v in BASE_ENV.items() if k != "GITHUB_TOKEN"}
        result = resolve_settings(env)
        assert isinstance(result, Err)
        assert "token" in result.error.message

    def test_missing_branch(self) -> None:
        env = {k: v for k, v in BASE_ENV.items() if k != "GITHUB_REF_NAME"}
        assert isinstance(resolve_settings(env), Err)

    def test_absolute_directory(self) -> None:
        result = resolve_settings({**BASE_ENV, "INPUT_DIRECTORY": "/etc"})
        assert isinstance(result, Err)
        assert result.error.hint == "/etc"
