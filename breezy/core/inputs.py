"""Run settings resolved once from action inputs and the GitHub environment.

Inputs arrive as ``INPUT_<NAME>`` variables (GitHub Actions convention).
Everything is read from an explicit ``env`` mapping so the engine never
touches ``os.environ`` itself.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import PurePosixPath, PureWindowsPath

from .result import Err, Ok, Result

__all__ = [
    "InputError",
    "RunSettings",
    "SettingsOverrides",
    "input_key",
    "read_input",
    "resolve_branch",
    "resolve_current_sha",
    "resolve_directory",
    "resolve_repository",
    "resolve_settings",
]

DEFAULT_TAG_PREFIX = "v"


@dataclass(frozen=True, slots=True)
class InputError:
    """Missing or invalid run context (branch, repository, token, directory)."""

    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class RunSettings:
    branch: str
    directory: str | None
    tag_prefix: str
    token: str
    owner: str
    repo: str
    current_sha: str | None
    config_file: str | None
    language: str
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class SettingsOverrides:
    """Values given on the command line; they take precedence over inputs."""

    directory: str | None = None
    tag_prefix: str | None = None
    config_file: str | None = None
    language: str | None = None
    token: str | None = None
    dry_run: bool = False


def input_key(name: str) -> str:
    return f"INPUT_{name.replace(' ', '_').upper()}"


def read_input(env: Mapping[str, str], name: str) -> str | None:
    """Read an action input, also accepting the ``-`` -> ``_`` spelling."""
    key = input_key(name)
    if key in env:
        return env[key]

    alternate = key.replace("-", "_")
    if alternate != key and alternate in env:
        return env[alternate]
    return None


def _non_blank(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def resolve_branch(env: Mapping[str, str]) -> Result[str, InputError]:
    head = _non_blank(env.get("GITHUB_HEAD_REF"))
    if head is not None:
        return Ok(head)

    ref_name = _non_blank(env.get("GITHUB_REF_NAME"))
    if ref_name is not None:
        return Ok(ref_name)

    ref = _non_blank(env.get("GITHUB_REF"))
    if ref is not None and ref.startswith("refs/heads/"):
        return Ok(ref.removeprefix("refs/heads/"))

    return Err(
        InputError(
            "Unable to determine branch name from GitHub environment.",
            hint="set GITHUB_HEAD_REF, GITHUB_REF_NAME or GITHUB_REF",
        )
    )


def resolve_repository(env: Mapping[str, str]) -> Result[tuple[str, str], InputError]:
    repository = env.get("GITHUB_REPOSITORY")
    if repository is None:
        return Err(InputError("Missing GITHUB_REPOSITORY environment variable."))

    owner, _, repo = repository.strip().partition("/")
    if not owner or not repo:
        return Err(InputError("Invalid GITHUB_REPOSITORY value; expected owner/repo."))
    return Ok((owner, repo))


def resolve_current_sha(env: Mapping[str, str]) -> str | None:
    return _non_blank(env.get("GITHUB_SHA"))


def resolve_directory(raw: str | None) -> Result[str | None, InputError]:
    """Normalize the ``directory`` input to a repo-relative path, or None for the root."""
    value = _non_blank(raw)
    if value is None:
        return Ok(None)

    value = value.rstrip("/").rstrip("\\")
    if value in {"", "."}:
        return Ok(None)
    if PurePosixPath(value).is_absolute() or PureWindowsPath(value).is_absolute():
        return Err(
            InputError("Directory input must be a relative path within the repository.", hint=value)
        )

    while value.startswith("./"):
        value = value[2:]
    if value in {"", "."}:
        return Ok(None)
    return Ok(value)


def resolve_settings(
    env: Mapping[str, str],
    overrides: SettingsOverrides | None = None,
) -> Result[RunSettings, InputError]:
    """Build the settings for one run.

    ``language`` may still be empty here; it can come from the config file.
    """
    if overrides is None:
        overrides = SettingsOverrides()

    branch = resolve_branch(env)
    if isinstance(branch, Err):
        return branch

    raw_directory = overrides.directory
    if raw_directory is None:
        raw_directory = read_input(env, "directory")
    directory = resolve_directory(raw_directory)
    if isinstance(directory, Err):
        return directory

    token = (
        _non_blank(overrides.token)
        or _non_blank(read_input(env, "github-token"))
        or _non_blank(env.get("GITHUB_TOKEN"))
    )
    if token is None:
        return Err(
            InputError("Missing GitHub token. Set the github-token input or GITHUB_TOKEN env.")
        )

    repository = resolve_repository(env)
    if isinstance(repository, Err):
        return repository
    owner, repo = repository.value

    language = _non_blank(overrides.language) or _non_blank(read_input(env, "language"))

    tag_prefix = overrides.tag_prefix
    if tag_prefix is None:
        tag_prefix = read_input(env, "tag-prefix")

    return Ok(
        RunSettings(
            branch=branch.value,
            directory=directory.value,
            tag_prefix=DEFAULT_TAG_PREFIX if tag_prefix is None else tag_prefix,
            token=token,
            owner=owner,
            repo=repo,
            current_sha=resolve_current_sha(env),
            config_file=(
                _non_blank(overrides.config_file) or _non_blank(read_input(env, "config-file"))
            ),
            language=language or "",
            dry_run=overrides.dry_run,
        )
    )
