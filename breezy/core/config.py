"""Typed loading of the ``breezy.yml`` release configuration.

The file is optional. When no explicit path is given, the first existing
file wins:

1. ``$HOME/.github/breezy.yml``
2. ``<cwd>/.github/breezy.yml``

Example::

    language: rust
    tag-template: "v$VERSION"
    name-template: "Release $VERSION"
    categories:
      - title: Features
        labels: [feature, enhancement]
      - title: Fixes
        label: bug
    exclude-labels: [skip-changelog]
    change-template: "* $TITLE @$AUTHOR (#$NUMBER)"
    template: |
      ## What's changed

      $CHANGES
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import yaml

from .result import Err, Ok, Result
from .structured import ObjList, StrDict, as_obj_list, as_str_dict, get_raw_str, get_str

__all__ = [
    "ConfigError",
    "DEFAULT_CHANGE_TEMPLATE",
    "ReleaseCategory",
    "ReleaseConfig",
    "default_config_paths",
    "load_config",
    "normalize_labels",
    "read_config",
]

CONFIG_FILE_NAME = "breezy.yml"
DEFAULT_CHANGE_TEMPLATE = "$TITLE"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the config file cannot be found, read or parsed."""

    message: str
    path: Path | None = None


def normalize_labels(labels: list[str]) -> tuple[str, ...]:
    """Trim and lowercase labels, dropping the ones left empty."""
    out: list[str] = []
    for label in labels:
        norm = label.strip().lower()
        if norm:
            out.append(norm)
    return tuple(out)


@dataclass(frozen=True, slots=True)
class ReleaseCategory:
    """A changelog section matched by pull request label."""

    title: str
    labels: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Release configuration, read-only for the whole run."""

    language: str | None = None
    tag_template: str | None = None
    name_template: str | None = None
    categories: tuple[ReleaseCategory, ...] = ()
    exclude_labels: tuple[str, ...] = ()
    change_template: str = DEFAULT_CHANGE_TEMPLATE
    template: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create ReleaseConfig from a mapping (parsed YAML)."""
        categories: list[ReleaseCategory] = []
        for item in _list_value(data, "categories") or []:
            raw = as_str_dict(item)
            if raw is None:
                raise ValueError("each category must be a mapping")
            title = get_raw_str(raw, "title")
            if title is None:
                raise ValueError("each category requires a title")

            labels = _string_list(raw, "labels")
            single = raw.get("label")
            if single is not None:
                if not isinstance(single, str):
                    raise ValueError(f"category '{title}': label must be a string")
                labels.append(single)
            categories.append(ReleaseCategory(title=title, labels=normalize_labels(labels)))

        language = get_str(data, "language")
        template = get_raw_str(data, "template")

        return cls(
            language=language.lower() if language else None,
            tag_template=_trimmed(data, "tag-template"),
            name_template=_trimmed(data, "name-template"),
            categories=tuple(categories),
            exclude_labels=normalize_labels(_string_list(data, "exclude-labels")),
            change_template=get_str(data, "change-template") or DEFAULT_CHANGE_TEMPLATE,
            template=template.strip() if template is not None else None,
        )


def _list_value(data: Mapping[str, object], key: str) -> ObjList | None:
    """Return the list under ``key``; None when absent or null.

    Raises:
        ValueError: The key holds something other than a list.
    """
    value = data.get(key)
    if value is None:
        return None
    items = as_obj_list(value)
    if items is None:
        raise ValueError(f"'{key}' must be a list")
    return items


def _string_list(data: Mapping[str, object], key: str) -> list[str]:
    items = _list_value(data, key) or []
    if not all(isinstance(item, str) for item in items):
        raise ValueError(f"'{key}' must only contain strings")
    return [item for item in items if isinstance(item, str)]


def _trimmed(data: Mapping[str, object], key: str) -> str | None:
    value = get_raw_str(data, key)
    if value is None:
        return None
    return value.strip()


def _parse_yaml(path: Path) -> Result[StrDict, ConfigError]:
    try:
        document: object = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError(f"Failed to read config file {path}: {e}", path=path))
    except yaml.YAMLError as e:
        return Err(ConfigError(f"Invalid config YAML: {e}", path=path))

    if document is None:
        return Ok({})
    data = as_str_dict(document)
    if data is None:
        return Err(ConfigError("Config root must be a YAML mapping", path=path))
    return Ok(data)


def read_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Parse a single config file."""
    result = _parse_yaml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except ValueError as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def _expand(raw: str, cwd: Path, home: Path | None) -> Result[Path, ConfigError]:
    if raw == "~" or raw.startswith("~/"):
        if home is None:
            return Err(ConfigError("HOME is not set."))
        return Ok(home / raw[2:] if raw != "~" else home)

    path = Path(raw)
    if path.is_absolute():
        return Ok(path)
    return Ok(cwd / path)


def _home_dir() -> Path | None:
    home = os.environ.get("HOME")
    return Path(home) if home else None


def default_config_paths(cwd: Path, home: Path | None) -> list[Path]:
    """Candidate config locations, in lookup order."""
    paths: list[Path] = []
    if home is not None:
        paths.append(home / ".github" / CONFIG_FILE_NAME)
    paths.append(cwd / ".github" / CONFIG_FILE_NAME)
    return paths


def load_config(
    explicit: str | None,
    cwd: Path,
    home: Path | None = None,
) -> Result[ReleaseConfig | None, ConfigError]:
    """Locate and load the release configuration.

    Args:
        explicit: Path from the ``config-file`` input; it must exist when set.
        cwd: Repository root, used for relative paths and the repo default.
        home: Home directory; defaults to ``$HOME``.

    Returns:
        Ok(None) when no explicit path is given and no default file exists.
    """
    if home is None:
        home = _home_dir()

    if explicit is not None and explicit.strip():
        resolved = _expand(explicit.strip(), cwd, home)
        if isinstance(resolved, Err):
            return resolved
        path = resolved.value
        if not path.exists():
            return Err(ConfigError(f"Config file not found: {path}", path=path))
        return read_config(path)

    for candidate in default_config_paths(cwd, home):
        if candidate.is_file():
            return read_config(candidate)

    return Ok(None)
