from __future__ import annotations

import json
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from breezy.core.result import Err, Ok, Result
from breezy.core.structured import as_str_dict
from breezy.release.errors import ReleaseError
from breezy.release.model import VersionInfo


_LANGUAGE_SPLIT_RE = re.compile(r"[\s,+]+")

_PACKAGE_SECTION = "package"
_WORKSPACE_SECTION = "workspace.package"


@dataclass(frozen=True, slots=True)
class Archetype:
    """A project ecosystem convention: where the version lives and how to read it."""

    name: str
    manifest: str
    parse: Callable[[str], Result[str, ReleaseError]]


def _read_quoted(value: str) -> str | None:
    if not value or value[0] not in {'"', "'"}:
        return None
    quote = value[0]
    end = value.find(quote, 1)
    if end == -1:
        return None
    return value[1:end]


def _version_assignment(line: str) -> str | None:
    if not line.startswith("version"):
        return None
    rest = line[len("version") :].lstrip()
    if not rest.startswith("="):
        return None
    return _read_quoted(rest[1:].lstrip())


def parse_cargo_version(content: str) -> str | None:
    """Read the version declared in a Cargo.toml.

    ``[package]`` wins over ``[workspace.package]`` regardless of the order
    the sections appear in.
    """
    found: dict[str, str] = {}
    section: str | None = None

    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        if line.startswith("["):
            header = line.split("#", 1)[0].rstrip()
            if header.endswith("]"):
                section = header.strip("[]").replace(" ", "")
                continue

        if section not in {_PACKAGE_SECTION, _WORKSPACE_SECTION} or section in found:
            continue

        version = _version_assignment(line)
        if version is not None:
            found[section] = version

    if _PACKAGE_SECTION in found:
        return found[_PACKAGE_SECTION]
    return found.get(_WORKSPACE_SECTION)


def _parse_cargo_manifest(content: str) -> Result[str, ReleaseError]:
    version = parse_cargo_version(content)
    if version is None:
        return Err(
            ReleaseError(
                kind="version_invalid",
                message="Cargo.toml does not declare a [package] or [workspace.package] version.",
            )
        )
    return Ok(version)


def _parse_package_json(content: str) -> Result[str, ReleaseError]:
    try:
        obj: object = json.loads(content)
    except json.JSONDecodeError as e:
        return Err(
            ReleaseError(kind="version_invalid", message=f"package.json is not valid JSON: {e}")
        )

    data = as_str_dict(obj)
    version = data.get("version") if data is not None else None
    if not isinstance(version, str):
        return Err(
            ReleaseError(
                kind="version_invalid",
                message="package.json does not declare a version field.",
            )
        )
    return Ok(version)


ARCHETYPES: dict[str, Archetype] = {
    "rust": Archetype(name="rust", manifest="Cargo.toml", parse=_parse_cargo_manifest),
    "node": Archetype(name="node", manifest="package.json", parse=_parse_package_json),
}


def parse_languages(text: str) -> list[str]:
    """Split a language input such as ``"rust, node"`` or ``"rust+node"``."""
    return [part.lower() for part in _LANGUAGE_SPLIT_RE.split(text.strip()) if part]


def _resolve_with(archetype: Archetype, root: Path) -> Result[VersionInfo | None, ReleaseError]:
    manifest = root / archetype.manifest
    if not manifest.is_file():
        return Ok(None)

    try:
        content = manifest.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            ReleaseError(
                kind="version_invalid",
                message=f"failed to read {archetype.manifest}: {e}",
                hint=str(manifest),
            )
        )

    parsed = archetype.parse(content)
    if isinstance(parsed, Err):
        return Err(
            ReleaseError(kind=parsed.error.kind, message=parsed.error.message, hint=str(manifest))
        )
    return Ok(VersionInfo(version=parsed.value))


def resolve_version(root: Path, languages: list[str]) -> Result[VersionInfo, ReleaseError]:
    """Resolve the project version from the first manifest found.

    Archetypes are tried in the order given. A missing manifest moves on to
    the next archetype; a manifest without a usable version is an error.
    """
    unknown = [language for language in languages if language not in ARCHETYPES]
    if unknown:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"Unknown language archetype(s): {', '.join(unknown)}",
                hint=f"supported: {', '.join(ARCHETYPES)}",
            )
        )

    attempted: list[str] = []
    for language in languages:
        result = _resolve_with(ARCHETYPES[language], root)
        if isinstance(result, Err):
            return result
        if result.value is not None:
            return Ok(result.value)
        attempted.append(language)

    return Err(
        ReleaseError(
            kind="version_missing",
            message=(
                f"Unable to determine version from {', '.join(attempted)}. "
                "Ensure the expected version file exists."
            ),
            hint=str(root),
        )
    )


def is_prerelease(version: str) -> bool:
    """Return True for ``MAJOR.MINOR.PATCH-<pre>`` versions.

    Build metadata (``+...``) is ignored. Anything that is not a strict
    numeric triple followed by a non-empty suffix is not a prerelease.
    """
    core = version.split("+", 1)[0]
    base, sep, pre = core.partition("-")
    if not sep or not pre:
        return False

    parts = base.split(".")
    if len(parts) != 3:
        return False
    return all(part and part.isascii() and part.isdigit() for part in parts)
