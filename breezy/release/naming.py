from __future__ import annotations

from breezy.core.config import ReleaseConfig


def release_marker(branch: str, directory: str | None = None) -> str:
    """Return the body marker identifying the managed draft for a scope.

    The branch is embedded verbatim; a branch name containing ``-->`` yields a
    marker that no longer parses as a single HTML comment.
    """
    if directory:
        return f"<!-- breezy:branch={branch};directory={directory} -->"
    return f"<!-- breezy:branch={branch} -->"


def format_scope_label(branch: str, directory: str | None) -> str:
    if directory is not None and directory.strip():
        return f"{branch}/{directory}"
    return branch


def apply_template(template: str, version: str, directory: str | None) -> str:
    return template.replace("$VERSION", version).replace("$DIRECTORY", directory or "")


def resolve_tag_name(
    version: str,
    tag_prefix: str,
    directory: str | None,
    config: ReleaseConfig | None,
) -> str:
    if config is not None and config.tag_template is not None:
        return apply_template(config.tag_template, version, directory)
    return f"{tag_prefix.strip()}{version}"


def resolve_release_name(
    version: str,
    tag_name: str,
    branch: str,
    directory: str | None,
    config: ReleaseConfig | None,
) -> str:
    if config is not None and config.name_template is not None:
        return apply_template(config.name_template, version, directory)
    return f"{tag_name} ({format_scope_label(branch, directory)})"
