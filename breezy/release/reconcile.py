"""One reconciliation pass: make the forge hold exactly one up-to-date draft.

Order of operations:

1. resolve the version and everything derived from it (no forge calls)
2. list releases, delete redundant drafts
3. decide whether a draft is needed at all
4. compose notes from merged pull requests, then update or create the draft

Any failure in step 1 leaves the forge untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from breezy.core.config import ReleaseConfig
from breezy.core.inputs import RunSettings
from breezy.core.result import Err, Ok, Result
from breezy.forge.timeouts import MAX_PER_PAGE
from breezy.output.console import ConsoleProtocol, Style
from breezy.release.errors import ReleaseError
from breezy.release.model import ReconcileOutcome
from breezy.release.naming import (
    format_scope_label,
    release_marker,
    resolve_release_name,
    resolve_tag_name,
)
from breezy.release.notes import build_release_notes
from breezy.release.selection import (
    changes_since,
    select_draft_releases,
    select_latest_published,
    should_skip_creation,
)
from breezy.release.version import is_prerelease, parse_languages, resolve_version

if TYPE_CHECKING:
    from breezy.forge.github import ForgeClient


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    """Identity of the draft this run maintains."""

    version: str
    tag_name: str
    name: str
    marker: str
    prerelease: bool
    scope: str


def resolve_languages(
    language: str, config: ReleaseConfig | None
) -> Result[list[str], ReleaseError]:
    """Archetypes from the ``language`` input, falling back to the config default."""
    source = language.strip()
    if not source and config is not None and config.language:
        source = config.language.strip()
    if not source:
        return Err(ReleaseError(kind="invalid_input", message="Missing required input: language"))

    languages = parse_languages(source)
    if not languages:
        return Err(ReleaseError(kind="invalid_input", message="No language archetypes provided."))
    return Ok(languages)


def plan_release(
    settings: RunSettings,
    config: ReleaseConfig | None,
    *,
    repo_root: Path,
) -> Result[ReleasePlan, ReleaseError]:
    languages = resolve_languages(settings.language, config)
    if isinstance(languages, Err):
        return languages

    version_root = repo_root / settings.directory if settings.directory else repo_root
    info = resolve_version(version_root, languages.value)
    if isinstance(info, Err):
        return info

    version = info.value.version
    tag_name = resolve_tag_name(version, settings.tag_prefix, settings.directory, config)
    return Ok(
        ReleasePlan(
            version=version,
            tag_name=tag_name,
            name=resolve_release_name(
                version, tag_name, settings.branch, settings.directory, config
            ),
            marker=release_marker(settings.branch, settings.directory),
            prerelease=is_prerelease(version),
            scope=format_scope_label(settings.branch, settings.directory),
        )
    )


def reconcile(
    settings: RunSettings,
    config: ReleaseConfig | None,
    forge: ForgeClient,
    console: ConsoleProtocol,
    *,
    repo_root: Path,
    page_size: int = MAX_PER_PAGE,
) -> Result[ReconcileOutcome, ReleaseError]:
    """Run one reconciliation pass for ``settings.branch``.

    With ``settings.dry_run`` every forge read still happens but deletions,
    updates and creations are only reported.
    """
    planned = plan_release(settings, config, repo_root=repo_root)
    if isinstance(planned, Err):
        return planned
    plan = planned.value
    dry_run = settings.dry_run

    console.print(f"version {plan.version} -> {plan.tag_name} ({plan.scope})", Style.DIM)

    releases = forge.list_all_releases(page_size)
    if isinstance(releases, Err):
        return releases

    selection = select_draft_releases(releases.value, plan.marker)
    for extra_id in selection.extras:
        if dry_run:
            console.info(f"Would delete extra draft release {extra_id} for {plan.scope}")
            continue
        removed = forge.delete_release(extra_id)
        if isinstance(removed, Err):
            return removed
        console.print(f"Deleted extra draft release {extra_id} for {plan.scope}")
    deleted = () if dry_run else selection.extras

    # Scoped drafts share the branch with other sub-projects; only releases
    # carrying the same marker count as "ours".
    marker_filter = plan.marker if settings.directory else None
    latest_published = select_latest_published(releases.value, settings.branch, marker_filter)

    skip = should_skip_creation(
        selection, latest_published, settings.current_sha, forge.resolve_commit_sha
    )
    if isinstance(skip, Err):
        return skip
    if skip.value:
        console.print(
            f"Skipping draft release for {plan.scope} because a published release "
            f"already exists for commit {settings.current_sha or 'unknown'}"
        )
        return Ok(
            ReconcileOutcome(
                action="skipped",
                scope=plan.scope,
                tag_name=plan.tag_name,
                release_id=None,
                deleted=deleted,
                dry_run=dry_run,
            )
        )

    pull_requests = forge.search_merged_pull_requests(
        settings.branch, changes_since(latest_published), page_size
    )
    if isinstance(pull_requests, Err):
        return pull_requests

    body = build_release_notes(plan.marker, pull_requests.value, config)

    if selection.primary is not None:
        if dry_run:
            console.info(f"Would update draft release {selection.primary} for {plan.scope}")
            console.print(body, Style.DIM)
        else:
            updated = forge.update_release(
                selection.primary,
                plan.tag_name,
                plan.name,
                body,
                plan.prerelease,
                settings.branch,
            )
            if isinstance(updated, Err):
                return updated
            console.success(f"Updated draft release {selection.primary} for {plan.scope}")
        return Ok(
            ReconcileOutcome(
                action="updated",
                scope=plan.scope,
                tag_name=plan.tag_name,
                release_id=selection.primary,
                deleted=deleted,
                dry_run=dry_run,
            )
        )

    release_id: int | None = None
    if dry_run:
        console.info(f"Would create draft release for {plan.scope}")
        console.print(body, Style.DIM)
    else:
        created = forge.create_release(
            plan.tag_name, plan.name, body, plan.prerelease, settings.branch
        )
        if isinstance(created, Err):
            return created
        release_id = created.value.id
        console.success(f"Created draft release for {plan.scope}")

    return Ok(
        ReconcileOutcome(
            action="created",
            scope=plan.scope,
            tag_name=plan.tag_name,
            release_id=release_id,
            deleted=deleted,
            dry_run=dry_run,
        )
    )
