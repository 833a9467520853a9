from __future__ import annotations

from collections.abc import Callable, Sequence

from breezy.core.result import Ok, Result
from breezy.release.errors import ReleaseError
from breezy.release.model import DraftSelection, Release


CommitResolver = Callable[[str], Result[str, ReleaseError]]


def carries_marker(release: Release, marker: str) -> bool:
    """Return True if ``release`` is managed for the scope identified by ``marker``.

    This is the only place that correlates a forge release with a scope.
    """
    return marker in (release.body or "")


def select_draft_releases(releases: Sequence[Release], marker: str) -> DraftSelection:
    """Pick the draft to keep and the redundant drafts to delete.

    The newest managed draft (by ``created_at``) is kept. ``sorted`` is stable,
    so exact timestamp ties keep their input order.
    """
    drafts = [r for r in releases if r.draft and carries_marker(r, marker)]
    drafts = sorted(drafts, key=lambda r: r.created_at, reverse=True)
    if not drafts:
        return DraftSelection(primary=None, extras=())
    return DraftSelection(primary=drafts[0].id, extras=tuple(r.id for r in drafts[1:]))


def select_latest_published(
    releases: Sequence[Release],
    branch: str,
    marker_filter: str | None = None,
) -> Release | None:
    published = [
        r
        for r in releases
        if not r.draft
        and r.target_ref == branch
        and (marker_filter is None or carries_marker(r, marker_filter))
    ]
    if not published:
        return None
    return sorted(published, key=lambda r: r.activity_at, reverse=True)[0]


def changes_since(latest_published: Release | None) -> str | None:
    """Lower bound for the merged pull request search."""
    if latest_published is None:
        return None
    return latest_published.activity_at


def published_release_matches_commit(
    release: Release,
    current_sha: str,
    resolve_commit_sha: CommitResolver,
) -> Result[bool, ReleaseError]:
    if release.target_ref == current_sha:
        return Ok(True)

    tag_name = release.tag_name.strip()
    if not tag_name:
        return Ok(False)

    return resolve_commit_sha(tag_name).map(lambda sha: sha == current_sha)


def should_skip_creation(
    selection: DraftSelection,
    latest_published: Release | None,
    current_sha: str | None,
    resolve_commit_sha: CommitResolver,
) -> Result[bool, ReleaseError]:
    """Decide whether this run must not create a draft.

    An existing draft is always kept current. Without one, creation is
    skipped when the latest published release already points at the commit
    being built, so publishing does not immediately spawn an empty draft.
    """
    if selection.primary is not None:
        return Ok(False)
    if latest_published is None or not current_sha:
        return Ok(False)
    return published_release_matches_commit(latest_published, current_sha, resolve_commit_sha)
