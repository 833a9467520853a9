from __future__ import annotations

from breezy.core.result import Err, Ok, Result
from breezy.release.errors import ReleaseError
from breezy.release.model import DraftSelection, Release
from breezy.release.selection import (
    carries_marker,
    changes_since,
    published_release_matches_commit,
    select_draft_releases,
    select_latest_published,
    should_skip_creation,
)

MARKER = "<!-- breezy:branch=main -->"


def _release(
    id: int,
    *,
    draft: bool = True,
    body: str | None = MARKER,
    target_ref: str = "main",
    created_at: str = "2024-01-01T00:00:00Z",
    published_at: str | None = None,
    tag_name: str = "v1.0.0",
) -> Release:
    return Release(
        id=id,
        body=body,
        draft=draft,
        target_ref=target_ref,
        created_at=created_at,
        published_at=published_at,
        tag_name=tag_name,
    )


def _never_called(tag: str) -> Result[str, ReleaseError]:
    raise AssertionError(f"unexpected commit lookup for {tag}")


def test_carries_marker_handles_missing_body() -> None:
    assert carries_marker(_release(1, body=f"{MARKER}\n\nnotes"), MARKER)
    assert not carries_marker(_release(1, body=None), MARKER)
    assert not carries_marker(_release(1, body="<!-- breezy:branch=dev -->"), MARKER)


class TestSelectDraftReleases:
    def test_empty(self) -> None:
        assert select_draft_releases([], MARKER) == DraftSelection(primary=None, extras=())

    def test_newest_is_primary_rest_are_extras(self) -> None:
        releases = [
            _release(1, created_at="2024-01-01T00:00:00Z"),
            _release(2, created_at="2024-03-01T00:00:00Z"),
            _release(3, created_at="2024-02-01T00:00:00Z"),
        ]
        selection = select_draft_releases(releases, MARKER)
        assert selection.primary == 2
        assert selection.extras == (3, 1)

    def test_ignores_published_and_foreign_drafts(self) -> None:
        releases = [
            _release(1, draft=False, created_at="2024-05-01T00:00:00Z"),
            _release(2, body="<!-- breezy:branch=dev -->", created_at="2024-04-01T00:00:00Z"),
            _release(3, body=None),
            _release(4, created_at="2024-02-01T00:00:00Z"),
        ]
        selection = select_draft_releases(releases, MARKER)
        assert selection == DraftSelection(primary=4, extras=())

    def test_primary_never_in_extras(self) -> None:
        releases = [_release(i, created_at=f"2024-01-0{i}T00:00:00Z") for i in range(1, 6)]
        selection = select_draft_releases(releases, MARKER)
        assert selection.primary is not None
        assert selection.primary not in selection.extras
        assert len(selection.extras) == 4

    def test_ties_keep_input_order(self) -> None:
        releases = [_release(7), _release(3), _release(5)]
        first = select_draft_releases(releases, MARKER)
        second = select_draft_releases(releases, MARKER)
        assert first == second
        assert first == DraftSelection(primary=7, extras=(3, 5))


class TestSelectLatestPublished:
    def test_none_when_no_published(self) -> None:
        assert select_latest_published([_release(1)], "main") is None

    def test_filters_by_branch(self) -> None:
        releases = [
            _release(1, draft=False, target_ref="dev", published_at="2024-06-01T00:00:00Z"),
            _release(2, draft=False, published_at="2024-01-01T00:00:00Z"),
        ]
        latest = select_latest_published(releases, "main")
        assert latest is not None
        assert latest.id == 2

    def test_published_at_falls_back_to_created_at(self) -> None:
        releases = [
            _release(1, draft=False, published_at="2024-02-01T00:00:00Z"),
            _release(2, draft=False, created_at="2024-03-01T00:00:00Z", published_at=None),
        ]
        latest = select_latest_published(releases, "main")
        assert latest is not None
        assert latest.id == 2

    def test_marker_filter(self) -> None:
        scoped = "<!-- breezy:branch=main;directory=crates/core -->"
        releases = [
            _release(1, draft=False, body=MARKER, published_at="2024-05-01T00:00:00Z"),
            _release(2, draft=False, body=scoped, published_at="2024-04-01T00:00:00Z"),
        ]
        unscoped = select_latest_published(releases, "main")
        latest = select_latest_published(releases, "main", scoped)
        assert unscoped is not None and unscoped.id == 1
        assert latest is not None and latest.id == 2


def test_changes_since() -> None:
    assert changes_since(None) is None
    assert changes_since(_release(1, published_at="2024-02-02T00:00:00Z")) == "2024-02-02T00:00:00Z"
    assert changes_since(_release(1, created_at="2024-01-05T00:00:00Z")) == "2024-01-05T00:00:00Z"


class TestSkipCreation:
    def test_direct_sha_match(self) -> None:
        published = _release(1, draft=False, target_ref="abc123")
        result = published_release_matches_commit(published, "abc123", _never_called)
        assert result == Ok(True)

    def test_tag_resolved_to_sha(self) -> None:
        published = _release(1, draft=False, tag_name="v1.0.0")
        lookups: list[str] = []

        def resolve(tag: str) -> Result[str, ReleaseError]:
            lookups.append(tag)
            return Ok("abc123")

        assert published_release_matches_commit(published, "abc123", resolve) == Ok(True)
        assert published_release_matches_commit(published, "def456", resolve) == Ok(False)
        assert lookups == ["v1.0.0", "v1.0.0"]

    def test_blank_tag_does_not_match(self) -> None:
        published = _release(1, draft=False, tag_name="  ")
        assert published_release_matches_commit(published, "abc123", _never_called) == Ok(False)

    def test_lookup_failure_propagates(self) -> None:
        published = _release(1, draft=False)
        failure = ReleaseError(kind="forge_failed", message="boom")

        result = published_release_matches_commit(published, "abc123", lambda _: Err(failure))
        assert result == Err(failure)

    def test_never_skips_with_existing_draft(self) -> None:
        published = _release(2, draft=False, target_ref="abc123")
        selection = DraftSelection(primary=1, extras=())
        assert should_skip_creation(selection, published, "abc123", _never_called) == Ok(False)

    def test_requires_published_and_sha(self) -> None:
        empty = DraftSelection(primary=None, extras=())
        published = _release(2, draft=False, target_ref="abc123")
        assert should_skip_creation(empty, None, "abc123", _never_called) == Ok(False)
        assert should_skip_creation(empty, published, None, _never_called) == Ok(False)

    def test_skips_when_published_matches(self) -> None:
        empty = DraftSelection(primary=None, extras=())
        published = _release(2, draft=False, target_ref="abc123")
        assert should_skip_creation(empty, published, "abc123", _never_called) == Ok(True)
