from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


ReconcileAction = Literal["created", "updated", "skipped"]


@dataclass(frozen=True, slots=True)
class Release:
    """A GitHub release as seen by the selector."""

    id: int
    body: str | None
    draft: bool
    target_ref: str  # target_commitish: a branch name or a commit sha
    created_at: str  # ISO-8601, compared lexicographically
    published_at: str | None
    tag_name: str

    @property
    def activity_at(self) -> str:
        return self.published_at or self.created_at


@dataclass(frozen=True, slots=True)
class PullRequestRecord:
    number: int
    title: str
    author: str
    labels: tuple[str, ...]
    url: str
    merged_at: str | None


@dataclass(frozen=True, slots=True)
class VersionInfo:
    version: str


@dataclass(frozen=True, slots=True)
class DraftSelection:
    primary: int | None
    extras: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class ReconcileOutcome:
    action: ReconcileAction
    scope: str
    tag_name: str
    release_id: int | None
    deleted: tuple[int, ...]
    dry_run: bool = False
