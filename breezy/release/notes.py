from __future__ import annotations

from collections.abc import Iterable, Sequence

from breezy.core.config import ReleaseConfig, normalize_labels
from breezy.release.model import PullRequestRecord


OTHER_CHANGES_TITLE = "Other Changes"


def _merge_key(pull_request: PullRequestRecord) -> tuple[bool, str]:
    # Unmerged timestamps sort first.
    return (pull_request.merged_at is not None, pull_request.merged_at or "")


def ordered_pull_requests(pull_requests: Sequence[PullRequestRecord]) -> list[PullRequestRecord]:
    """Drop duplicate numbers (first occurrence wins), then order by merge time."""
    seen: set[int] = set()
    unique: list[PullRequestRecord] = []
    for pr in pull_requests:
        if pr.number in seen:
            continue
        seen.add(pr.number)
        unique.append(pr)
    return sorted(unique, key=_merge_key)


def _labels_match(labels: Iterable[str], wanted: Iterable[str]) -> bool:
    wanted_set = set(normalize_labels(list(wanted)))
    if not wanted_set:
        return False
    return not wanted_set.isdisjoint(normalize_labels(list(labels)))


def is_excluded(pull_request: PullRequestRecord, config: ReleaseConfig) -> bool:
    return _labels_match(pull_request.labels, config.exclude_labels)


def apply_change_template(template: str, pull_request: PullRequestRecord) -> str:
    return (
        template.replace("$TITLE", pull_request.title)
        .replace("$AUTHOR", pull_request.author)
        .replace("$NUMBER", str(pull_request.number))
        .replace("$PR_URL", pull_request.url)
    )


def build_changes(pull_requests: Sequence[PullRequestRecord], config: ReleaseConfig) -> str:
    """Render the categorized changelog, without marker or wrapping template."""
    included = [pr for pr in ordered_pull_requests(pull_requests) if not is_excluded(pr, config)]

    lines: list[str] = []
    claimed: set[int] = set()

    for category in config.categories:
        section: list[str] = []
        for pr in included:
            if pr.number in claimed or not _labels_match(pr.labels, category.labels):
                continue
            claimed.add(pr.number)
            section.append(apply_change_template(config.change_template, pr))
        if section:
            lines.append(f"## {category.title}")
            lines.extend(section)
            lines.append("")

    other = [
        apply_change_template(config.change_template, pr)
        for pr in included
        if pr.number not in claimed
    ]
    if other:
        if config.categories:
            lines.append(f"## {OTHER_CHANGES_TITLE}")
        lines.extend(other)
        lines.append("")

    while lines and not lines[-1]:
        lines.pop()

    return "\n".join(lines)


def build_release_notes(
    marker: str,
    pull_requests: Sequence[PullRequestRecord],
    config: ReleaseConfig | None = None,
) -> str:
    """Compose the full draft body: the marker, a blank line, then the changelog.

    Collapses to the bare marker when there is nothing to list.
    """
    if config is None:
        titles = [pr.title for pr in ordered_pull_requests(pull_requests)]
        if not titles:
            return marker
        return "\n".join([marker, "", *titles])

    changes = build_changes(pull_requests, config)
    body = config.template.replace("$CHANGES", changes) if config.template is not None else changes
    if not body.strip():
        return marker
    return f"{marker}\n\n{body}"
