from __future__ import annotations

from time import sleep
from typing import Protocol
from urllib.parse import quote, urlencode

from breezy.core.result import Err, Ok, Result
from breezy.core.structured import (
    StrDict,
    as_obj_list,
    as_str_dict,
    get_bool,
    get_int,
    get_list,
    get_raw_str,
    get_str,
    get_table,
)
from breezy.forge.http import HttpClient, HttpError
from breezy.forge.timeouts import MAX_PER_PAGE, READ_RETRY_ATTEMPTS, READ_RETRY_DELAY_SECONDS
from breezy.release.errors import ReleaseError
from breezy.release.model import PullRequestRecord, Release


API_BASE = "https://api.github.com"
API_VERSION = "2022-11-28"
USER_AGENT = "breezy"


class ForgeClient(Protocol):
    """Operations reconciliation needs from the forge."""

    def list_all_releases(self, page_size: int) -> Result[list[Release], ReleaseError]: ...

    def delete_release(self, release_id: int) -> Result[None, ReleaseError]: ...

    def create_release(
        self,
        tag_name: str,
        name: str,
        body: str,
        prerelease: bool,
        target_ref: str,
    ) -> Result[Release, ReleaseError]: ...

    def update_release(
        self,
        release_id: int,
        tag_name: str,
        name: str,
        body: str,
        prerelease: bool,
        target_ref: str,
    ) -> Result[Release, ReleaseError]: ...

    def search_merged_pull_requests(
        self,
        branch: str,
        since: str | None,
        page_size: int,
    ) -> Result[list[PullRequestRecord], ReleaseError]: ...

    def resolve_commit_sha(self, tag_name: str) -> Result[str, ReleaseError]: ...


def parse_release(data: StrDict) -> Release | None:
    """Build a Release from a REST payload; None if required fields are missing."""
    release_id = get_int(data, "id")
    draft = get_bool(data, "draft")
    created_at = get_str(data, "created_at")
    if release_id is None or draft is None or created_at is None:
        return None

    return Release(
        id=release_id,
        body=get_raw_str(data, "body"),
        draft=draft,
        target_ref=get_raw_str(data, "target_commitish") or "",
        created_at=created_at,
        published_at=get_str(data, "published_at"),
        tag_name=get_raw_str(data, "tag_name") or "",
    )


def parse_search_item(data: StrDict, *, repo_slug: str) -> PullRequestRecord | None:
    number = get_int(data, "number")
    title = get_raw_str(data, "title")
    if number is None or title is None:
        return None

    user = get_table(data, "user")
    author = (get_str(user, "login") if user is not None else None) or "unknown"

    labels: list[str] = []
    for item in get_list(data, "labels") or []:
        label = as_str_dict(item)
        name = get_raw_str(label, "name") if label is not None else None
        if name is not None:
            labels.append(name)

    merged_at = get_str(data, "merged_at")
    if merged_at is None:
        pr_tbl = get_table(data, "pull_request")
        if pr_tbl is not None:
            merged_at = get_str(pr_tbl, "merged_at")

    return PullRequestRecord(
        number=number,
        title=title,
        author=author,
        labels=tuple(labels),
        url=f"https://github.com/{repo_slug}/pull/{number}",
        merged_at=merged_at,
    )


def build_search_query(repo_slug: str, branch: str, since: str | None) -> str:
    parts = [f"repo:{repo_slug}", "is:pr", "is:merged", f"base:{branch}"]
    if since is not None:
        parts.append(f"merged:>={since}")
    return " ".join(parts)


def clamp_page_size(page_size: int) -> int:
    # GitHub caps per_page at 100.
    return min(max(1, page_size), MAX_PER_PAGE)

class GitHubClient:
    """GitHub REST client for one repository.

    Reads are retried on transient failures (network, 429, 5xx). Writes
    are sent exactly once.
    """

    def __init__(
        self,
        http: HttpClient,
        *,
        token: str,
        owner: str,
        repo: str,
        retry_attempts: int = READ_RETRY_ATTEMPTS,
    ) -> None:
        self._http = http
        self.owner = owner
        self.repo = repo
        self._retry_attempts = max(1, retry_attempts)
        self._headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
            "X-GitHub-Api-Version": API_VERSION,
            "Authorization": f"Bearer {token}",
        }

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"

    def _repo_url(self, path: str) -> str:
        return f"{API_BASE}/repos/{self.owner}/{self.repo}/{path}"

    def _failed(self, message: str, error: HttpError) -> ReleaseError:
        return ReleaseError(kind="forge_failed", message=message, hint=str(error))

    def _get(self, url: str, *, message: str) -> Result[object, ReleaseError]:
        for attempt in range(self._retry_attempts):
            result = self._http.request_json("GET", url, headers=self._headers)
            if isinstance(result, Ok):
                return result

            error = result.error
            if attempt < self._retry_attempts - 1 and error.is_transient:
                sleep(READ_RETRY_DELAY_SECONDS * (attempt + 1))
                continue
            return Err(self._failed(message, error))

        return Err(ReleaseError(kind="forge_failed", message=message))

    def _send(
        self,
        method: str,
        url: str,
        *,
        payload: dict[str, object] | None,
        message: str,
    ) -> Result[object, ReleaseError]:
        result = self._http.request_json(method, url, headers=self._headers, payload=payload)
        return result.map_err(lambda error: self._failed(message, error))

    def list_all_releases(self, page_size: int) -> Result[list[Release], ReleaseError]:
        page_size = clamp_page_size(page_size)
        releases: list[Release] = []
        page = 1
        while True:
            query = urlencode({"per_page": page_size, "page": page})
            url = f"{self._repo_url('releases')}?{query}"
            obj = self._get(url, message="Failed to list releases.")
            if isinstance(obj, Err):
                return obj

            items = as_obj_list(obj.value)
            if items is None:
                return Err(
                    ReleaseError(
                        kind="forge_failed",
                        message=f"unexpected releases payload: {self.slug}",
                    )
                )

            for item in items:
                data = as_str_dict(item)
                release = parse_release(data) if data is not None else None
                if release is not None:
                    releases.append(release)

            if len(items) < page_size:
                return Ok(releases)
            page += 1

    def delete_release(self, release_id: int) -> Result[None, ReleaseError]:
        result = self._send(
            "DELETE",
            self._repo_url(f"releases/{release_id}"),
            payload=None,
            message=f"Failed to delete release {release_id}.",
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def _release_payload(
        self,
        tag_name: str,
        name: str,
        body: str,
        prerelease: bool,
        target_ref: str,
    ) -> dict[str, object]:
        return {
            "tag_name": tag_name,
            "name": name,
            "body": body,
            "draft": True,
            "prerelease": prerelease,
            "target_commitish": target_ref,
        }

    def _parse_written(self, obj: object, action: str) -> Result[Release, ReleaseError]:
        data = as_str_dict(obj)
        release = parse_release(data) if data is not None else None
        if release is None:
            return Err(
                ReleaseError(
                    kind="forge_failed",
                    message=f"unexpected payload after {action} release",
                )
            )
        return Ok(release)

    def create_release(
        self,
        tag_name: str,
        name: str,
        body: str,
        prerelease: bool,
        target_ref: str,
    ) -> Result[Release, ReleaseError]:
        result = self._send(
            "POST",
            self._repo_url("releases"),
            payload=self._release_payload(tag_name, name, body, prerelease, target_ref),
            message="Failed to create release.",
        )
        if isinstance(result, Err):
            return result
        return self._parse_written(result.value, "create")

    def update_release(
        self,
        release_id: int,
        tag_name: str,
        name: str,
        body: str,
        prerelease: bool,
        target_ref: str,
    ) -> Result[Release, ReleaseError]:
        result = self._send(
            "PATCH",
            self._repo_url(f"releases/{release_id}"),
            payload=self._release_payload(tag_name, name, body, prerelease, target_ref),
            message=f"Failed to update release {release_id}.",
        )
        if isinstance(result, Err):
            return result
        return self._parse_written(result.value, "update")

    def search_merged_pull_requests(
        self,
        branch: str,
        since: str | None,
        page_size: int,
    ) -> Result[list[PullRequestRecord], ReleaseError]:
        page_size = clamp_page_size(page_size)
        q = build_search_query(self.slug, branch, since)
        pull_requests: list[PullRequestRecord] = []
        page = 1
        while True:
            query = urlencode({"q": q, "per_page": page_size, "page": page})
            url = f"{API_BASE}/search/issues?{query}"
            obj = self._get(url, message="Failed to search pull requests.")
            if isinstance(obj, Err):
                return obj

            data = as_str_dict(obj.value)
            items = get_list(data, "items") if data is not None else None
            if items is None:
                return Err(ReleaseError(kind="forge_failed", message="unexpected search payload"))

            for item in items:
                entry = as_str_dict(item)
                pr = parse_search_item(entry, repo_slug=self.slug) if entry is not None else None
                if pr is not None:
                    pull_requests.append(pr)

            if len(items) < page_size:
                return Ok(pull_requests)
            page += 1

    def resolve_commit_sha(self, tag_name: str) -> Result[str, ReleaseError]:
        url = self._repo_url(f"commits/{quote(tag_name, safe='/')}")
        obj = self._get(url, message=f"Failed to resolve commit for tag {tag_name}.")
        if isinstance(obj, Err):
            return obj

        data = as_str_dict(obj.value)
        sha = get_str(data, "sha") if data is not None else None
        if sha is None:
            return Err(
                ReleaseError(
                    kind="forge_failed",
                    message=f"missing sha in commit payload: {tag_name}",
                )
            )
        return Ok(sha)
