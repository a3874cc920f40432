"""최근 커밋 수집 로직.

PushEvent에서 커밋을 추출한다.
- payload.commits가 있으면 그대로 사용
- 없고 payload.head만 있으면 단일 커밋 API로 상세 조회 (실행 단위 캐시)
- 두 경로 모두 하나의 sha 집합으로 중복 제거
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import httpx

from readme_activity.github_api import GitHubApiClient
from readme_activity.models import PUSH_EVENT, GitHubEvent

logger = logging.getLogger(__name__)

_GITHUB_WEB = "https://github.com"
_DEFAULT_MESSAGE = "Update"


@dataclass(frozen=True)
class CommitRecord:
    """README 표의 커밋 1행."""

    repo_name: str
    repo_url: str
    message: str
    url: str
    short_sha: str
    occurred_at: str


@dataclass(frozen=True)
class CommitDetail:
    message: str
    url: str | None
    date: str | None


def first_line(message: str | None) -> str:
    return (message or _DEFAULT_MESSAGE).split("\n", 1)[0]


def commit_url(repo_name: str, sha: str) -> str:
    return f"{_GITHUB_WEB}/{repo_name}/commit/{sha}"


@dataclass
class CommitDetailResolver:
    """단일 커밋 상세 조회기.

    성공한 조회 결과만 (repo, sha) 키로 캐시한다. 인스턴스 수명이 곧 캐시 수명이다.
    """

    api: GitHubApiClient
    _cache: dict[tuple[str, str], CommitDetail] = field(default_factory=dict, init=False)

    def resolve(self, repo_name: str, sha: str) -> CommitDetail | None:
        key = (repo_name, sha)
        if key in self._cache:
            return self._cache[key]

        try:
            result = self.api.fetch_commit_detail(repo_name, sha)
        except httpx.HTTPError as exc:
            logger.warning(
                "Error fetching commit %s for %s: %s", sha, repo_name, exc,
                extra={"repo": repo_name, "sha": sha},
            )
            return None

        if result.error or not isinstance(result.data, dict):
            logger.warning(
                "Unable to fetch commit %s for %s: %d", sha, repo_name, result.status_code,
                extra={"repo": repo_name, "sha": sha},
            )
            return None

        data = result.data
        detail = CommitDetail(
            message=first_line(data.get("message")),
            url=data.get("html_url"),
            date=data.get("author_date") or data.get("committer_date"),
        )
        self._cache[key] = detail
        return detail

    @property
    def cache_size(self) -> int:
        return len(self._cache)


def collect_recent_commits(
    events: Iterable[GitHubEvent],
    resolver: CommitDetailResolver,
    *,
    limit: int,
    lookback_days: int,
    now: datetime | None = None,
) -> list[CommitRecord]:
    """이벤트 피드에서 최근 커밋을 최대 limit건 수집한다."""
    since = (now or datetime.now(tz=UTC)) - timedelta(days=lookback_days)
    records: list[CommitRecord] = []
    seen: set[str] = set()

    for event in events:
        if event.type != PUSH_EVENT:
            continue

        occurred_at = event.occurred_at
        if occurred_at is None or occurred_at < since:
            continue

        repo_name = event.repo_name
        if not repo_name:
            continue
        repo_url = f"{_GITHUB_WEB}/{repo_name}"
        event_time = occurred_at.isoformat().replace("+00:00", "Z")

        inline_commits = event.payload.get("commits")
        if isinstance(inline_commits, list) and inline_commits:
            for commit in inline_commits:
                sha = commit.get("sha") if isinstance(commit, dict) else None
                if not sha or sha in seen:
                    continue
                seen.add(sha)

                records.append(
                    CommitRecord(
                        repo_name=repo_name,
                        repo_url=repo_url,
                        message=first_line(commit.get("message")),
                        url=commit_url(repo_name, sha),
                        short_sha=sha[:7],
                        occurred_at=event_time,
                    )
                )
                if len(records) >= limit:
                    return _finish(records, resolver)
            continue

        head_sha = event.payload.get("head")
        if not head_sha or head_sha in seen:
            continue

        detail = resolver.resolve(repo_name, head_sha)
        if detail is None:
            continue
        seen.add(head_sha)

        records.append(
            CommitRecord(
                repo_name=repo_name,
                repo_url=repo_url,
                message=detail.message,
                url=detail.url or commit_url(repo_name, head_sha),
                short_sha=head_sha[:7],
                occurred_at=detail.date or event_time,
            )
        )
        if len(records) >= limit:
            break

    return _finish(records, resolver)


def _finish(records: list[CommitRecord], resolver: CommitDetailResolver) -> list[CommitRecord]:
    logger.info(
        "Collected %d commits (detail lookups cached=%d)",
        len(records), resolver.cache_size,
        extra={"counts": {"commits": len(records), "cached_details": resolver.cache_size}},
    )
    return records
