"""최근 Pull Request 수집 로직.

공개 이벤트 피드에서 PullRequestEvent만 골라 README 표의 행으로 변환한다.
- lookback 윈도우 밖의 이벤트 제외
- PR html_url 기준 중복 제거 (먼저 등장한 것 우선)
- limit 도달 시 즉시 반환 (남은 페이지는 요청하지 않음)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from readme_activity.models import PULL_REQUEST_EVENT, GitHubEvent

logger = logging.getLogger(__name__)

_GITHUB_WEB = "https://github.com"


@dataclass(frozen=True)
class PullRequestRecord:
    """README 표의 PR 1행."""

    repo_name: str
    repo_url: str
    title: str
    url: str
    status: str
    date: str | None


def derive_status(pr: dict[str, Any]) -> str:
    """merged > closed > draft > open 우선순위로 상태를 결정한다."""
    if pr.get("merged_at"):
        return "Merged"
    if pr.get("state") == "closed":
        return "Closed"
    if pr.get("draft"):
        return "Draft"
    return "Open"


def _dig(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _repo_from_api_url(pr: dict[str, Any]) -> str | None:
    """https://api.github.com/repos/{owner}/{repo}/pulls/{n} → owner/repo"""
    url = pr.get("url") or ""
    if "/repos/" not in url:
        return None
    parts = url.split("/repos/", 1)[1].split("/")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return None
    return f"{parts[0]}/{parts[1]}"


_Extractor = Callable[[GitHubEvent, dict[str, Any]], str | None]

# 앞에서부터 처음으로 값이 나오는 추출기를 사용
_REPO_NAME_EXTRACTORS: list[_Extractor] = [
    lambda event, pr: _dig(pr, "head", "repo", "full_name"),
    lambda event, pr: event.repo_name,
    lambda event, pr: _dig(pr, "base", "repo", "full_name"),
    lambda event, pr: _repo_from_api_url(pr),
]

_REPO_URL_EXTRACTORS: list[_Extractor] = [
    lambda event, pr: _dig(pr, "base", "repo", "html_url"),
    lambda event, pr: f"{_GITHUB_WEB}/{event.repo_name}" if event.repo_name else None,
    lambda event, pr: pr["html_url"].split("/pull/", 1)[0],
]


def _first_match(
    extractors: list[_Extractor], event: GitHubEvent, pr: dict[str, Any], default: str,
) -> str:
    for extract in extractors:
        if value := extract(event, pr):
            return value
    return default


def build_record(event: GitHubEvent, pr: dict[str, Any]) -> PullRequestRecord:
    """PullRequestEvent payload에서 표 1행을 만든다. pr["html_url"]은 필수."""
    return PullRequestRecord(
        repo_name=_first_match(_REPO_NAME_EXTRACTORS, event, pr, "Unknown"),
        repo_url=_first_match(_REPO_URL_EXTRACTORS, event, pr, pr["html_url"]),
        title=pr.get("title") or "Pull request",
        url=pr["html_url"],
        status=derive_status(pr),
        date=pr.get("merged_at") or pr.get("closed_at") or pr.get("created_at") or event.created_at,
    )


def collect_recent_pull_requests(
    events: Iterable[GitHubEvent],
    *,
    limit: int,
    lookback_days: int,
    include_drafts: bool = False,
    now: datetime | None = None,
) -> list[PullRequestRecord]:
    """이벤트 피드에서 최근 PR을 최대 limit건 수집한다.

    - PullRequestEvent가 아니면 스킵
    - created_at 파싱 실패 또는 (now - lookback_days) 이전이면 스킵
    - payload.pull_request.html_url이 없으면 스킵
    - include_drafts가 아니면 draft PR 스킵
    - 이미 본 html_url이면 스킵
    """
    since = (now or datetime.now(tz=UTC)) - timedelta(days=lookback_days)
    records: list[PullRequestRecord] = []
    seen: set[str] = set()

    for event in events:
        if event.type != PULL_REQUEST_EVENT:
            continue

        occurred_at = event.occurred_at
        if occurred_at is None or occurred_at < since:
            continue

        pr = event.payload.get("pull_request")
        if not isinstance(pr, dict) or not pr.get("html_url"):
            continue
        if not include_drafts and pr.get("draft"):
            continue

        key = pr["html_url"]
        if key in seen:
            continue
        seen.add(key)

        records.append(build_record(event, pr))
        if len(records) >= limit:
            break

    logger.info(
        "Collected %d pull requests (limit=%d, lookback_days=%d)",
        len(records), limit, lookback_days,
        extra={"counts": {"pull_requests": len(records)}},
    )
    return records
