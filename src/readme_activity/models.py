"""GitHub 공개 이벤트 피드 데이터 모델 (Pydantic)."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

PULL_REQUEST_EVENT = "PullRequestEvent"
PUSH_EVENT = "PushEvent"


class Repo(BaseModel):
    id: int | None = None
    name: str | None = None
    url: str | None = None


class GitHubEvent(BaseModel):
    """/users/{login}/events/public 응답의 이벤트 1건.

    - created_at은 문자열 그대로 보관: 파싱 실패한 이벤트는 필터 단계에서 스킵
    - payload는 이벤트 타입별로 구조가 달라 dict로 유지
    """

    id: str | int | None = None
    type: str
    repo: Repo | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: str | None = None

    @property
    def repo_name(self) -> str | None:
        return self.repo.name if self.repo and self.repo.name else None

    @property
    def occurred_at(self) -> datetime | None:
        return parse_timestamp(self.created_at)


def parse_timestamp(value: str | None) -> datetime | None:
    """ISO-8601 문자열을 UTC aware datetime으로 파싱한다. 실패 시 None."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
