"""GitHub REST/GraphQL API 동기 클라이언트.

- 공개 이벤트 피드: page 파라미터 기반 pagination, lazy generator
- 단일 커밋 상세 조회: 실패 시 예외 대신 결과 객체로 반환
- GraphQL 쿼리: HTTP 에러 및 응답 내 errors 배열 모두 예외
- 재시도 없음: 모든 요청은 순차적으로 1회만 수행
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import httpx
import orjson
from pydantic import ValidationError

from readme_activity.config import GitHubApiConfig
from readme_activity.models import GitHubEvent

logger = logging.getLogger(__name__)


class GitHubApiError(Exception):
    """GitHub API 호출 실패."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(message)


class GraphQLError(GitHubApiError):
    """HTTP 200 응답에 포함된 GraphQL errors."""

    def __init__(self, errors: list[Any]):
        self.errors = errors
        super().__init__(200, f"GraphQL returned errors: {orjson.dumps(errors).decode()}")


@dataclass
class GitHubApiResult:
    """API 호출 결과."""

    url: str
    status_code: int
    data: dict[str, Any] | list[Any] | None = None
    headers: dict[str, str] = field(default_factory=dict)
    error: str | None = None


class GitHubApiClient:
    """GitHub API 동기 클라이언트.

    토큰은 선택 사항이다. REST 공개 엔드포인트는 익명으로도 호출 가능하지만
    GraphQL은 토큰이 필요하다.
    """

    def __init__(self, config: GitHubApiConfig, token: str | None = None) -> None:
        self._config = config
        self._token = token if token is not None else config.resolve_token()

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": config.api_version,
            "User-Agent": config.user_agent,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        self._client = httpx.Client(
            base_url=config.base_url,
            headers=headers,
            timeout=config.request_timeout_sec,
        )
        self._rate_remaining: int | None = None

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    def _track_rate_limit(self, response: httpx.Response) -> None:
        """응답 헤더에서 남은 rate limit을 기록한다."""
        remaining = response.headers.get("X-RateLimit-Remaining")
        if remaining is None:
            return
        try:
            self._rate_remaining = int(remaining)
        except ValueError:
            logger.debug("Ignoring malformed X-RateLimit-Remaining header: %r", remaining)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> GitHubApiResult:
        """공통 요청 메서드. 비정상 응답은 error 필드에 담아 반환한다."""
        resp = self._client.request(method, path, params=params, json=json)
        self._track_rate_limit(resp)

        if not resp.is_success:
            return GitHubApiResult(
                url=str(resp.url),
                status_code=resp.status_code,
                headers=dict(resp.headers),
                error=f"{resp.status_code} {resp.reason_phrase}: {resp.text}",
            )

        try:
            data = resp.json() if resp.content else None
        except ValueError as exc:
            return GitHubApiResult(
                url=str(resp.url),
                status_code=resp.status_code,
                headers=dict(resp.headers),
                error=f"{resp.status_code} invalid JSON body: {exc}",
            )
        return GitHubApiResult(
            url=str(resp.url),
            status_code=resp.status_code,
            data=data,
            headers=dict(resp.headers),
        )

    # ── 응답 필터링 ─────────────────────────────────────────

    @staticmethod
    def _normalize_event(raw: Any) -> GitHubEvent | None:
        """이벤트 JSON을 GitHubEvent 모델로 정규화한다."""
        try:
            return GitHubEvent.model_validate(raw)
        except ValidationError as exc:
            event_id = raw.get("id", "unknown") if isinstance(raw, dict) else "unknown"
            logger.warning("Failed to normalize event %s: %s", event_id, exc)
            return None

    @staticmethod
    def _compact_commit(data: dict[str, Any]) -> dict[str, Any]:
        """커밋 응답에서 메시지, URL, 작성 시각만 추출한다."""
        commit = data.get("commit") or {}
        return {
            "sha": data.get("sha"),
            "html_url": data.get("html_url"),
            "message": commit.get("message"),
            "author_date": (commit.get("author") or {}).get("date"),
            "committer_date": (commit.get("committer") or {}).get("date"),
        }

    # ── 공개 API 메서드 ──────────────────────────────────────

    def iter_user_events(
        self, login: str, *, per_page: int = 50, max_pages: int = 3,
    ) -> Iterator[GitHubEvent]:
        """GET /users/{login}/events/public: 공개 이벤트를 최신순으로 순회한다.

        페이지는 소비 시점에 하나씩 요청된다. 빈 페이지를 만나거나 max_pages에
        도달하면 종료한다.

        Raises:
            GitHubApiError: 어느 페이지든 비정상 응답이면 즉시 중단
        """
        path = f"/users/{login}/events/public"
        for page in range(1, max_pages + 1):
            result = self._request("GET", path, params={"page": page, "per_page": per_page})
            if result.error:
                raise GitHubApiError(
                    result.status_code, f"GitHub events request failed: {result.error}",
                )

            if not isinstance(result.data, list) or not result.data:
                logger.debug("Event feed exhausted at page %d", page, extra={"login": login})
                return

            logger.debug(
                "Fetched event page %d (%d events)", page, len(result.data),
                extra={"login": login},
            )
            for raw in result.data:
                event = self._normalize_event(raw)
                if event is not None:
                    yield event

    def fetch_commit_detail(self, repo_name: str, sha: str) -> GitHubApiResult:
        """GET /repos/{owner}/{repo}/commits/{sha}: 메시지/URL/날짜만 반환."""
        result = self._request("GET", f"/repos/{repo_name}/commits/{sha}")
        if isinstance(result.data, dict) and not result.error:
            result.data = self._compact_commit(result.data)
        return result

    def graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """GraphQL 쿼리를 실행하고 data 객체를 반환한다.

        Raises:
            GitHubApiError: 토큰 미설정 또는 비정상 HTTP 응답
            GraphQLError: 응답 본문에 errors가 포함된 경우
        """
        if not self._token:
            raise GitHubApiError(401, "GitHub GraphQL API requires a token")

        result = self._request(
            "POST", self._config.graphql_url, json={"query": query, "variables": variables},
        )
        if result.error:
            raise GitHubApiError(
                result.status_code, f"GitHub GraphQL request failed: {result.error}",
            )

        payload = result.data if isinstance(result.data, dict) else {}
        if errors := payload.get("errors"):
            raise GraphQLError(errors)
        return payload.get("data") or {}

    @property
    def rate_remaining(self) -> int | None:
        """현재 남은 rate limit."""
        return self._rate_remaining

    def close(self) -> None:
        """httpx.Client를 종료한다."""
        self._client.close()

    def __enter__(self) -> GitHubApiClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
