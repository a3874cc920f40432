"""공통 fixture."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
import yaml

from readme_activity.models import GitHubEvent

_ENV_VARS = (
    "GITHUB_TOKEN",
    "GH_TOKEN",
    "GITHUB_LOGIN",
    "README_PATH",
    "PR_LIMIT",
    "PR_LOOKBACK_DAYS",
    "PR_INCLUDE_DRAFTS",
    "COMMIT_LIMIT",
    "COMMIT_LOOKBACK_DAYS",
    "EVENTS_PER_PAGE",
    "EVENT_MAX_PAGES",
    "REPO_LIMIT",
    "LANG_PER_REPO_LIMIT",
    "LANG_TOP_LIMIT",
    "LANGUAGE_BADGE_PATH",
)

NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=UTC)

README_TEMPLATE = """# profile

<!-- START_RECENT_PRS -->
old prs
<!-- END_RECENT_PRS -->

<!-- START_RECENT_COMMITS -->
old commits
<!-- END_RECENT_COMMITS -->
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """실행 환경의 토큰/설정 환경변수가 테스트에 새지 않도록 제거."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """CLI 테스트가 붙인 핸들러(닫힌 스트림)를 다음 테스트 전에 제거."""
    yield
    logging.getLogger("readme_activity").handlers.clear()


def iso(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def days_ago(days: float, *, now: datetime = NOW) -> str:
    return iso(now - timedelta(days=days))


def make_pr_event(
    *,
    created_at: str,
    html_url: str = "https://github.com/octo/repo/pull/1",
    repo_name: str | None = "octo/repo",
    **pr_fields: Any,
) -> dict[str, Any]:
    """PullRequestEvent JSON 헬퍼. pr_fields로 pull_request 필드를 덮어쓴다."""
    pull_request: dict[str, Any] = {
        "html_url": html_url,
        "url": html_url.replace("https://github.com/", "https://api.github.com/repos/").replace(
            "/pull/", "/pulls/"
        ),
        "title": "Add feature",
        "state": "open",
        "draft": False,
        "merged_at": None,
        "closed_at": None,
        "created_at": created_at,
    }
    pull_request.update(pr_fields)
    event: dict[str, Any] = {
        "id": "1001",
        "type": "PullRequestEvent",
        "payload": {"action": "opened", "pull_request": pull_request},
        "created_at": created_at,
    }
    if repo_name is not None:
        event["repo"] = {"id": 1, "name": repo_name, "url": f"https://api.github.com/repos/{repo_name}"}
    return event


def make_push_event(
    *,
    created_at: str,
    repo_name: str = "octo/repo",
    commits: list[dict[str, Any]] | None = None,
    head: str | None = None,
) -> dict[str, Any]:
    """PushEvent JSON 헬퍼."""
    payload: dict[str, Any] = {"ref": "refs/heads/main"}
    if commits is not None:
        payload["commits"] = commits
    if head is not None:
        payload["head"] = head
    return {
        "id": "2001",
        "type": "PushEvent",
        "repo": {"id": 1, "name": repo_name},
        "payload": payload,
        "created_at": created_at,
    }


def to_events(raw_events: list[dict[str, Any]]) -> list[GitHubEvent]:
    return [GitHubEvent.model_validate(raw) for raw in raw_events]


@pytest.fixture()
def sample_config_data(tmp_path: Path) -> dict[str, Any]:
    """테스트용 config dict."""
    return {
        "login": "octo",
        "readme_path": str(tmp_path / "README.md"),
        "github": {"user_agent": "readme-activity-test"},
        "recent_prs": {"limit": 3, "lookback_days": 60, "events_per_page": 50, "max_pages": 2},
        "recent_commits": {"limit": 3, "lookback_days": 45, "events_per_page": 50, "max_pages": 2},
        "language_badge": {
            "repo_limit": 40,
            "per_repo_language_limit": 10,
            "top_languages_limit": 2,
            "output_path": str(tmp_path / "assets" / "languages.svg"),
        },
    }


@pytest.fixture()
def tmp_config_file(tmp_path: Path, sample_config_data: dict[str, Any]) -> Path:
    """임시 YAML 설정 파일."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump(sample_config_data), encoding="utf-8")
    return config_path


@pytest.fixture()
def readme_file(tmp_path: Path) -> Path:
    """마커 구간 2개를 가진 임시 README."""
    path = tmp_path / "README.md"
    path.write_text(README_TEMPLATE, encoding="utf-8")
    return path
