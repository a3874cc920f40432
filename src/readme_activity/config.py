"""YAML 설정 로딩 + Pydantic 모델."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config.yaml"


# ── 설정 모델 ──────────────────────────────────────────


class GitHubApiConfig(BaseModel):
    base_url: str = "https://api.github.com"
    graphql_url: str = "https://api.github.com/graphql"
    user_agent: str = "readme-activity/0.1.0"
    api_version: str = "2022-11-28"
    request_timeout_sec: float = 30.0
    token_env_vars: list[str] = Field(default_factory=lambda: ["GITHUB_TOKEN", "GH_TOKEN"])

    def resolve_token(self) -> str | None:
        """설정된 환경변수 중 처음으로 값이 있는 토큰을 반환한다."""
        for name in self.token_env_vars:
            if token := os.environ.get(name):
                return token
        return None


class RecentPrsConfig(BaseModel):
    limit: int = Field(default=3, ge=1)
    lookback_days: int = Field(default=60, ge=1)
    events_per_page: int = Field(default=50, ge=1, le=100)
    max_pages: int = Field(default=3, ge=1)
    include_drafts: bool = False


class RecentCommitsConfig(BaseModel):
    limit: int = Field(default=3, ge=1)
    lookback_days: int = Field(default=45, ge=1)
    events_per_page: int = Field(default=50, ge=1, le=100)
    max_pages: int = Field(default=2, ge=1)


class LanguageBadgeConfig(BaseModel):
    repo_limit: int = Field(default=40, ge=1, le=100)
    per_repo_language_limit: int = Field(default=10, ge=1, le=100)
    top_languages_limit: int = Field(default=6, ge=1)
    output_path: Path = Path("assets/contribution-languages.svg")


class AppConfig(BaseModel):
    """애플리케이션 전체 설정."""

    login: str = Field(default="octocat", min_length=1)
    readme_path: Path = Path("README.md")
    github: GitHubApiConfig = Field(default_factory=GitHubApiConfig)
    recent_prs: RecentPrsConfig = Field(default_factory=RecentPrsConfig)
    recent_commits: RecentCommitsConfig = Field(default_factory=RecentCommitsConfig)
    language_badge: LanguageBadgeConfig = Field(default_factory=LanguageBadgeConfig)


# ── 로딩 ───────────────────────────────────────────────

# (환경변수, 설정 섹션, 키): 섹션이 None이면 최상위 키
_ENV_OVERRIDES: list[tuple[str, str | None, str]] = [
    ("GITHUB_LOGIN", None, "login"),
    ("README_PATH", None, "readme_path"),
    ("PR_LIMIT", "recent_prs", "limit"),
    ("PR_LOOKBACK_DAYS", "recent_prs", "lookback_days"),
    ("PR_INCLUDE_DRAFTS", "recent_prs", "include_drafts"),
    ("EVENTS_PER_PAGE", "recent_prs", "events_per_page"),
    ("EVENT_MAX_PAGES", "recent_prs", "max_pages"),
    ("COMMIT_LIMIT", "recent_commits", "limit"),
    ("COMMIT_LOOKBACK_DAYS", "recent_commits", "lookback_days"),
    ("EVENTS_PER_PAGE", "recent_commits", "events_per_page"),
    ("EVENT_MAX_PAGES", "recent_commits", "max_pages"),
    ("REPO_LIMIT", "language_badge", "repo_limit"),
    ("LANG_PER_REPO_LIMIT", "language_badge", "per_repo_language_limit"),
    ("LANG_TOP_LIMIT", "language_badge", "top_languages_limit"),
    ("LANGUAGE_BADGE_PATH", "language_badge", "output_path"),
]


def load_config(path: Path | None = None) -> AppConfig:
    """YAML 설정 파일을 로딩하고 Pydantic 모델로 검증한다.

    환경변수 우선순위: 시스템 환경변수 > .env 파일 > config.yaml > 모델 기본값

    기본 경로의 config.yaml이 없으면 모델 기본값만 사용한다.
    명시적으로 전달된 경로는 반드시 존재해야 한다.
    """
    config_path = path or _DEFAULT_CONFIG_PATH

    # .env 파일 로딩: config.yaml과 같은 디렉터리의 .env를 탐색
    dotenv_path = config_path.parent / ".env"
    load_dotenv(dotenv_path=dotenv_path, override=False)

    raw: dict = {}
    if path is not None or config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)

        if raw is None:
            raise ValueError(f"Empty config file: {config_path}")

    # 환경변수 오버라이드
    for env_var, section, key in _ENV_OVERRIDES:
        value = os.environ.get(env_var)
        if not value:
            continue
        if section is None:
            raw[key] = value
        else:
            raw.setdefault(section, {})
            raw[section][key] = value

    return AppConfig.model_validate(raw)
