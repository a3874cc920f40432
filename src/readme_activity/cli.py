"""click CLI 엔트리포인트.

readme-activity recent-prs / recent-commits / language-badge 명령으로
프로필 README의 활동 영역과 언어 배지를 갱신합니다.
"""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import NoReturn

import click

from readme_activity import __version__
from readme_activity.commits import CommitDetailResolver, collect_recent_commits
from readme_activity.config import AppConfig, load_config
from readme_activity.github_api import GitHubApiClient
from readme_activity.languages import fetch_language_stats
from readme_activity.logging_config import setup_logging
from readme_activity.pull_requests import collect_recent_pull_requests
from readme_activity.readme import (
    RECENT_COMMITS_REGION,
    RECENT_PRS_REGION,
    update_region,
    write_asset,
)
from readme_activity.render import (
    render_commit_table,
    render_language_svg,
    render_pull_request_table,
)

logger = logging.getLogger(__name__)

_config_option = click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="설정 파일 경로 (기본: 프로젝트 루트 config.yaml)",
)
_login_option = click.option("--login", default=None, help="대상 GitHub 계정 (설정값 대신 사용)")
_json_log_option = click.option(
    "--json-log/--no-json-log", default=True, help="JSON 로그 포맷 (기본: 활성)",
)
_readme_option = click.option(
    "--readme",
    "readme_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="갱신할 README 경로 (기본: 설정의 readme_path)",
)


def _load(config_path: Path | None, login: str | None) -> AppConfig:
    config = load_config(config_path)
    if login:
        config = config.model_copy(update={"login": login})
    return config


def _fail(command: str, what: str, exc: Exception) -> NoReturn:
    """치명적 오류를 보고하고 exit 1로 종료한다."""
    logger.error(
        "%s failed: %s", command, exc,
        extra={"event_code": "RUN_FAILED"},
    )
    click.echo(f"[{command}] Failed to update {what}: {exc}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="readme-activity")
def main() -> None:
    """README Activity - GitHub 활동 내역으로 프로필 README를 갱신합니다."""


@main.command("recent-prs")
@_config_option
@_login_option
@_readme_option
@_json_log_option
def recent_prs(
    config_path: Path | None,
    login: str | None,
    readme_path: Path | None,
    json_log: bool,
) -> None:
    """최근 Pull Request 표를 README의 START/END_RECENT_PRS 구간에 씁니다."""
    setup_logging(json_format=json_log)
    start = time.monotonic()

    try:
        config = _load(config_path, login)
        settings = config.recent_prs
        target = readme_path or config.readme_path

        with GitHubApiClient(config.github) as api:
            events = api.iter_user_events(
                config.login,
                per_page=settings.events_per_page,
                max_pages=settings.max_pages,
            )
            records = collect_recent_pull_requests(
                events,
                limit=settings.limit,
                lookback_days=settings.lookback_days,
                include_drafts=settings.include_drafts,
            )

        changed = update_region(target, RECENT_PRS_REGION, render_pull_request_table(records))
    except Exception as exc:
        _fail("recent-prs", "recent PRs", exc)

    logger.info(
        "Recent PRs run complete",
        extra={
            "event_code": "RECENT_PRS_SUMMARY",
            "login": config.login,
            "counts": {"pull_requests": len(records), "written": int(changed)},
            "duration_ms": (time.monotonic() - start) * 1000,
        },
    )
    if changed:
        click.echo(f"[recent-prs] {target} recent PRs updated ({len(records)} rows).")
    else:
        click.echo(f"[recent-prs] {target} already up to date (PRs).")


@main.command("recent-commits")
@_config_option
@_login_option
@_readme_option
@_json_log_option
def recent_commits(
    config_path: Path | None,
    login: str | None,
    readme_path: Path | None,
    json_log: bool,
) -> None:
    """최근 커밋 표를 README의 START/END_RECENT_COMMITS 구간에 씁니다."""
    setup_logging(json_format=json_log)
    start = time.monotonic()

    try:
        config = _load(config_path, login)
        settings = config.recent_commits
        target = readme_path or config.readme_path

        with GitHubApiClient(config.github) as api:
            resolver = CommitDetailResolver(api)
            events = api.iter_user_events(
                config.login,
                per_page=settings.events_per_page,
                max_pages=settings.max_pages,
            )
            records = collect_recent_commits(
                events,
                resolver,
                limit=settings.limit,
                lookback_days=settings.lookback_days,
            )

        changed = update_region(target, RECENT_COMMITS_REGION, render_commit_table(records))
    except Exception as exc:
        _fail("recent-commits", "recent commits", exc)

    logger.info(
        "Recent commits run complete",
        extra={
            "event_code": "RECENT_COMMITS_SUMMARY",
            "login": config.login,
            "counts": {"commits": len(records), "written": int(changed)},
            "duration_ms": (time.monotonic() - start) * 1000,
        },
    )
    if changed:
        click.echo(f"[recent-commits] {target} recent commits updated ({len(records)} rows).")
    else:
        click.echo(f"[recent-commits] {target} already up to date (commits).")


@main.command("language-badge")
@_config_option
@_login_option
@click.option(
    "--output",
    "output_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="SVG 출력 경로 (기본: 설정의 language_badge.output_path)",
)
@_json_log_option
def language_badge(
    config_path: Path | None,
    login: str | None,
    output_path: Path | None,
    json_log: bool,
) -> None:
    """기여 저장소 언어 비율 SVG 배지를 생성합니다.

    GraphQL API는 인증이 필요하므로 토큰이 없으면 아무것도 하지 않고 종료합니다.
    """
    setup_logging(json_format=json_log)
    start = time.monotonic()

    try:
        config = _load(config_path, login)
    except Exception as exc:
        _fail("language-badge", "language badge", exc)

    token_vars = "/".join(config.github.token_env_vars)
    if not config.github.resolve_token():
        logger.warning("No GitHub token configured, skipping language badge")
        click.echo(f"[language-badge] {token_vars} 미설정: 언어 배지 갱신 스킵")
        return

    settings = config.language_badge
    target = output_path or settings.output_path

    try:
        with GitHubApiClient(config.github) as api:
            stats = fetch_language_stats(
                api,
                config.login,
                repo_limit=settings.repo_limit,
                per_repo_limit=settings.per_repo_language_limit,
                top_n=settings.top_languages_limit,
            )
        write_asset(target, render_language_svg(stats))
    except Exception as exc:
        _fail("language-badge", "language badge", exc)

    logger.info(
        "Language badge run complete",
        extra={
            "event_code": "LANGUAGE_BADGE_SUMMARY",
            "login": config.login,
            "counts": {"languages": len(stats)},
            "duration_ms": (time.monotonic() - start) * 1000,
        },
    )
    click.echo(f"[language-badge] {target} contribution language badge updated.")


if __name__ == "__main__":
    main()
