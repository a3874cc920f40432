"""README용 HTML 표 / SVG 배지 렌더링.

모든 함수는 순수 함수: 레코드 리스트 → 마크업 문자열.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from html import escape

from readme_activity.commits import CommitRecord
from readme_activity.languages import LanguageStat
from readme_activity.models import parse_timestamp
from readme_activity.pull_requests import PullRequestRecord

DEFAULT_LANGUAGE_COLOR = "#58a6ff"

_TABLE_STYLE = (
    "width:90%;max-width:720px;border-collapse:collapse;"
    "font-family:'Segoe UI', Ubuntu, sans-serif;font-size:14px;color:#c9d1d9;"
)
_HEADER_ROW_STYLE = "text-align:left;color:#8b949e;font-size:13px;"
_HEADER_CELL_STYLE = "padding:6px 8px;"


def format_date(value: str | None) -> str:
    """ISO-8601 → YYYY-MM-DD (UTC). 파싱 불가면 빈 문자열."""
    parsed = parse_timestamp(value)
    return parsed.strftime("%Y-%m-%d") if parsed else ""


def _link(url: str, text: str) -> str:
    return (
        f'<a href="{escape(url)}" target="_blank" rel="noopener noreferrer">'
        f"{escape(text, quote=False)}</a>"
    )


def _render_table(headers: Sequence[str], rows: Sequence[Sequence[str]], empty_comment: str) -> str:
    """공통 표 템플릿. rows의 각 셀은 이미 렌더링된 HTML 조각이다."""
    if not rows:
        return f'<div align="center">\n  <!-- {empty_comment} -->\n</div>'

    header_cells = "\n".join(
        f'        <th style="{_HEADER_CELL_STYLE}">{header}</th>' for header in headers
    )
    body = "\n".join(
        "  <tr>\n" + "\n".join(f"    <td>{cell}</td>" for cell in row) + "\n  </tr>"
        for row in rows
    )
    return (
        '<div align="center">\n'
        f'  <table style="{_TABLE_STYLE}">\n'
        "    <thead>\n"
        f'      <tr style="{_HEADER_ROW_STYLE}">\n'
        f"{header_cells}\n"
        "      </tr>\n"
        "    </thead>\n"
        "    <tbody>\n"
        f"{body}\n"
        "    </tbody>\n"
        "  </table>\n"
        "</div>"
    )


def render_pull_request_table(records: Sequence[PullRequestRecord]) -> str:
    rows = [
        (
            f"<code>{format_date(pr.date)}</code>",
            _link(pr.url, pr.title),
            pr.status,
            _link(pr.repo_url, pr.repo_name),
        )
        for pr in records
    ]
    return _render_table(
        ("Date", "Pull Request", "Status", "Repository"),
        rows,
        "No recent pull requests available",
    )


def render_commit_table(records: Sequence[CommitRecord]) -> str:
    rows = [
        (
            f"<code>{format_date(commit.occurred_at)}</code>",
            _link(commit.url, commit.message),
            _link(commit.repo_url, commit.repo_name),
        )
        for commit in records
    ]
    return _render_table(
        ("Date", "Commit", "Repository"),
        rows,
        "No recent commits available",
    )


# ── SVG 배지 ───────────────────────────────────────────

_SVG_WIDTH = 520
_ROW_HEIGHT = 40
_BAR_X = 170
_BAR_WIDTH = 250
_MIN_BAR_WIDTH = 4
_MIN_PERCENT = 1

_EMPTY_SVG = """<svg xmlns="http://www.w3.org/2000/svg" width="520" height="140" role="img" aria-label="No language data">
  <style>
    text { font-family: 'Segoe UI', Ubuntu, sans-serif; fill: #c9d1d9; }
    .title { font-size: 20px; font-weight: 600; }
  </style>
  <rect width="100%" height="100%" rx="16" fill="#0d1117" />
  <text class="title" x="260" y="70" text-anchor="middle">Languages</text>
</svg>"""


def _round_half_up(value: float) -> int:
    """0.5는 항상 올림 (내장 round()는 짝수 쪽으로 반올림)."""
    return math.floor(value + 0.5)


def _render_language_row(stat: LanguageStat, index: int, total: int) -> str:
    share = stat.size / total
    # 표시용 퍼센트는 최소 1%로 올림 처리하므로 합계가 100%를 넘을 수 있다
    percent = max(_MIN_PERCENT, _round_half_up(share * 100))
    value_width = max(_MIN_BAR_WIDTH, _round_half_up(share * _BAR_WIDTH))
    y = 80 + index * _ROW_HEIGHT
    color = escape(stat.color or DEFAULT_LANGUAGE_COLOR)

    return f"""
      <g>
        <circle cx="40" cy="{y - 8}" r="6" fill="{color}" />
        <text class="label" x="60" y="{y - 4}">{escape(stat.name, quote=False)}</text>
        <rect class="track" x="{_BAR_X}" y="{y - 20}" width="{_BAR_WIDTH}" height="18" rx="9" />
        <rect class="bar" x="{_BAR_X}" y="{y - 20}" width="{value_width}" height="18" rx="9" fill="{color}" />
        <text class="value" x="{_BAR_X + _BAR_WIDTH + 15}" y="{y - 5}">{percent}%</text>
      </g>"""


def render_language_svg(stats: Sequence[LanguageStat]) -> str:
    """언어별 비율 막대 SVG. 데이터가 없으면 빈 카드를 반환한다."""
    total = sum(stat.size for stat in stats)
    if not stats or not total:
        return _EMPTY_SVG

    rows = "\n".join(_render_language_row(stat, i, total) for i, stat in enumerate(stats))
    height = 110 + len(stats) * _ROW_HEIGHT

    return f"""<svg xmlns="http://www.w3.org/2000/svg" width="{_SVG_WIDTH}" height="{height}" role="img" aria-label="Languages across contributions">
  <style>
    text {{ font-family: 'Segoe UI', Ubuntu, sans-serif; fill: #c9d1d9; }}
    .title {{ font-size: 20px; font-weight: 600; }}
    .label {{ font-size: 14px; font-weight: 500; }}
    .value {{ font-size: 14px; fill: #8b949e; }}
    .track {{ fill: #21262d; }}
  </style>
  <rect width="100%" height="100%" rx="16" fill="#0d1117" />
  <text class="title" x="40" y="40">Languages across contributions</text>
  {rows}
</svg>"""
