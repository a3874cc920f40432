"""기여 저장소 언어 통계 집계.

GraphQL 쿼리 1회로 최근 기여한 저장소들의 언어별 바이트 수를 받아 합산한다.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from readme_activity.github_api import GitHubApiClient

logger = logging.getLogger(__name__)

CONTRIBUTED_LANGUAGES_QUERY = """
query($login: String!, $repoLimit: Int!, $langLimit: Int!) {
  user(login: $login) {
    repositoriesContributedTo(
      first: $repoLimit
      includeUserRepositories: true
      privacy: PUBLIC
      contributionTypes: [COMMIT]
      orderBy: { field: PUSHED_AT, direction: DESC }
    ) {
      nodes {
        name
        owner { login }
        languages(first: $langLimit, orderBy: { field: SIZE, direction: DESC }) {
          edges {
            size
            node {
              name
              color
            }
          }
        }
      }
    }
  }
}
"""


@dataclass
class LanguageStat:
    name: str
    size: int
    color: str | None = None


def aggregate_languages(repositories: Iterable[dict[str, Any]]) -> dict[str, LanguageStat]:
    """저장소 노드들의 언어 edge를 언어 이름 기준으로 합산한다.

    - name이 없거나 size가 0인 edge는 무시
    - 처음 본 색상을 유지하고, 색상이 비어 있을 때만 나중 값으로 채움
    """
    aggregate: dict[str, LanguageStat] = {}
    for repo in repositories:
        edges = ((repo or {}).get("languages") or {}).get("edges")
        if not isinstance(edges, list):
            continue
        for edge in edges:
            edge = edge or {}
            node = edge.get("node") or {}
            name = node.get("name")
            size = edge.get("size") or 0
            if not name or not size:
                continue

            color = node.get("color")
            stat = aggregate.get(name)
            if stat is None:
                aggregate[name] = LanguageStat(name=name, size=size, color=color)
                continue
            stat.size += size
            if not stat.color and color:
                stat.color = color
    return aggregate


def rank_languages(aggregate: dict[str, LanguageStat], top_n: int) -> list[LanguageStat]:
    """size 내림차순 상위 top_n개. 동률이면 먼저 집계된 언어가 앞선다."""
    return sorted(aggregate.values(), key=lambda stat: stat.size, reverse=True)[:top_n]


def fetch_language_stats(
    api: GitHubApiClient,
    login: str,
    *,
    repo_limit: int,
    per_repo_limit: int,
    top_n: int,
) -> list[LanguageStat]:
    data = api.graphql(
        CONTRIBUTED_LANGUAGES_QUERY,
        {"login": login, "repoLimit": repo_limit, "langLimit": per_repo_limit},
    )
    nodes = (((data.get("user") or {}).get("repositoriesContributedTo")) or {}).get("nodes") or []

    aggregate = aggregate_languages(nodes)
    ranked = rank_languages(aggregate, top_n)
    logger.info(
        "Aggregated %d languages across %d repositories",
        len(aggregate), len(nodes),
        extra={"login": login, "counts": {"repositories": len(nodes), "languages": len(aggregate)}},
    )
    return ranked
