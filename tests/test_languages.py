"""언어 집계 테스트."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from readme_activity.github_api import GitHubApiClient, GraphQLError
from readme_activity.languages import (
    CONTRIBUTED_LANGUAGES_QUERY,
    LanguageStat,
    aggregate_languages,
    fetch_language_stats,
    rank_languages,
)


def _repo(*edges: tuple[str, int, str | None]) -> dict:
    return {
        "name": "repo",
        "owner": {"login": "octo"},
        "languages": {
            "edges": [
                {"size": size, "node": {"name": name, "color": color}} for name, size, color in edges
            ]
        },
    }


class TestAggregateLanguages:
    def test_sums_across_repositories(self) -> None:
        aggregate = aggregate_languages(
            [
                _repo(("A", 80, "#aaa"), ("B", 20, "#bbb")),
                _repo(("A", 20, "#aaa"), ("C", 20, "#ccc")),
            ]
        )
        assert {name: stat.size for name, stat in aggregate.items()} == {"A": 100, "B": 20, "C": 20}

    def test_first_seen_color_wins(self) -> None:
        aggregate = aggregate_languages([_repo(("A", 1, "#first")), _repo(("A", 1, "#second"))])
        assert aggregate["A"].color == "#first"

    def test_missing_color_filled_later(self) -> None:
        aggregate = aggregate_languages([_repo(("A", 1, None)), _repo(("A", 1, "#later"))])
        assert aggregate["A"].color == "#later"

    def test_later_missing_color_keeps_first(self) -> None:
        aggregate = aggregate_languages([_repo(("A", 1, "#first")), _repo(("A", 1, None))])
        assert aggregate["A"].color == "#first"

    def test_ignores_empty_name_and_zero_size(self) -> None:
        aggregate = aggregate_languages([_repo(("", 10, None), ("Zero", 0, None), ("Ok", 5, None))])
        assert list(aggregate) == ["Ok"]

    def test_malformed_nodes_ignored(self) -> None:
        aggregate = aggregate_languages(
            [None, {"languages": None}, {"languages": {"edges": None}}, {"languages": {"edges": [None]}}]
        )
        assert aggregate == {}


class TestRankLanguages:
    def test_top_two_excludes_third(self) -> None:
        aggregate = aggregate_languages(
            [
                _repo(("A", 80, None), ("B", 20, None)),
                _repo(("A", 20, None), ("C", 20, None)),
            ]
        )
        ranked = rank_languages(aggregate, 2)
        # B와 C는 동률: 먼저 집계된 B가 앞선다
        assert [stat.name for stat in ranked] == ["A", "B"]

    def test_descending_order(self) -> None:
        aggregate = {
            "small": LanguageStat("small", 1),
            "big": LanguageStat("big", 100),
            "mid": LanguageStat("mid", 50),
        }
        assert [s.name for s in rank_languages(aggregate, 10)] == ["big", "mid", "small"]

    def test_empty(self) -> None:
        assert rank_languages({}, 6) == []


class TestFetchLanguageStats:
    def test_queries_with_limits_and_ranks(self) -> None:
        api = MagicMock(spec=GitHubApiClient)
        api.graphql.return_value = {
            "user": {
                "repositoriesContributedTo": {
                    "nodes": [
                        _repo(("Python", 300, "#3572A5"), ("Shell", 10, "#89e051")),
                        _repo(("Go", 200, "#00ADD8"), ("Python", 100, "#3572A5")),
                    ]
                }
            }
        }

        stats = fetch_language_stats(api, "octo", repo_limit=40, per_repo_limit=10, top_n=2)

        api.graphql.assert_called_once_with(
            CONTRIBUTED_LANGUAGES_QUERY, {"login": "octo", "repoLimit": 40, "langLimit": 10}
        )
        assert stats == [LanguageStat("Python", 400, "#3572A5"), LanguageStat("Go", 200, "#00ADD8")]

    def test_unknown_user_yields_empty(self) -> None:
        api = MagicMock(spec=GitHubApiClient)
        api.graphql.return_value = {"user": None}
        assert fetch_language_stats(api, "ghost", repo_limit=1, per_repo_limit=1, top_n=1) == []

    def test_graphql_errors_propagate(self) -> None:
        api = MagicMock(spec=GitHubApiClient)
        api.graphql.side_effect = GraphQLError([{"message": "boom"}])
        with pytest.raises(GraphQLError):
            fetch_language_stats(api, "octo", repo_limit=1, per_repo_limit=1, top_n=1)
