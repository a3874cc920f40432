"""README 마커 구간 치환 / 에셋 파일 쓰기."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkerRegion:
    name: str
    start: str
    end: str


RECENT_PRS_REGION = MarkerRegion(
    name="Recent PR",
    start="<!-- START_RECENT_PRS -->",
    end="<!-- END_RECENT_PRS -->",
)
RECENT_COMMITS_REGION = MarkerRegion(
    name="Recent commit",
    start="<!-- START_RECENT_COMMITS -->",
    end="<!-- END_RECENT_COMMITS -->",
)


class MarkersNotFoundError(ValueError):
    """마커가 없거나 순서가 뒤바뀐 경우."""

    def __init__(self, region: MarkerRegion):
        self.region = region
        super().__init__(f"{region.name} markers not found in README.")


def splice(content: str, region: MarkerRegion, markup: str) -> str:
    """start/end 마커 사이를 markup으로 교체한 새 문서를 반환한다.

    Raises:
        MarkersNotFoundError: 마커 누락 또는 end가 start보다 앞에 있는 경우
    """
    start_index = content.find(region.start)
    end_index = content.find(region.end)
    if start_index == -1 or end_index == -1 or end_index <= start_index:
        raise MarkersNotFoundError(region)

    before = content[: start_index + len(region.start)]
    after = content[end_index:]
    return f"{before}\n{markup}\n{after}"


def update_region(path: Path, region: MarkerRegion, markup: str) -> bool:
    """파일의 마커 구간을 교체한다. 내용이 바뀐 경우에만 쓰고 True를 반환한다."""
    content = path.read_text(encoding="utf-8")
    next_content = splice(content, region, markup)

    if next_content == content:
        logger.info("%s region already up to date: %s", region.name, path)
        return False

    path.write_text(next_content, encoding="utf-8")
    logger.info("%s region updated: %s", region.name, path)
    return True


def write_asset(path: Path, text: str) -> None:
    """독립 에셋 파일을 무조건 덮어쓴다."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.info("Asset written: %s (%d bytes)", path, len(text.encode("utf-8")))
