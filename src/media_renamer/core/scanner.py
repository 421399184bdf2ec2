"""文件扫描与筛选逻辑。"""

from __future__ import annotations

from fnmatch import fnmatch
from pathlib import Path
from typing import Iterator, Sequence

from media_renamer.core.config import IndexConfig


def _iter_candidate_files(path: Path, recursive: bool) -> Iterator[Path]:
    """遍历路径下的所有文件。"""

    iterator = path.rglob("*") if recursive else path.glob("*")
    for candidate in iterator:
        if candidate.is_file():
            yield candidate


def _matches_any(name: str, patterns: Sequence[str]) -> bool:
    lowered = name.lower()
    return any(fnmatch(lowered, pattern.lower()) for pattern in patterns)


def collect_media_files(config: IndexConfig) -> list[Path]:
    """根据配置扫描媒体目录，返回匹配的文件列表（按路径排序）。"""

    root = config.source_dir.resolve()
    if not root.is_dir():
        return []

    collected: list[Path] = []
    for candidate in _iter_candidate_files(root, config.allow_recursive):
        name = candidate.name
        if not _matches_any(name, config.include_patterns):
            continue
        if config.exclude_patterns and _matches_any(name, config.exclude_patterns):
            continue
        collected.append(candidate)

    collected.sort(key=lambda x: str(x).lower())
    return collected
