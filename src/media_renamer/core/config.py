"""运行任务的配置模型。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

DEFAULT_INCLUDE_PATTERNS = ("*.jpg", "*.jpeg", "*.png", "*.gif", "*.webp")


@dataclass(slots=True)
class LibraryConfig:
    """媒体库清单位置配置。

    ``base_dir`` 为空时使用清单中的 ``base_dir`` 字段，再退回到清单所在目录。
    """

    manifest_path: Path
    base_dir: Optional[Path] = None


@dataclass(slots=True)
class IndexConfig:
    """扫描目录生成清单的配置。"""

    source_dir: Path
    output_path: Path
    allow_recursive: bool = True
    include_patterns: Sequence[str] = field(default_factory=lambda: DEFAULT_INCLUDE_PATTERNS)
    exclude_patterns: Sequence[str] = field(default_factory=tuple)


@dataclass(slots=True)
class RenameJobConfig:
    """单次批量重命名任务的配置集合。"""

    library: LibraryConfig
    report_path: Optional[Path] = None
