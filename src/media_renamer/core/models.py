"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

VariantRegistry = Dict[str, Any]  # 附件元数据，变体位于 "sizes" 键下。

SIZES_KEY = "sizes"
VARIANT_FILE_KEY = "file"


@dataclass(slots=True)
class Asset:
    """媒体库中的一个附件（原始文件）。主文件路径由存储层维护。"""

    asset_id: str
    title: Optional[str] = None


class OutcomeKind(str, Enum):
    """单次重命名尝试的结果类型。"""

    RENAMED = "renamed"
    RENAMED_CASE_ONLY = "renamed-case-only"
    NOT_FOUND = "not-found"
    RENAME_FAILED = "rename-failed"
    TARGET_EXISTS = "target-exists"
    METADATA_FAILED = "metadata-failed"

    @property
    def is_success(self) -> bool:
        return self in (OutcomeKind.RENAMED, OutcomeKind.RENAMED_CASE_ONLY)


@dataclass(slots=True)
class RenameRecord:
    """记录单个文件（主文件或变体）的重命名结果。"""

    kind: OutcomeKind
    old_path: str
    new_path: Optional[str] = None
    reason: Optional[str] = None
    asset_id: Optional[str] = None
    variant_key: Optional[str] = None

    def describe(self) -> str:
        """渲染为展示给操作人员的文本。"""

        if self.kind is OutcomeKind.RENAMED:
            return f"Renamed: {self.old_path} -> {self.new_path}"
        if self.kind is OutcomeKind.RENAMED_CASE_ONLY:
            return f"Renamed (case-only): {self.old_path} -> {self.new_path}"
        if self.kind is OutcomeKind.NOT_FOUND:
            return f"File not found: {self.old_path}"
        if self.kind is OutcomeKind.TARGET_EXISTS:
            return f"Target file already exists: {self.new_path}"
        if self.kind is OutcomeKind.METADATA_FAILED:
            return f"Failed to update metadata: {self.new_path or self.old_path}"
        return f"Failed to rename: {self.old_path}"

    def __str__(self) -> str:
        return self.describe()


@dataclass(slots=True)
class RenameOutcome:
    """整次运行累积的结果，成功与错误各自保持追加顺序。"""

    successes: list[RenameRecord] = field(default_factory=list)
    errors: list[RenameRecord] = field(default_factory=list)

    def add(self, record: RenameRecord) -> None:
        if record.kind.is_success:
            self.successes.append(record)
        else:
            self.errors.append(record)

    def all_outcomes(self) -> list[RenameRecord]:
        """返回所有结果记录，方便生成报告。"""

        return [*self.successes, *self.errors]

    def success_messages(self) -> list[str]:
        return [record.describe() for record in self.successes]

    def error_messages(self) -> list[str]:
        return [record.describe() for record in self.errors]
