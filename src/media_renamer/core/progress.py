"""进度更新的数据模型。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class ProgressUpdate:
    """已处理附件数；``message`` 汇总刚处理完的附件的成功与错误数。"""

    total: int
    completed: int
    message: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.total > 0 and self.completed >= self.total
