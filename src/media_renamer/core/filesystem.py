"""文件系统操作的封装，便于在测试中替换。"""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Protocol

from media_renamer.core.normalizer import join_filename

TEMP_PREFIX = "temp_"


class Filesystem(Protocol):
    def exists(self, path: str) -> bool: ...

    def rename(self, source: str, destination: str) -> None: ...

    def same_file(self, first: str, second: str) -> bool: ...

    def temp_path(self, directory: str, extension: str) -> str: ...


class LocalFilesystem:
    """基于 ``os`` 的本地文件系统实现。rename 失败时抛出 ``OSError``。"""

    def exists(self, path: str) -> bool:
        return bool(path) and os.path.exists(path)

    def rename(self, source: str, destination: str) -> None:
        os.rename(source, destination)

    def same_file(self, first: str, second: str) -> bool:
        """两个路径是否指向同一个文件（大小写不敏感的文件系统上仅大小写不同的路径即如此）。"""

        try:
            return os.path.samefile(first, second)
        except OSError:
            return False

    def temp_path(self, directory: str, extension: str) -> str:
        """在同一目录下生成不冲突的临时文件名，保留扩展名。"""

        while True:
            name = join_filename(f"{TEMP_PREFIX}{uuid.uuid4().hex}", extension)
            candidate = str(Path(directory) / name)
            if not os.path.exists(candidate):
                return candidate
