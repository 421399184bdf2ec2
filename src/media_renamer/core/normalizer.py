"""文件名规范化：skeleton case。"""

from __future__ import annotations

import re
from typing import Tuple

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def to_skeleton_case(name: str) -> str:
    """转换为 skeleton case：全部小写，非字母数字连续段合并为单个 ``-``，去掉首尾 ``-``。"""

    lowered = name.lower()
    return _NON_ALNUM_RE.sub("-", lowered).strip("-")


def split_filename(name: str) -> Tuple[str, str]:
    """拆分为 (主名, 扩展名)，扩展名不含点号，没有扩展名时为空串。"""

    base, dot, extension = name.rpartition(".")
    if not dot or not base:
        return name, ""
    return base, extension


def join_filename(base: str, extension: str) -> str:
    if not extension:
        return base
    return f"{base}.{extension}"
