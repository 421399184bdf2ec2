"""日志初始化。"""

from __future__ import annotations

import logging

# 第三方库在 DEBUG 级别输出过多，单独限制。
NOISY_LOGGERS = ("PIL",)


def setup_logging(verbose: bool = False) -> None:
    """初始化项目日志配置；``verbose`` 时输出 media_renamer 的调试日志。"""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
