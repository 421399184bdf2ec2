"""读取图片尺寸与 MIME 类型。"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from media_renamer.core.exceptions import MediaRenamerError

LOGGER = logging.getLogger(__name__)


class ImageProbeError(MediaRenamerError):
    """图片无法识别。"""


@dataclass(slots=True)
class ImageInfo:
    width: int
    height: int
    mime_type: Optional[str]


def probe_image(path: Path) -> ImageInfo:
    """只读取文件头信息，不解码像素。"""

    try:
        with Image.open(path) as img:
            width, height = img.size
            mime_type = Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError) as exc:
        LOGGER.debug("无法识别图像文件 %s: %s", path, exc)
        raise ImageProbeError(f"无法识别图像: {path}") from exc
    return ImageInfo(width=width, height=height, mime_type=mime_type)
