"""扫描媒体目录，把原图与缩略图分组后生成附件清单。"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict

from media_renamer.core.config import IndexConfig
from media_renamer.core.exceptions import AssetStoreError
from media_renamer.core.scanner import collect_media_files
from media_renamer.processing.image_probe import ImageProbeError, probe_image

LOGGER = logging.getLogger(__name__)

# 缩略图命名约定：<原名>-<宽>x<高>.<扩展名>
VARIANT_STEM_RE = re.compile(r"^(?P<base>.+)-(?P<width>\d+)x(?P<height>\d+)$")


def build_manifest(config: IndexConfig) -> Dict[str, Any]:
    """生成 JsonAssetStore 可读取的清单结构。

    与某个原图同目录、同扩展名且名为 ``<原名>-<宽>x<高>`` 的文件记为该原图的变体，
    标签为 ``<宽>x<高>``；找不到原图的缩略图按独立附件处理。
    """

    root = config.source_dir.resolve()
    files = collect_media_files(config)
    known = set(files)

    primaries: list[Path] = []
    variants: Dict[Path, list[tuple[Path, str]]] = {}
    for path in files:
        match = VARIANT_STEM_RE.match(path.stem)
        if match:
            original = path.with_name(f"{match.group('base')}{path.suffix}")
            if original in known:
                label = f"{match.group('width')}x{match.group('height')}"
                variants.setdefault(original, []).append((path, label))
                continue
        primaries.append(path)

    assets: list[Dict[str, Any]] = []
    for asset_id, path in enumerate(primaries, start=1):
        relative = path.relative_to(root).as_posix()
        metadata: Dict[str, Any] = {"file": relative}
        _apply_probe(metadata, path)

        sizes: Dict[str, Any] = {}
        for variant_path, label in variants.get(path, []):
            size_record: Dict[str, Any] = {"file": variant_path.name}
            _apply_probe(size_record, variant_path, with_mime=True)
            sizes[label] = size_record
        metadata["sizes"] = sizes

        assets.append({"id": str(asset_id), "title": path.stem, "file": relative, "metadata": metadata})

    variant_total = sum(len(items) for items in variants.values())
    LOGGER.info("扫描完成：%d 个附件，%d 个缩略图", len(assets), variant_total)
    return {"base_dir": str(root), "assets": assets}


def write_manifest(config: IndexConfig) -> Path:
    """扫描目录并写出清单文件。"""

    manifest = build_manifest(config)
    output_path = config.output_path
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with output_path.open("w", encoding="utf-8") as handle:
            json.dump(manifest, handle, ensure_ascii=False, indent=2)
            handle.write("\n")
    except OSError as exc:
        raise AssetStoreError(f"写入清单失败: {output_path}") from exc
    return output_path


def _apply_probe(record: Dict[str, Any], path: Path, with_mime: bool = False) -> None:
    try:
        info = probe_image(path)
    except ImageProbeError as exc:
        LOGGER.warning("%s", exc)
        return
    record["width"] = info.width
    record["height"] = info.height
    if with_mime and info.mime_type:
        record["mime-type"] = info.mime_type
