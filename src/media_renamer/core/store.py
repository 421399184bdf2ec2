"""媒体库存储层：协议定义与基于 JSON 清单的实现。"""

from __future__ import annotations

import copy
import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Protocol

from media_renamer.core.config import LibraryConfig
from media_renamer.core.exceptions import AssetStoreError
from media_renamer.core.models import Asset, VariantRegistry

LOGGER = logging.getLogger(__name__)


class AssetStore(Protocol):
    """重命名引擎依赖的附件存储接口。"""

    def list_assets(self) -> list[Asset]: ...

    def get_primary_path(self, asset_id: str) -> str: ...

    def set_primary_path(self, asset_id: str, new_path: str) -> None: ...

    def get_variant_registry(self, asset_id: str) -> VariantRegistry: ...

    def put_variant_registry(self, asset_id: str, registry: VariantRegistry) -> None: ...


class JsonAssetStore:
    """以 JSON 清单文件保存附件记录。

    清单结构::

        {"base_dir": "uploads",
         "assets": [{"id": "1", "file": "2024/05/a.png", "metadata": {"sizes": {...}}}]}

    相对路径基于上传目录解析；未知字段原样保留。默认每次修改立即写回清单，
    在 ``deferred_saves()`` 内则只在退出时写一次。
    """

    def __init__(self, config: LibraryConfig) -> None:
        self.config = config
        self.manifest_path = config.manifest_path.resolve()
        self._data = self._load()
        self.base_dir = self._resolve_base_dir(config.base_dir)
        self._index = self._build_index()
        self._defer_depth = 0
        self._dirty = False

    def list_assets(self) -> list[Asset]:
        return [
            Asset(asset_id=str(entry["id"]), title=entry.get("title"))
            for entry in self._data["assets"]
        ]

    def get_primary_path(self, asset_id: str) -> str:
        stored = self._entry(asset_id).get("file") or ""
        if not stored:
            return ""
        path = Path(stored)
        if not path.is_absolute():
            path = self.base_dir / path
        return str(path)

    def set_primary_path(self, asset_id: str, new_path: str) -> None:
        entry = self._entry(asset_id)
        stored = self._to_stored_path(Path(new_path))
        entry["file"] = stored
        metadata = entry.get("metadata")
        if isinstance(metadata, dict) and "file" in metadata:
            metadata["file"] = stored
        self._save()

    def get_variant_registry(self, asset_id: str) -> VariantRegistry:
        metadata = self._entry(asset_id).get("metadata")
        if not isinstance(metadata, dict):
            return {}
        return copy.deepcopy(metadata)

    def put_variant_registry(self, asset_id: str, registry: VariantRegistry) -> None:
        self._entry(asset_id)["metadata"] = copy.deepcopy(registry)
        self._save()

    @contextmanager
    def deferred_saves(self) -> Iterator["JsonAssetStore"]:
        """推迟写盘：块内的修改只在退出时（包括异常退出）整体写回一次。"""

        self._defer_depth += 1
        try:
            yield self
        finally:
            self._defer_depth -= 1
            if self._defer_depth == 0 and self._dirty:
                self._write_manifest()

    def _entry(self, asset_id: str) -> Dict[str, Any]:
        try:
            return self._index[asset_id]
        except KeyError as exc:
            raise AssetStoreError(f"清单中不存在附件: {asset_id}") from exc

    def _load(self) -> Dict[str, Any]:
        try:
            with self.manifest_path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError as exc:
            raise AssetStoreError(f"清单文件不存在: {self.manifest_path}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise AssetStoreError(f"无法读取清单文件: {self.manifest_path}") from exc

        if not isinstance(data, dict) or not isinstance(data.get("assets"), list):
            raise AssetStoreError(f"清单格式不正确，缺少 assets 列表: {self.manifest_path}")
        return data

    def _build_index(self) -> Dict[str, Dict[str, Any]]:
        index: Dict[str, Dict[str, Any]] = {}
        for position, entry in enumerate(self._data["assets"]):
            if not isinstance(entry, dict) or "id" not in entry:
                raise AssetStoreError(f"第 {position} 条附件记录缺少 id")
            asset_id = str(entry["id"])
            if asset_id in index:
                raise AssetStoreError(f"附件 id 重复: {asset_id}")
            index[asset_id] = entry
        return index

    def _resolve_base_dir(self, override: Optional[Path]) -> Path:
        if override is not None:
            return override.expanduser().resolve()
        declared = self._data.get("base_dir")
        if declared:
            base = Path(declared).expanduser()
            if not base.is_absolute():
                base = self.manifest_path.parent / base
            return base.resolve()
        return self.manifest_path.parent

    def _to_stored_path(self, path: Path) -> str:
        try:
            return path.relative_to(self.base_dir).as_posix()
        except ValueError:
            return str(path)

    def _save(self) -> None:
        self._dirty = True
        if self._defer_depth == 0:
            self._write_manifest()

    def _write_manifest(self) -> None:
        tmp_path = self.manifest_path.with_name(self.manifest_path.name + ".tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(self._data, handle, ensure_ascii=False, indent=2)
                handle.write("\n")
            os.replace(tmp_path, self.manifest_path)
        except (OSError, TypeError, ValueError) as exc:
            tmp_path.unlink(missing_ok=True)
            raise AssetStoreError(f"写入清单失败: {self.manifest_path}") from exc
        self._dirty = False
        LOGGER.debug("清单已保存：%s", self.manifest_path)
