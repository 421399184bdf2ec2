"""重命名引擎：将附件主文件及其各尺寸变体改为 skeleton case，并同步元数据。"""

from __future__ import annotations

import logging
import os
from typing import Callable, Optional

from media_renamer.core.exceptions import AssetStoreError
from media_renamer.core.filesystem import Filesystem, LocalFilesystem
from media_renamer.core.models import (
    SIZES_KEY,
    VARIANT_FILE_KEY,
    Asset,
    OutcomeKind,
    RenameOutcome,
    RenameRecord,
)
from media_renamer.core.normalizer import join_filename, split_filename, to_skeleton_case
from media_renamer.core.progress import ProgressUpdate
from media_renamer.core.store import AssetStore

LOGGER = logging.getLogger(__name__)


ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


class RenameEngine:
    """按附件逐个执行重命名。

    单线程顺序执行；预期内的失败（文件缺失、目标已存在、rename 失败）都记录进
    ``RenameOutcome``，不会向外抛出。
    """

    def __init__(
        self,
        store: AssetStore,
        filesystem: Optional[Filesystem] = None,
        progress_callback: ProgressCallback = None,
    ) -> None:
        self.store = store
        self.filesystem = filesystem or LocalFilesystem()
        self.progress_callback = progress_callback

    def run(self) -> RenameOutcome:
        """对存储中的全部附件执行一次重命名，返回累积结果。"""

        outcome = RenameOutcome()
        assets = self.store.list_assets()
        total = len(assets)
        LOGGER.info("开始重命名，共 %d 个附件", total)
        self._emit_progress(0, total, "开始重命名")

        for completed, asset in enumerate(assets, start=1):
            successes_before = len(outcome.successes)
            errors_before = len(outcome.errors)
            self._process_asset(asset, outcome)
            self._emit_progress(
                completed,
                total,
                f"附件 {asset.asset_id}：成功 {len(outcome.successes) - successes_before} 项，"
                f"错误 {len(outcome.errors) - errors_before} 项",
            )

        LOGGER.info("重命名完成：成功 %d 条，错误 %d 条", len(outcome.successes), len(outcome.errors))
        return outcome

    def _process_asset(self, asset: Asset, outcome: RenameOutcome) -> None:
        file_path = self.store.get_primary_path(asset.asset_id)
        if not file_path or not self.filesystem.exists(file_path):
            LOGGER.warning("附件 %s 的文件不存在：%s", asset.asset_id, file_path)
            outcome.add(RenameRecord(OutcomeKind.NOT_FOUND, file_path, asset_id=asset.asset_id))
            return

        directory, filename = os.path.split(file_path)
        base, extension = split_filename(filename)
        new_path = os.path.join(directory, join_filename(to_skeleton_case(base), extension))

        record = self._rename(file_path, new_path, extension)
        record.asset_id = asset.asset_id
        if not record.kind.is_success:
            outcome.add(record)
            return

        try:
            self.store.set_primary_path(asset.asset_id, new_path)
        except AssetStoreError as exc:
            LOGGER.error("更新附件 %s 的主文件路径失败：%s", asset.asset_id, exc)
            outcome.add(
                RenameRecord(
                    OutcomeKind.METADATA_FAILED,
                    file_path,
                    new_path,
                    reason=str(exc),
                    asset_id=asset.asset_id,
                )
            )
            return
        outcome.add(record)

        self._process_variants(asset, new_path, outcome)

    def _process_variants(self, asset: Asset, primary_path: str, outcome: RenameOutcome) -> None:
        directory = os.path.dirname(primary_path)
        registry = self.store.get_variant_registry(asset.asset_id)
        sizes = registry.get(SIZES_KEY) if registry else None
        if not isinstance(sizes, dict) or not sizes:
            return

        for size_key, size_data in sizes.items():
            if not isinstance(size_data, dict) or not size_data.get(VARIANT_FILE_KEY):
                continue

            old_filename = size_data[VARIANT_FILE_KEY]
            base, extension = split_filename(old_filename)
            new_filename = join_filename(to_skeleton_case(base), extension)

            old_path = os.path.join(directory, old_filename)
            new_path = os.path.join(directory, new_filename)

            record = self._rename(old_path, new_path, extension)
            record.asset_id = asset.asset_id
            record.variant_key = size_key
            outcome.add(record)
            if not record.kind.is_success:
                continue

            size_data[VARIANT_FILE_KEY] = new_filename

        try:
            self.store.put_variant_registry(asset.asset_id, registry)
        except AssetStoreError as exc:
            # 已完成的文件重命名不回滚，变体成功记录保持不变。
            LOGGER.error("保存附件 %s 的变体元数据失败：%s", asset.asset_id, exc)
            outcome.add(
                RenameRecord(
                    OutcomeKind.METADATA_FAILED,
                    primary_path,
                    reason=str(exc),
                    asset_id=asset.asset_id,
                )
            )

    def _rename(self, old_path: str, new_path: str, extension: str) -> RenameRecord:
        """执行单个文件的重命名决策：仅大小写不同 / 目标已存在 / 直接重命名。"""

        if old_path.lower() == new_path.lower():
            if (
                old_path != new_path
                and self.filesystem.exists(new_path)
                and not self.filesystem.same_file(old_path, new_path)
            ):
                # 大小写敏感的文件系统上目标可能是另一个文件。
                LOGGER.warning("目标文件已存在，跳过：%s", new_path)
                return RenameRecord(OutcomeKind.TARGET_EXISTS, old_path, new_path)

            # 大小写不敏感的文件系统会把直接 rename 当作空操作，需要经由临时文件两步完成。
            directory = os.path.dirname(old_path)
            temp_path = self.filesystem.temp_path(directory, extension)
            try:
                self.filesystem.rename(old_path, temp_path)
            except OSError as exc:
                LOGGER.error("重命名失败（仅大小写）：%s -> %s: %s", old_path, temp_path, exc)
                return RenameRecord(OutcomeKind.RENAME_FAILED, old_path, new_path, reason=str(exc))
            try:
                self.filesystem.rename(temp_path, new_path)
            except OSError as exc:
                LOGGER.error("重命名失败（仅大小写）：%s -> %s: %s", temp_path, new_path, exc)
                return RenameRecord(
                    OutcomeKind.RENAME_FAILED,
                    old_path,
                    new_path,
                    reason=self._restore_from_temp(temp_path, old_path, exc),
                )
            LOGGER.info("已重命名（仅大小写）：%s -> %s", old_path, new_path)
            return RenameRecord(OutcomeKind.RENAMED_CASE_ONLY, old_path, new_path)

        if self.filesystem.exists(new_path):
            LOGGER.warning("目标文件已存在，跳过：%s", new_path)
            return RenameRecord(OutcomeKind.TARGET_EXISTS, old_path, new_path)

        try:
            self.filesystem.rename(old_path, new_path)
        except OSError as exc:
            LOGGER.error("重命名失败：%s -> %s: %s", old_path, new_path, exc)
            return RenameRecord(OutcomeKind.RENAME_FAILED, old_path, new_path, reason=str(exc))
        LOGGER.info("已重命名：%s -> %s", old_path, new_path)
        return RenameRecord(OutcomeKind.RENAMED, old_path, new_path)

    def _restore_from_temp(self, temp_path: str, old_path: str, error: OSError) -> str:
        """第二步失败后把临时文件改回原名，返回写入记录的失败原因。"""

        try:
            self.filesystem.rename(temp_path, old_path)
        except OSError as restore_exc:
            LOGGER.error("无法还原临时文件 %s -> %s: %s", temp_path, old_path, restore_exc)
            return f"{error}; file left at {temp_path}"
        LOGGER.info("已还原为原文件名：%s", old_path)
        return str(error)

    def _emit_progress(self, completed: int, total: int, message: Optional[str] = None) -> None:
        if not self.progress_callback:
            return
        self.progress_callback(ProgressUpdate(total=total, completed=completed, message=message))
