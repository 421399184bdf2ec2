"""报告生成工具。"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from media_renamer.core.models import RenameRecord

HEADER = ["kind", "asset_id", "variant", "old_path", "new_path", "message"]


def write_csv_report(records: Iterable[RenameRecord], report_path: Path) -> Path:
    """将重命名结果写入 CSV 报告。"""

    report_path.parent.mkdir(parents=True, exist_ok=True)
    with report_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADER)
        for record in records:
            writer.writerow(
                [
                    record.kind.value,
                    record.asset_id or "",
                    record.variant_key or "",
                    record.old_path,
                    record.new_path or "",
                    record.describe() if record.reason is None else f"{record.describe()} ({record.reason})",
                ]
            )
    return report_path
