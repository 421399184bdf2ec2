"""命令行入口。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from media_renamer.core.config import DEFAULT_INCLUDE_PATTERNS, IndexConfig, LibraryConfig, RenameJobConfig
from media_renamer.core.exceptions import AssetStoreError
from media_renamer.core.models import RenameOutcome
from media_renamer.core.progress import ProgressUpdate
from media_renamer.core.report import write_csv_report
from media_renamer.core.store import JsonAssetStore
from media_renamer.processing.engine import RenameEngine
from media_renamer.processing.indexer import write_manifest
from media_renamer.utils.logging import setup_logging

app = typer.Typer(help="将媒体库文件及其缩略图批量重命名为 skeleton case。")


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id
        if update.total == 0:
            return
        if task_id is None:
            task_id = progress.add_task("重命名附件", total=update.total)
        progress.update(task_id, completed=update.completed)
        if update.completed and update.message:
            progress.log(update.message)
        if update.finished:
            progress.update(task_id, description="重命名完成")

    return callback


def _render_outcome(console: Console, outcome: RenameOutcome) -> None:
    if outcome.successes:
        console.print("Successes", style="bold green")
        for message in outcome.success_messages():
            console.print(f"  • {message}", style="green", markup=False, highlight=False)
    if outcome.errors:
        console.print("Errors", style="bold red")
        for message in outcome.error_messages():
            console.print(f"  • {message}", style="red", markup=False, highlight=False)


@app.command("run")
def run_cli(
    manifest: Path = typer.Option(..., "--manifest", "-m", help="媒体库清单 (JSON)"),
    base_dir: Optional[Path] = typer.Option(None, "--base-dir", help="上传目录，清单中的相对路径以此为基准"),
    report: Optional[Path] = typer.Option(None, "--report", help="CSV 报告输出路径"),
    yes: bool = typer.Option(False, "--yes", "-y", help="跳过确认提示"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    """把全部附件及其缩略图重命名为 skeleton case。"""

    setup_logging(verbose=verbose)
    console = Console()

    job = RenameJobConfig(
        library=LibraryConfig(
            manifest_path=manifest.expanduser(),
            base_dir=base_dir.expanduser() if base_dir else None,
        ),
        report_path=report.expanduser().resolve() if report else None,
    )

    try:
        store = JsonAssetStore(job.library)
    except AssetStoreError as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1) from exc

    if not yes:
        typer.confirm("将重命名媒体库中的全部文件，是否继续？", abort=True)

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        console=console,
    )

    try:
        with progress, store.deferred_saves():
            outcome = RenameEngine(store, progress_callback=_build_progress_callback(progress)).run()
    except AssetStoreError as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1) from exc

    _render_outcome(console, outcome)
    typer.echo(f"处理完成：成功 {len(outcome.successes)} 项，错误 {len(outcome.errors)} 项。")

    if job.report_path is not None:
        try:
            write_csv_report(outcome.all_outcomes(), job.report_path)
        except OSError as exc:
            logging.getLogger(__name__).error("写入报告失败：%s", exc)
        else:
            typer.echo(f"报告文件：{job.report_path}")


@app.command("index")
def index_cli(
    source: Path = typer.Argument(..., help="媒体目录"),
    output: Path = typer.Option(..., "--output", "-o", help="清单输出路径"),
    allow_recursive: bool = typer.Option(True, "--recursive/--no-recursive", help="是否递归扫描目录"),
    include: Optional[List[str]] = typer.Option(None, "--include", help="包含的文件模式，可指定多个"),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", help="排除的文件模式，可指定多个"),
) -> None:
    """扫描媒体目录，生成供 run 命令使用的清单。"""

    setup_logging()

    source_dir = source.expanduser().resolve()
    if not source_dir.is_dir():
        raise typer.BadParameter(f"目录不存在: {source_dir}", param_hint="SOURCE")

    config = IndexConfig(
        source_dir=source_dir,
        output_path=output.expanduser().resolve(),
        allow_recursive=allow_recursive,
        include_patterns=tuple(include) if include else DEFAULT_INCLUDE_PATTERNS,
        exclude_patterns=tuple(exclude) if exclude else (),
    )

    try:
        manifest_path = write_manifest(config)
    except AssetStoreError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    typer.echo(f"清单文件：{manifest_path}")


if __name__ == "__main__":
    app()
