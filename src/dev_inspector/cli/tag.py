import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from dev_inspector.core.tagger import tag_file, tag_tree

console = Console()
err_console = Console(stderr=True)


def tag(
    source: Annotated[Path, typer.Argument(help="Source file or directory to tag.")],
    out_dir: Annotated[Path | None, typer.Option(help="Directory receiving the tagged copy.")] = None,
    root: Annotated[Path | None, typer.Option(help="Record file paths relative to this directory.")] = None,
    watch: Annotated[bool, typer.Option(help="Keep running and retag files as they change.")] = False,
) -> None:
    """Attach data-source-* provenance attributes to every element."""
    if not source.exists():
        err_console.print(f"[red]No such file or directory: {source}[/red]")
        raise typer.Exit(1)

    if source.is_file() and out_dir is None:
        try:
            result = tag_file(source, root=root)
        except ValueError as exc:
            err_console.print(f"[red]{exc}[/red]")
            raise typer.Exit(1) from exc
        typer.echo(result.source, nl=False)
        return

    if out_dir is None:
        err_console.print("[red]--out-dir is required when tagging a directory.[/red]")
        raise typer.Exit(1)

    source_dir = source if source.is_dir() else source.parent
    paths = None if source.is_dir() else [source]
    written = tag_tree(source_dir, out_dir, root=root, paths=paths)
    console.print(f"[green]Tagged[/green] {len(written)} file(s) into {out_dir}")

    if watch:
        asyncio.run(_watch(source_dir, out_dir, root))


async def _watch(source_dir: Path, out_dir: Path, root: Path | None) -> None:
    from dev_inspector.watcher.watchfiles_adapter import WatchfilesWatcher

    async def _retag(paths: set[Path]) -> None:
        written = tag_tree(source_dir, out_dir, root=root, paths=paths)
        for path in written:
            console.print(f"[green]Retagged[/green] {path}")

    watcher = WatchfilesWatcher(source_dir, _retag, exclude=out_dir)
    await watcher.start()
    console.print(f"Watching {source_dir} (Ctrl+C to stop)")
    try:
        await watcher.wait()
    finally:
        await watcher.stop()
