import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

console = Console()


def serve(
    host: str = "127.0.0.1",
    port: int = 5173,
    static_dir: Annotated[Path | None, typer.Option(help="Serve this (tagged) build directory.")] = None,
    host_profile: Annotated[
        str | None, typer.Option(help="Host profile: auto, posix or wsl. Defaults to DEV_INSPECTOR_HOST.")
    ] = None,
    log_level: Annotated[str, typer.Option(help="Logging level.")] = "INFO",
) -> None:
    """Start the bridge server."""
    import uvicorn

    from dev_inspector.api.app import create_app
    from dev_inspector.bridge.host import select_host
    from dev_inspector.bridge.service import BridgeService
    from dev_inspector.bridge.settings import BridgeSettings

    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    settings = BridgeSettings.from_env()
    try:
        profile = select_host(host_profile or settings.host)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    app = create_app(BridgeService(profile, settings), static_dir=static_dir)
    console.print(f"[green]Starting bridge on {host}:{port}[/green] (POST {settings.endpoint}, {profile.name} host)")
    uvicorn.run(app, host=host, port=port, log_config=None)
