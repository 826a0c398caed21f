import asyncio
from typing import Annotated

import typer
from rich.console import Console

from dev_inspector.bridge.settings import DEFAULT_ENDPOINT
from dev_inspector.models import EditRequest
from dev_inspector.picker.client import BridgeClient

console = Console()


def send(
    file: Annotated[str, typer.Option(help="Source file of the element.")],
    line: Annotated[str, typer.Option(help="Line of the element.")],
    prompt: Annotated[str, typer.Option(help="What the agent should do.")],
    element: Annotated[str, typer.Option(help="Element kind, e.g. button.")] = "div",
    url: Annotated[str, typer.Option(help="Base URL of the running bridge.")] = "http://127.0.0.1:5173",
    endpoint: Annotated[str, typer.Option(help="Bridge endpoint path.")] = DEFAULT_ENDPOINT,
) -> None:
    """Send one edit request to a running bridge."""
    if not prompt.strip():
        console.print("[red]Prompt must not be empty.[/red]")
        raise typer.Exit(1)

    request = EditRequest(prompt=prompt, file=file, line=line, element_type=element)
    result = asyncio.run(BridgeClient(url, endpoint).send(request))
    if not result.ok:
        console.print(f"[red]Error:[/red] {result.message}")
        raise typer.Exit(1)
    console.print("[green]Changes applied.[/green]")
