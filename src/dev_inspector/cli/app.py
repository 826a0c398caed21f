import typer

from dev_inspector.cli.send import send
from dev_inspector.cli.serve import serve
from dev_inspector.cli.tag import tag

app = typer.Typer(
    name="dev-inspector",
    help="Dev Inspector: tag UI sources and bridge element edits to a coding agent.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("tag")(tag)
app.command("serve")(serve)
app.command("send")(send)


def main() -> None:
    app()
