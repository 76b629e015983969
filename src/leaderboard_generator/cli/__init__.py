"""CLI package for the leaderboard generator."""

import typer

app = typer.Typer(
    name="leaderboard-generator",
    help="Generate leaderboards for the Quantum Advantage Framework site",
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)

# Register commands at import time so the app can be used programmatically
# (e.g., in tests) without invoking the full CLI entrypoint.
from leaderboard_generator.cli.generate import (  # noqa: E402
    export_command,
    generate_command,
    list_command,
    validate_command,
)
from leaderboard_generator.cli.llm import llm_app  # noqa: E402

app.command("generate")(generate_command)
app.command("validate")(validate_command)
app.command("list")(list_command)
app.command("export")(export_command)
app.add_typer(llm_app, name="llm")

__all__ = ["app"]
