"""CLI commands for the LLM-assisted configuration helper."""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.prompt import Prompt

from leaderboard_generator.cli.generate import exit_with_error
from leaderboard_generator.exceptions import LeaderboardGeneratorError
from leaderboard_generator.interactive import save_config
from leaderboard_generator.llm.chat import ChatSession, Stage
from leaderboard_generator.llm.config import load_llm_settings
from leaderboard_generator.llm.service import LLMService
from leaderboard_generator.logging import configure_logging
from leaderboard_generator.pipeline import generate_leaderboard
from leaderboard_generator.settings import load_settings

logger = logging.getLogger(__name__)
console = Console()

EXIT_WORDS = ("exit", "quit")

llm_app = typer.Typer(
    name="llm",
    help="Test LLM providers and build configurations through chat",
    no_args_is_help=True,
)


@llm_app.command("test")
def test_command(
    provider: Optional[str] = typer.Argument(None, help="Provider ID (default: every configured provider)"),
    llm_config: Path = typer.Option(..., "--llm-config", help="LLM provider settings (JSON or YAML)"),
    prompt: Optional[str] = typer.Option(None, "--prompt", "-p", help="Prompt to send"),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
) -> None:
    """Send a short prompt to one or all providers and report the outcome.

    Examples:

        leaderboard-generator llm test --llm-config config/llm.json

        leaderboard-generator llm test openai --llm-config config/llm.yaml -p "ping"
    """
    configure_logging(level=log_level)
    try:
        settings = load_llm_settings(llm_config)
    except LeaderboardGeneratorError as e:
        console.print(f"[bold red]Error: {e.user_message}[/bold red]")
        raise typer.Exit(code=1) from e

    provider_ids = [provider] if provider else list(settings.providers)
    failures = 0
    with LLMService(settings) as service:
        for provider_id in provider_ids:
            result = service.test_provider(provider_id, prompt)
            if result["success"]:
                console.print(
                    f"[green]✓[/green] {provider_id} ({result['model']}, {result['latency']}ms): {result['response']}"
                )
            else:
                failures += 1
                console.print(f"[red]✗[/red] {provider_id}: {result['error']}")

    if failures:
        raise typer.Exit(code=1)


@llm_app.command("chat")
def chat_command(
    llm_config: Path = typer.Option(..., "--llm-config", help="LLM provider settings (JSON or YAML)"),
    provider: Optional[str] = typer.Option(None, "--provider", help="Preferred provider ID"),
    save: Optional[Path] = typer.Option(None, "--save", help="Write the drafted configuration here on exit"),
    generate: bool = typer.Option(False, "--generate", "-g", help="Generate the leaderboard from the finished draft"),
    skip_navigation: bool = typer.Option(False, "--skip-navigation", "-s", help="Skip updating navigation links"),
    site_root: Optional[Path] = typer.Option(None, "--site-root", help="Site root directory (default: .)"),
    settings_file: Optional[Path] = typer.Option(None, "--settings", help="YAML settings file"),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
) -> None:
    """Draft a leaderboard configuration in a guided chat. Type 'exit' to stop.

    With --generate the draft is run through the generation pipeline once the
    chat reaches the generation stage.
    """
    configure_logging(level=log_level)
    try:
        settings = load_llm_settings(llm_config)
    except LeaderboardGeneratorError as e:
        console.print(f"[bold red]Error: {e.user_message}[/bold red]")
        raise typer.Exit(code=1) from e

    with LLMService(settings) as service:
        session = ChatSession(send=lambda messages: service.send(messages, provider_id=provider))
        console.print(f"[bold blue]Assistant:[/bold blue] {session.messages[0]['content']}")

        while session.stage is not Stage.GENERATION:
            text = Prompt.ask("[bold]You[/bold]")
            if text.strip().lower() in EXIT_WORDS:
                break
            try:
                response = session.send_message(text)
            except LeaderboardGeneratorError as e:
                console.print(f"[bold red]Error: {e.user_message}[/bold red]")
                continue
            console.print(f"[bold blue]Assistant:[/bold blue] {response.content}")
            console.print(f"[dim]Stage: {session.stage.value}[/dim]")

    if save is not None:
        save_config(session.config, save)
        console.print(f"[green]✓[/green] Configuration saved to {save}")
    elif not generate:
        console.print(json.dumps(session.config, indent=2))

    if not generate:
        return
    if session.stage is not Stage.GENERATION:
        console.print("[yellow]Chat ended before the generation stage; generating from the current draft[/yellow]")
    try:
        generator_settings = load_settings(settings_file, site_root=site_root)
        result = generate_leaderboard(session.config, generator_settings, skip_navigation=skip_navigation)
    except LeaderboardGeneratorError as e:
        raise exit_with_error(e) from e

    for warning in result.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")
    console.print("[bold green]✓ Leaderboard generation completed successfully![/bold green]")
    console.print(f"New leaderboard available at: {generator_settings.leaderboard_dir}/{result.leaderboard_id}/")
