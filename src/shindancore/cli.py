"""Command-line interface for shindancore."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import click
import structlog
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from shindancore import __version__
from shindancore.client import ShindanClient
from shindancore.config.config import Config, find_config_file
from shindancore.domain import ShindanDomain
from shindancore.exceptions import ShindanError
from shindancore.extractor.models import ImageSegment, TextSegment
from shindancore.observability.logging import configure_logging

console = Console()
err_console = Console(stderr=True)
logger = structlog.get_logger(__name__)

T = TypeVar("T")

DOMAIN_CHOICES = [domain.name.lower() for domain in ShindanDomain]

domain_option = click.option(
    "--domain",
    "-d",
    default="jp",
    show_default=True,
    help=f"ShindanMaker domain or locale ({', '.join(DOMAIN_CHOICES)}, en-US, ...)",
)


def _run(ctx: click.Context, domain: str, action: Callable[[ShindanClient], Awaitable[T]]) -> T:
    """Run ``action`` with a client, turning library errors into exit status 1."""

    async def runner() -> T:
        async with ShindanClient(domain, ctx.obj["config"]) as client:
            return await action(client)

    try:
        return asyncio.run(runner())
    except ShindanError as e:
        logger.debug("Command failed", error_type=type(e).__name__, error=str(e))
        err_console.print(f"[red]Error ({type(e).__name__}): {e}[/red]")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """Query ShindanMaker quizzes from the command line."""
    ctx.ensure_object(dict)

    config_path = Path(config) if config else find_config_file()
    settings = Config.from_yaml(config_path) if config_path else Config()
    if log_level:
        settings.monitoring.log_level = log_level.upper()

    configure_logging(settings.monitoring)
    ctx.obj["config"] = settings


@cli.command()
@click.argument("quiz_id")
@domain_option
@click.pass_context
def title(ctx: click.Context, quiz_id: str, domain: str) -> None:
    """Print the title of a shindan."""
    console.print(_run(ctx, domain, lambda client: client.get_title(quiz_id)))


@cli.command()
@click.argument("quiz_id")
@domain_option
@click.pass_context
def describe(ctx: click.Context, quiz_id: str, domain: str) -> None:
    """Print the title and description of a shindan."""
    shindan_title, description = _run(ctx, domain, lambda client: client.get_title_with_description(quiz_id))
    console.print(Panel(description or "[dim](no description)[/dim]", title=shindan_title or quiz_id))


@cli.command()
@click.argument("quiz_id")
@click.argument("name")
@domain_option
@click.option("--json", "as_json", is_flag=True, help="Print segments as JSON")
@click.pass_context
def segments(ctx: click.Context, quiz_id: str, name: str, domain: str, as_json: bool) -> None:
    """Submit NAME to a shindan and print the result segments."""
    result = _run(ctx, domain, lambda client: client.get_text_result(quiz_id, name))

    if as_json:
        click.echo(json.dumps({"title": result.title, "content": result.content.to_list()}, ensure_ascii=False))
        return

    table = Table(title=result.title or quiz_id, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Type")
    table.add_column("Content")
    for index, segment in enumerate(result.content, start=1):
        match segment:
            case TextSegment(text=text):
                table.add_row(str(index), "text", text)
            case ImageSegment(url=url):
                table.add_row(str(index), "[cyan]image[/cyan]", url)
    console.print(table)


@cli.command()
@click.argument("quiz_id")
@click.argument("name")
@domain_option
@click.option("--output", "-o", type=click.Path(dir_okay=False, writable=True), help="Write HTML to this file")
@click.pass_context
def html(ctx: click.Context, quiz_id: str, name: str, domain: str, output: Optional[str]) -> None:
    """Submit NAME to a shindan and emit a standalone result page."""
    page, shindan_title = _run(ctx, domain, lambda client: client.get_html_str_with_title(quiz_id, name))
    if output:
        Path(output).write_text(page, encoding="utf-8")
        console.print(f"[green]Saved[/green] {shindan_title!r} to {output}")
    else:
        click.echo(page)


@cli.command()
@click.argument("quiz_id")
@click.argument("name")
@domain_option
@click.option("--output", "-o", required=True, type=click.Path(dir_okay=False, writable=True), help="Image file")
@click.pass_context
def image(ctx: click.Context, quiz_id: str, name: str, domain: str, output: str) -> None:
    """Submit NAME to a shindan and render the result to an image."""

    async def action(client: ShindanClient):
        await client.init_browser()
        return await client.get_image_result(quiz_id, name)

    result = _run(ctx, domain, action)
    Path(output).write_bytes(result.image)
    console.print(f"[green]Saved[/green] {result.title!r} ({len(result.image)} bytes) to {output}")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
