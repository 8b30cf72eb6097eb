import asyncio
import logging

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from codeforge.functions.code_agent import code_agent_function
from codeforge.persistence.store import MessageStore
from codeforge.runtime.worker import Worker
from codeforge.usage import UsageTracker, trigger_code_agent
from codeforge.utils.config import ConfigurationError, Settings

console = Console()

LOCAL_USER_ID = "local"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_settings(**overrides) -> Settings:
    load_dotenv()
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    updates = {k: v for k, v in overrides.items() if v is not None}
    return settings.model_copy(update=updates) if updates else settings


async def _close_store(store: MessageStore) -> None:
    aclose = getattr(store, "aclose", None)
    if aclose is not None:
        await aclose()


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool) -> None:
    """Build apps in a sandbox from a prompt."""
    _configure_logging(verbose)


@main.command()
@click.argument("project_id")
@click.argument("prompt")
@click.option(
    "--backend",
    type=click.Choice(["e2b", "local"]),
    help="Sandbox backend (overrides CODEFORGE_SANDBOX_BACKEND)",
)
@click.option("--model", help="Model id (overrides CODEFORGE_MODEL)")
def run(
    project_id: str,
    prompt: str,
    backend: str | None,
    model: str | None,
) -> None:
    """Run the coding agent on PROMPT for PROJECT_ID.

    The prompt is stored as the project's user message before the run starts.
    Usage points are tracked in memory only, so no limit carries over between
    invocations.
    """
    settings = _load_settings(sandbox_backend=backend, model=model)

    async def _run():
        worker = Worker.from_settings(settings, workflows=[code_agent_function])
        try:
            return await trigger_code_agent(
                worker,
                UsageTracker(),
                worker.message_store,
                user_id=LOCAL_USER_ID,
                project_id=project_id,
                value=prompt,
            )
        finally:
            await _close_store(worker.message_store)

    try:
        with console.status("[bold green]Agent is working..."):
            result = asyncio.run(_run())
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)

    files = "\n".join(f"  [cyan]{path}[/cyan]" for path in sorted(result.files))
    files = files or "  [dim]none[/dim]"
    console.print(
        Panel(
            f"[bold]{result.title}[/bold]\n\n"
            f"Preview: [link={result.url}]{result.url}[/link]\n\n"
            f"Files:\n{files}",
            title="Fragment",
            border_style="green" if result.summary and result.files else "red",
        )
    )


@main.command()
@click.argument("project_id")
@click.option("--limit", default=10, show_default=True, help="Number of messages to show")
def history(project_id: str, limit: int) -> None:
    """Show the latest messages of PROJECT_ID."""
    settings = _load_settings()
    if not settings.persistence_url:
        console.print("[red]CODEFORGE_PERSISTENCE_URL is not set[/red]")
        raise SystemExit(1)

    from codeforge.persistence.http import HttpMessageStore

    async def _fetch():
        async with HttpMessageStore(
            settings.persistence_url, api_key=settings.persistence_api_key
        ) as store:
            return await store.find_messages(project_id, limit=limit, order="asc")

    messages = asyncio.run(_fetch())
    table = Table(title=f"Messages of {project_id}")
    table.add_column("Created", style="dim")
    table.add_column("Role")
    table.add_column("Type")
    table.add_column("Content")
    for message in messages:
        table.add_row(
            message.created_at.isoformat(timespec="seconds"),
            message.role.value,
            message.type.value,
            message.content,
        )
    console.print(table)


if __name__ == "__main__":
    main()
