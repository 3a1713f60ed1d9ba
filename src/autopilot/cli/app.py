"""Typer CLI commands."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from autopilot.chat.formatter import format_outcome
from autopilot.cli.output import (
    print_analysis,
    print_credentials,
    print_dispatch,
    print_error,
    print_history,
    print_info,
)
from autopilot.config.logging_config import configure_logging
from autopilot.exceptions import AutopilotError

console = Console()
app = typer.Typer(name="autopilot", help="Run automations from natural-language requests.")


def _get_services():
    from autopilot.main import build_services

    services = build_services()
    configure_logging(services.settings.log_level)
    return services


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Natural language automation request"),
    user: str = typer.Option(..., "--user", "-u", help="User id to run as"),
) -> None:
    """Analyze a request and execute it with the user's connected services."""
    async def _run():
        services = _get_services()
        await services.start()
        try:
            response = await services.orchestrator.execute(user, prompt)
            print_dispatch(response, format_outcome(response.analysis, response.result))
            if not response.result.success:
                raise typer.Exit(1)
        except AutopilotError as exc:
            print_error(str(exc))
            raise typer.Exit(1)
        finally:
            await services.close()

    asyncio.run(_run())


@app.command()
def analyze(
    prompt: str = typer.Argument(..., help="Natural language automation request"),
) -> None:
    """Show how a request would be routed without executing it."""
    async def _run():
        services = _get_services()
        try:
            print_analysis(await services.orchestrator.analyze(prompt))
        except AutopilotError as exc:
            print_error(str(exc))
            raise typer.Exit(1)
        finally:
            await services.close()

    asyncio.run(_run())


@app.command()
def history(
    user: str = typer.Option(..., "--user", "-u", help="User id"),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of records"),
) -> None:
    """Show recent executions."""
    async def _run():
        services = _get_services()
        await services.start()
        try:
            records = await services.history.history(user, limit=limit)
            if not records:
                print_info("No history found.")
            else:
                print_history(records)
        finally:
            await services.close()

    asyncio.run(_run())


@app.command()
def credentials(
    user: str = typer.Option(..., "--user", "-u", help="User id"),
) -> None:
    """List the user's connected services."""
    async def _run():
        services = _get_services()
        await services.start()
        try:
            rows = await services.credentials.list(user)
            if not rows:
                print_info("No credentials connected.")
            else:
                print_credentials(rows)
        finally:
            await services.close()

    asyncio.run(_run())


@app.command()
def connect(
    provider: str = typer.Argument(..., help="gmail, google_sheets or slack"),
    user: str = typer.Option(..., "--user", "-u", help="User id"),
) -> None:
    """Print the OAuth authorization URL for a provider."""
    async def _run():
        services = _get_services()
        try:
            console.print(services.oauth.authorization_url(provider, user))
        except AutopilotError as exc:
            print_error(str(exc))
            raise typer.Exit(1)
        finally:
            await services.close()

    asyncio.run(_run())


@app.command(name="config")
def show_config() -> None:
    """Show current configuration."""
    from autopilot.config.settings import Settings

    try:
        settings = Settings()  # type: ignore[call-arg]
    except Exception as exc:
        print_error(f"Failed to load settings: {exc}")
        raise typer.Exit(1)

    table_data = {
        "Model": settings.openai_model,
        "DB Path": str(settings.db_path),
        "Environment": settings.environment,
        "Dispatch": settings.dispatch_strategy,
        "Log Level": settings.log_level,
        "Hub": "configured" if settings.hub_api_key else "not configured",
        "Webhook Secret": "configured" if settings.webhook_secret else "not configured",
        "Telegram": "configured" if settings.telegram_bot_token else "not configured",
    }

    table = Table(title="Configuration", show_header=False)
    table.add_column("Setting", style="bold cyan")
    table.add_column("Value")
    for k, v in table_data.items():
        table.add_row(k, v)
    console.print(table)
