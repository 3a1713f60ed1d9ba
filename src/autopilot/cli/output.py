"""Rich display helpers for CLI output."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from autopilot.models.action import ActionRequest, DispatchResponse
from autopilot.models.credential import CredentialSummary
from autopilot.storage.executions import ExecutionRecord

console = Console()


def print_analysis(analysis: ActionRequest) -> None:
    table = Table(title="Prompt Analysis", show_header=False, expand=True)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    table.add_row("Intent", analysis.intent)
    table.add_row("Tool", analysis.tool)
    table.add_row("Action", analysis.action)
    if analysis.parameters:
        table.add_row(
            "Parameters", ", ".join(f"{k}={v}" for k, v in analysis.parameters.items())
        )
    console.print(table)


def print_dispatch(response: DispatchResponse, text: str) -> None:
    style = "green" if response.result.success else "red"
    title = f"{response.analysis.tool} → {response.analysis.action} ({response.strategy.value})"
    console.print(Panel(text, title=title, border_style=style))


def print_error(message: str) -> None:
    console.print(Panel(f"[red]{message}[/]", title="Error", border_style="red"))


def print_info(message: str) -> None:
    console.print(f"[dim]{message}[/]")


def print_history(records: list[ExecutionRecord]) -> None:
    table = Table(title="Execution History", expand=True)
    table.add_column("Time")
    table.add_column("Prompt")
    table.add_column("Tool")
    table.add_column("Action")
    table.add_column("Via")
    table.add_column("Status", justify="center")

    for r in records:
        status = "[green]OK[/]" if r.success else f"[red]FAIL[/] {r.error}"
        table.add_row(
            r.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            r.prompt,
            r.tool,
            r.action,
            r.strategy,
            status,
        )

    console.print(table)


def print_credentials(credentials: list[CredentialSummary]) -> None:
    table = Table(title="Connected Credentials", expand=True)
    table.add_column("ID", style="dim")
    table.add_column("Provider", style="cyan")
    table.add_column("Account")
    table.add_column("Expires")

    for c in credentials:
        expires = c.expires_at.isoformat() if c.expires_at else "-"
        table.add_row(c.id, c.provider, c.display_name, expires)

    console.print(table)
