"""Rich terminal output: the final deployment summary."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .orchestrator import ProvisionContext

console = Console()

PROTOCOL = "anytls"


def management_commands(service: str) -> list[tuple[str, str]]:
    return [
        ("Start", f"systemctl start {service}"),
        ("Stop", f"systemctl stop {service}"),
        ("Restart", f"systemctl restart {service}"),
        ("Status", f"systemctl status {service}"),
        ("Logs", f"journalctl -u {service} -f"),
    ]


def build_commands_table(service: str) -> Table:
    table = Table(title="Management", show_header=False)
    table.add_column("Action", style="dim", min_width=8)
    table.add_column("Command", style="cyan")
    for action, cmd in management_commands(service):
        table.add_row(action, cmd)
    return table


def show_summary(ctx: ProvisionContext) -> None:
    """Print connection details. The only place the password is displayed."""
    settings = ctx.settings
    status = ctx.service_status or "unknown"
    color = "green" if status == "active" else "red"

    summary = (
        f"Service status: [{color}]{status}[/{color}]\n"
        f"Listen port:    {settings.listen_port}\n"
        f"Domain:         {ctx.domain}\n"
        f"Protocol:       {PROTOCOL}\n"
        f"Username:       {settings.username}\n"
        f"Password:       [bold]{ctx.credential}[/bold]"
    )
    console.print()
    console.print(Panel(summary, title="Deployment Complete", border_style="bright_cyan"))

    for warning in ctx.warnings:
        console.print(f"  [yellow]! {warning}[/yellow]")

    console.print(build_commands_table(settings.service_name))
