"""Interactive prompts using questionary + rich."""

import questionary
from questionary import Style
from rich.console import Console

console = Console()

# Custom questionary style
STYLE = Style([
    ("qmark", "fg:ansicyan bold"),
    ("question", "bold"),
    ("answer", "fg:ansicyan"),
    ("instruction", "fg:ansibrightblack"),
])

BANNER = """
╔══════════════════════════════════════════════════════════╗
║               sing-box Server Deployment                 ║
║          anytls + TLS on port 443, systemd, cron         ║
╚══════════════════════════════════════════════════════════╝
"""


def show_banner() -> None:
    """Display the ASCII art banner."""
    console.print(BANNER, style="bright_cyan")


def ask_domain() -> str | None:
    """Ask for the domain pointing at this host. None if the prompt is aborted."""
    return questionary.text(
        "Enter your domain name (must resolve to this server):",
        style=STYLE,
    ).ask()
