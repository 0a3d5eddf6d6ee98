#!/usr/bin/env python3
"""sing-box server deployment: install, certify, configure and start.

Run as root on a fresh Debian/Ubuntu host. The only input is the domain
name, asked interactively.

Usage:
    python -m singbox_deploy.deploy             # Full deployment
    python -m singbox_deploy.deploy --verbose   # Also show every external command
"""

import argparse
import logging
import sys

from rich.logging import RichHandler

from .command_runner import CommandRunner
from .deploy_config import DeploySettings
from .orchestrator import ProvisionContext, Orchestrator
from .report import console, show_summary
from .steps import default_steps
from .wizard import ask_domain, show_banner

EXIT_INTERRUPTED = 130


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Deploy a sing-box anytls server on this host",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every external command (DEBUG level)",
    )
    return parser.parse_args(argv)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def run(settings: DeploySettings | None = None) -> int:
    ctx = ProvisionContext(
        settings=settings or DeploySettings(),
        runner=CommandRunner(),
        prompt_domain=ask_domain,
    )
    return Orchestrator(ctx, report=show_summary).run(default_steps())


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)
    show_banner()

    try:
        status = run()
    except KeyboardInterrupt:
        console.print("\n  [yellow]Interrupted, the host is left as-is.[/yellow]")
        sys.exit(EXIT_INTERRUPTED)
    sys.exit(status)


if __name__ == "__main__":
    main()
