"""Open the proxy ports with ufw, or raw iptables rules as a fallback.

A missing firewall tool is not fatal: the operator is warned to open the
ports by hand.
"""

import logging

from .command_runner import CommandRunner
from .deploy_config import DeploySettings
from .provision_errors import CommandFailedError

logger = logging.getLogger(__name__)


def _check(runner: CommandRunner, args: list[str]) -> str:
    result = runner.run(args)
    if not result.ok:
        raise CommandFailedError(
            f"Firewall command failed: {' '.join(args)}",
            detail=result.diagnostics(),
        )
    return result.stdout


def ufw_commands(ports: tuple[int, ...]) -> list[list[str]]:
    cmds = [["ufw", "allow", f"{port}/tcp"] for port in ports]
    cmds.append(["ufw", "--force", "enable"])
    return cmds


def iptables_commands(ports: tuple[int, ...]) -> list[list[str]]:
    """Accept listed ports, established traffic and loopback; drop the rest."""
    cmds = [
        ["iptables", "-A", "INPUT", "-p", "tcp", "--dport", str(port), "-j", "ACCEPT"]
        for port in ports
    ]
    cmds += [
        ["iptables", "-A", "INPUT", "-m", "state", "--state",
         "ESTABLISHED,RELATED", "-j", "ACCEPT"],
        ["iptables", "-A", "INPUT", "-i", "lo", "-j", "ACCEPT"],
        ["iptables", "-P", "INPUT", "DROP"],
    ]
    return cmds


def configure_firewall(
    runner: CommandRunner, settings: DeploySettings, tool: str | None,
) -> str | None:
    """Apply firewall rules with the detected tool. Returns the tool used."""
    ports = settings.firewall_ports

    if tool == "ufw":
        for cmd in ufw_commands(ports):
            _check(runner, cmd)
        logger.info("ufw configured, allowed ports: %s", ", ".join(map(str, ports)))
        return tool

    if tool == "iptables":
        for cmd in iptables_commands(ports):
            _check(runner, cmd)
        rules = _check(runner, ["iptables-save"])
        settings.iptables_rules_path.parent.mkdir(parents=True, exist_ok=True)
        settings.iptables_rules_path.write_text(rules)
        logger.info("iptables configured, rules saved to %s", settings.iptables_rules_path)
        return tool

    logger.warning(
        "No firewall tool found (ufw/iptables), open port %d manually",
        settings.listen_port,
    )
    return None
