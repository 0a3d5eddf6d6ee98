"""Detect the properties of the host that later steps depend on."""

import os
import platform
from dataclasses import dataclass

from .command_runner import CommandRunner
from .provision_errors import UnsupportedArchitectureError

# uname -m value -> sing-box release asset suffix
RELEASE_ARCHES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
}

# Preferred first
FIREWALL_TOOLS = ("ufw", "iptables")


@dataclass(frozen=True)
class HostFacts:
    machine: str
    is_root: bool
    firewall_tool: str | None = None

    @property
    def arch(self) -> str:
        return release_arch(self.machine)


def release_arch(machine: str) -> str:
    """Map a CPU identifier to the sing-box asset naming: amd64, arm64."""
    arch = RELEASE_ARCHES.get(machine.lower())
    if arch is None:
        raise UnsupportedArchitectureError(
            f"Unsupported system architecture: {machine}",
            hint=f"Supported: {', '.join(sorted(RELEASE_ARCHES))}",
        )
    return arch


def detect_firewall_tool(runner: CommandRunner) -> str | None:
    for tool in FIREWALL_TOOLS:
        if runner.which(tool):
            return tool
    return None


def detect_host_facts(runner: CommandRunner) -> HostFacts:
    return HostFacts(
        machine=platform.machine(),
        is_root=os.geteuid() == 0,
        firewall_tool=detect_firewall_tool(runner),
    )
