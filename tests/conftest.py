from __future__ import annotations

import io
import tarfile
from pathlib import Path

import pytest

from singbox_deploy.command_runner import CommandResult
from singbox_deploy.deploy_config import DeploySettings


class FakeRunner:
    """Records commands; answers with canned results keyed by argument prefix."""

    def __init__(self, tools: tuple[str, ...] = ("ufw", "iptables")):
        self.tools = set(tools)
        self.calls: list[tuple[str, ...]] = []
        self.inputs: dict[tuple[str, ...], str | None] = {}
        self.responses: dict[tuple[str, ...], CommandResult] = {}

    def respond(self, prefix: tuple[str, ...], returncode: int = 0,
                stdout: str = "", stderr: str = "") -> None:
        self.responses[prefix] = CommandResult(prefix, returncode, stdout, stderr)

    def run(self, args, input=None, env=None) -> CommandResult:
        key = tuple(args)
        self.calls.append(key)
        self.inputs[key] = input
        # Longest matching prefix wins
        for prefix in sorted(self.responses, key=len, reverse=True):
            if key[: len(prefix)] == prefix:
                canned = self.responses[prefix]
                return CommandResult(key, canned.returncode, canned.stdout, canned.stderr)
        return CommandResult(key, 0)

    def which(self, name: str) -> str | None:
        return f"/usr/sbin/{name}" if name in self.tools else None

    def ran(self, *prefix: str) -> bool:
        return any(call[: len(prefix)] == prefix for call in self.calls)


def make_release_archive(path: Path, asset: str, payload: bytes = b"#!/bin/sh\n") -> Path:
    """Write a tar.gz laid out like a sing-box release."""
    with tarfile.open(path, "w:gz") as tf:
        for name, data in (
            (f"{asset}/sing-box", payload),
            (f"{asset}/LICENSE", b"GPL"),
        ):
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tf.addfile(info, io.BytesIO(data))
    return path


@pytest.fixture
def settings(tmp_path: Path) -> DeploySettings:
    root = tmp_path / "root"
    return DeploySettings(
        binary_path=root / "usr/local/bin/sing-box",
        config_path=root / "etc/sing-box/config.json",
        data_dir=root / "var/lib/sing-box",
        unit_path=root / "etc/systemd/system/sing-box.service",
        letsencrypt_live_dir=root / "etc/letsencrypt/live",
        iptables_rules_path=root / "etc/iptables/rules.v4",
    )


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()
