"""Run external tools and return their outcome instead of raising.

Callers decide which exit codes are fatal and which error to raise; the
runner only captures what happened.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Exit statuses a shell reports for "command not found" and "cannot execute"
NOT_FOUND = 127
NOT_EXECUTABLE = 126


@dataclass
class CommandResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def diagnostics(self) -> str:
        """Combined stderr/stdout for error reports, stderr first."""
        parts = [p.strip() for p in (self.stderr, self.stdout) if p and p.strip()]
        return "\n".join(parts)


class CommandRunner:
    """Thin wrapper around subprocess.run used by every provisioning step."""

    def run(
        self,
        args: list[str],
        input: str | None = None,
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        logger.debug("$ %s", " ".join(args))
        merged_env = None
        if env:
            merged_env = {**os.environ, **env}
        try:
            proc = subprocess.run(
                args,
                input=input,
                capture_output=True,
                text=True,
                env=merged_env,
            )
        except FileNotFoundError as e:
            return CommandResult(tuple(args), NOT_FOUND, "", str(e))
        except OSError as e:
            return CommandResult(tuple(args), NOT_EXECUTABLE, "", str(e))
        return CommandResult(tuple(args), proc.returncode, proc.stdout, proc.stderr)

    def which(self, name: str) -> str | None:
        return shutil.which(name)
