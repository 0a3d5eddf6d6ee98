"""Build, write and register the sing-box systemd unit."""

import configparser
import io
import logging
from dataclasses import dataclass

from .command_runner import CommandRunner
from .deploy_config import DeploySettings
from .provision_errors import CommandFailedError

logger = logging.getLogger(__name__)

# Enough to bind :443 and manage routes without running as full root
CAPABILITIES = ("CAP_NET_ADMIN", "CAP_NET_BIND_SERVICE")


@dataclass
class ServiceUnit:
    exec_start: str
    description: str = "sing-box service"
    documentation: str = "https://sing-box.sagernet.org"
    after: tuple[str, ...] = ("network.target", "nss-lookup.target")
    capabilities: tuple[str, ...] = CAPABILITIES
    restart: str = "on-failure"
    restart_sec: str = "1800s"
    limit_nofile: str = "infinity"
    wanted_by: str = "multi-user.target"

    @classmethod
    def for_settings(cls, settings: DeploySettings) -> "ServiceUnit":
        return cls(exec_start=f"{settings.binary_path} run -c {settings.config_path}")

    def sections(self) -> dict[str, dict[str, str]]:
        caps = " ".join(self.capabilities)
        return {
            "Unit": {
                "Description": self.description,
                "Documentation": self.documentation,
                "After": " ".join(self.after),
            },
            "Service": {
                "CapabilityBoundingSet": caps,
                "AmbientCapabilities": caps,
                "ExecStart": self.exec_start,
                "Restart": self.restart,
                "RestartSec": self.restart_sec,
                "LimitNOFILE": self.limit_nofile,
            },
            "Install": {
                "WantedBy": self.wanted_by,
            },
        }

    def render(self) -> str:
        parser = configparser.ConfigParser(interpolation=None)
        parser.optionxform = str  # systemd keys are case-sensitive
        parser.read_dict(self.sections())
        buf = io.StringIO()
        parser.write(buf, space_around_delimiters=False)
        return buf.getvalue().rstrip("\n") + "\n"


def _systemctl(runner: CommandRunner, *args: str) -> None:
    result = runner.run(["systemctl", *args])
    if not result.ok:
        raise CommandFailedError(
            f"systemctl {' '.join(args)} failed", detail=result.diagnostics(),
        )


def install_unit(
    runner: CommandRunner, settings: DeploySettings, unit: ServiceUnit,
) -> None:
    """Write the unit file, create the data dir, reload and enable."""
    settings.unit_path.parent.mkdir(parents=True, exist_ok=True)
    settings.unit_path.write_text(unit.render())
    logger.info("Service unit written to %s", settings.unit_path)

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    _systemctl(runner, "daemon-reload")
    _systemctl(runner, "enable", settings.service_name)
    logger.info("%s enabled", settings.service_name)
