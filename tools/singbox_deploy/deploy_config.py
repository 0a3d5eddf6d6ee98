"""Fixed paths and constants of a sing-box deployment."""

from dataclasses import dataclass
from pathlib import Path

SINGBOX_VERSION = "1.12.1"

RELEASE_URL_TEMPLATE = (
    "https://github.com/SagerNet/sing-box/releases/download/v{version}/{asset}.tar.gz"
)

PREREQUISITE_PACKAGES = ("curl", "wget", "unzip", "software-properties-common")


@dataclass(frozen=True)
class DeploySettings:
    version: str = SINGBOX_VERSION
    service_name: str = "sing-box"
    binary_path: Path = Path("/usr/local/bin/sing-box")
    config_path: Path = Path("/etc/sing-box/config.json")
    data_dir: Path = Path("/var/lib/sing-box")
    unit_path: Path = Path("/etc/systemd/system/sing-box.service")
    letsencrypt_live_dir: Path = Path("/etc/letsencrypt/live")
    iptables_rules_path: Path = Path("/etc/iptables/rules.v4")
    certbot_bin: str = "/usr/bin/certbot"
    listen_port: int = 443
    firewall_ports: tuple[int, ...] = (22, 443, 80)
    renewal_schedule: str = "0 12 * * *"
    username: str = "user"
    packages: tuple[str, ...] = PREREQUISITE_PACKAGES

    @property
    def cache_path(self) -> Path:
        return self.data_dir / "cache.db"

    def release_url(self, asset: str) -> str:
        return RELEASE_URL_TEMPLATE.format(version=self.version, asset=asset)

    def certificate_path(self, domain: str) -> Path:
        return self.letsencrypt_live_dir / domain / "fullchain.pem"

    def private_key_path(self, domain: str) -> Path:
        return self.letsencrypt_live_dir / domain / "privkey.pem"

    def renewal_command(self) -> str:
        """Shell command run by cron: renew quietly, then restart the daemon."""
        return f"{self.certbot_bin} renew --quiet && systemctl restart {self.service_name}"
