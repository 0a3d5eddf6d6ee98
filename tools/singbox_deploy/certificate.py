"""Domain validation, certbot issuance and the renewal cron entry."""

import logging
import re
from dataclasses import dataclass

from .command_runner import CommandRunner
from .deploy_config import DeploySettings
from .provision_errors import (
    CertificateIssuanceError,
    CommandFailedError,
    EmptyInputError,
    InvalidDomainError,
)

logger = logging.getLogger(__name__)

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}

_LABEL = r"(?!-)[A-Za-z0-9-]{1,63}(?<!-)"
DOMAIN_RE = re.compile(rf"^(?:{_LABEL}\.)+{_LABEL}$")


def validate_domain(answer: str | None) -> str:
    """Return the stripped domain or raise; there is no retry loop."""
    domain = (answer or "").strip()
    if not domain:
        raise EmptyInputError("Domain name cannot be empty")
    if len(domain) > 253 or not DOMAIN_RE.match(domain):
        raise InvalidDomainError(f"Not a valid domain name: {domain!r}")
    return domain


@dataclass(frozen=True)
class CronEntry:
    minute: str
    hour: str
    day_of_month: str
    month: str
    day_of_week: str
    command: str

    @classmethod
    def from_schedule(cls, schedule: str, command: str) -> "CronEntry":
        fields = schedule.split()
        if len(fields) != 5:
            raise ValueError(f"Expected 5 cron fields, got {len(fields)}: {schedule!r}")
        return cls(*fields, command=command)

    def render(self) -> str:
        return " ".join((
            self.minute, self.hour, self.day_of_month,
            self.month, self.day_of_week, self.command,
        ))


def renewal_entry(settings: DeploySettings) -> CronEntry:
    return CronEntry.from_schedule(
        settings.renewal_schedule, settings.renewal_command(),
    )


def merge_crontab(existing: str, entry: CronEntry) -> str:
    """Drop any previous renewal line for this command, then append entry."""
    lines = [
        line for line in existing.splitlines()
        if line.strip() and not line.rstrip().endswith(entry.command)
    ]
    lines.append(entry.render())
    return "\n".join(lines) + "\n"


def install_renewal_cron(runner: CommandRunner, settings: DeploySettings) -> CronEntry:
    """Add the daily renewal + restart job to root's crontab."""
    entry = renewal_entry(settings)

    # crontab -l exits 1 with "no crontab for root" on a fresh host
    current = runner.run(["crontab", "-l"])
    existing = current.stdout if current.ok else ""

    result = runner.run(["crontab", "-"], input=merge_crontab(existing, entry))
    if not result.ok:
        raise CertificateIssuanceError(
            "Failed to install certificate renewal cron job",
            detail=result.diagnostics(),
        )
    logger.info("Certificate renewal scheduled: %s", entry.render())
    return entry


def issue_certificate(
    runner: CommandRunner, settings: DeploySettings, domain: str,
) -> None:
    """Install certbot and request a certificate via the standalone challenge."""
    logger.info("Installing certbot...")
    result = runner.run(["apt-get", "install", "-y", "certbot"], env=APT_ENV)
    if not result.ok:
        raise CommandFailedError(
            "Failed to install certbot", detail=result.diagnostics(),
        )

    logger.info("Requesting TLS certificate for %s...", domain)
    result = runner.run([
        settings.certbot_bin, "certonly",
        "--standalone",
        "--non-interactive",
        "--agree-tos",
        "--register-unsafely-without-email",
        "-d", domain,
    ])
    if not result.ok:
        raise CertificateIssuanceError(
            f"Certificate request for {domain} failed",
            detail=result.diagnostics(),
            hint="Make sure the domain resolves to this host and ports 80/443 are reachable",
        )
    logger.info("Certificate issued for %s", domain)
