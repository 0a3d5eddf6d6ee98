"""The provisioning steps, in the order they run.

check_host -> update_packages -> install_binary -> issue_certificate ->
write_config -> register_service -> configure_firewall -> start_service
"""

import logging

from .certificate import APT_ENV, install_renewal_cron, issue_certificate, validate_domain
from .config_generator import build_singbox_json, generate_credential, write_config
from .firewall import configure_firewall as apply_firewall
from .host_facts import detect_host_facts, release_arch
from .orchestrator import ProvisionContext, ProvisionState, Step
from .provision_errors import CommandFailedError, PrivilegeError, ServiceStartError
from .service_unit import ServiceUnit, install_unit
from .singbox_downloader import install_singbox

logger = logging.getLogger(__name__)


def check_host(ctx: ProvisionContext) -> None:
    """Require root, then resolve the release architecture before any download."""
    facts = detect_host_facts(ctx.runner)
    ctx.facts = facts
    if not facts.is_root:
        raise PrivilegeError(
            "This installer must be run as root",
            hint="sudo singbox-deploy",
        )
    arch = release_arch(facts.machine)
    logger.info("Architecture: %s (%s)", facts.machine, arch)


def update_packages(ctx: ProvisionContext) -> None:
    commands = [
        ["apt-get", "update"],
        ["apt-get", "upgrade", "-y"],
        ["apt-get", "install", "-y", *ctx.settings.packages],
    ]
    for cmd in commands:
        result = ctx.runner.run(cmd, env=APT_ENV)
        if not result.ok:
            raise CommandFailedError(
                f"Package update failed: {' '.join(cmd)}",
                detail=result.diagnostics(),
            )


def install_binary(ctx: ProvisionContext) -> None:
    install_singbox(ctx.settings, ctx.facts.arch)


def issue_tls_certificate(ctx: ProvisionContext) -> None:
    ctx.domain = validate_domain(ctx.prompt_domain())
    issue_certificate(ctx.runner, ctx.settings, ctx.domain)
    install_renewal_cron(ctx.runner, ctx.settings)


def write_service_config(ctx: ProvisionContext) -> None:
    ctx.credential = generate_credential()
    config = build_singbox_json(ctx.settings, ctx.domain, ctx.credential)
    write_config(config, ctx.settings.config_path)


def register_service(ctx: ProvisionContext) -> None:
    install_unit(ctx.runner, ctx.settings, ServiceUnit.for_settings(ctx.settings))


def configure_firewall(ctx: ProvisionContext) -> None:
    tool = ctx.facts.firewall_tool if ctx.facts else None
    ctx.firewall_tool = apply_firewall(ctx.runner, ctx.settings, tool)
    if ctx.firewall_tool is None:
        ctx.warnings.append(
            f"No firewall tool found, open port {ctx.settings.listen_port} manually",
        )


def start_service(ctx: ProvisionContext) -> None:
    name = ctx.settings.service_name
    hint = f"journalctl -u {name} -f"

    result = ctx.runner.run(["systemctl", "start", name])
    if not result.ok:
        raise ServiceStartError(
            f"{name} failed to start", detail=result.diagnostics(), hint=hint,
        )

    status = ctx.runner.run(["systemctl", "is-active", "--quiet", name])
    if not status.ok:
        raise ServiceStartError(f"{name} is not active after start", hint=hint)

    ctx.service_status = "active"
    logger.info("%s is running", name)


def default_steps() -> list[Step]:
    return [
        Step("Check host", check_host, ProvisionState.PRIVILEGE_CHECKED),
        Step("Update packages", update_packages, ProvisionState.PACKAGES_UPDATED),
        Step("Install sing-box", install_binary, ProvisionState.BINARY_INSTALLED),
        Step("Issue TLS certificate", issue_tls_certificate, ProvisionState.CERTIFICATE_ISSUED),
        Step("Write config", write_service_config, ProvisionState.CONFIG_WRITTEN),
        Step("Register service", register_service, ProvisionState.SERVICE_REGISTERED),
        Step("Configure firewall", configure_firewall, ProvisionState.FIREWALL_CONFIGURED),
        Step("Start service", start_service, ProvisionState.SERVICE_RUNNING),
    ]
