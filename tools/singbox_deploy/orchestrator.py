"""Run named provisioning steps in order, stopping at the first failure.

Every step receives the same ProvisionContext; values discovered by one
step (host facts, domain, credential) are stored on it for later steps.
There is no retry, no rollback and no resume: a failed run ends in the
Failed state and the host keeps whatever the completed steps did.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable

from .command_runner import CommandRunner
from .deploy_config import DeploySettings
from .host_facts import HostFacts
from .provision_errors import CommandFailedError, ProvisionError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1


class ProvisionState(enum.Enum):
    NOT_STARTED = "NotStarted"
    PRIVILEGE_CHECKED = "PrivilegeChecked"
    PACKAGES_UPDATED = "PackagesUpdated"
    BINARY_INSTALLED = "BinaryInstalled"
    CERTIFICATE_ISSUED = "CertificateIssued"
    CONFIG_WRITTEN = "ConfigWritten"
    SERVICE_REGISTERED = "ServiceRegistered"
    FIREWALL_CONFIGURED = "FirewallConfigured"
    SERVICE_RUNNING = "ServiceRunning"
    REPORTED = "Reported"
    FAILED = "Failed"


@dataclass
class StepResult:
    name: str
    success: bool
    error: ProvisionError | None = None

    @property
    def detail(self) -> str:
        if self.error is None:
            return ""
        return self.error.detail


@dataclass
class ProvisionContext:
    settings: DeploySettings
    runner: CommandRunner
    prompt_domain: Callable[[], str | None]
    facts: HostFacts | None = None
    domain: str = ""
    credential: str = ""
    firewall_tool: str | None = None
    service_status: str = ""
    warnings: list[str] = field(default_factory=list)
    results: list[StepResult] = field(default_factory=list)
    state: ProvisionState = ProvisionState.NOT_STARTED

    @property
    def failure(self) -> StepResult | None:
        for r in self.results:
            if not r.success:
                return r
        return None


@dataclass
class Step:
    name: str
    action: Callable[[ProvisionContext], None]
    reaches: ProvisionState


class Orchestrator:
    """Execute steps strictly in declaration order, fail fast."""

    def __init__(
        self,
        ctx: ProvisionContext,
        report: Callable[[ProvisionContext], None] | None = None,
    ) -> None:
        self.ctx = ctx
        self.report = report

    def run(self, steps: list[Step]) -> int:
        ctx = self.ctx
        total = len(steps)

        for num, step in enumerate(steps, 1):
            logger.info("[%d/%d] %s", num, total, step.name)
            try:
                step.action(ctx)
            except ProvisionError as e:
                return self._fail(step, e)
            except OSError as e:
                # file system errors from writes, moves and mkdirs
                return self._fail(step, CommandFailedError(
                    f"{type(e).__name__} during {step.name.lower()}", detail=str(e),
                ))

            ctx.results.append(StepResult(step.name, True))
            ctx.state = step.reaches

        if self.report:
            self.report(ctx)
        ctx.state = ProvisionState.REPORTED
        logger.info("Deployment complete")
        return EXIT_OK

    def _fail(self, step: Step, error: ProvisionError) -> int:
        self.ctx.results.append(StepResult(step.name, False, error))
        self.ctx.state = ProvisionState.FAILED
        self._log_failure(step.name, error)
        return EXIT_FAILED

    def _log_failure(self, name: str, error: ProvisionError) -> None:
        logger.error("Step '%s' failed: %s", name, error.message)
        if error.detail:
            logger.error("%s", error.detail)
        if error.hint:
            logger.info("Next: %s", error.hint)
