import pytest

from conftest import FakeRunner
from singbox_deploy.orchestrator import (
    EXIT_FAILED,
    EXIT_OK,
    Orchestrator,
    ProvisionContext,
    ProvisionState,
    Step,
)
from singbox_deploy.provision_errors import CommandFailedError, DownloadError


@pytest.fixture
def ctx(settings):
    return ProvisionContext(settings=settings, runner=FakeRunner(), prompt_domain=lambda: "")


def _recording(log, name):
    def action(ctx):
        log.append(name)
    return action


def test_steps_run_in_order_and_report(ctx):
    log = []
    steps = [
        Step("one", _recording(log, "one"), ProvisionState.PRIVILEGE_CHECKED),
        Step("two", _recording(log, "two"), ProvisionState.PACKAGES_UPDATED),
    ]
    reported = []

    status = Orchestrator(ctx, report=reported.append).run(steps)

    assert status == EXIT_OK
    assert log == ["one", "two"]
    assert reported == [ctx]
    assert ctx.state is ProvisionState.REPORTED
    assert [r.success for r in ctx.results] == [True, True]


def test_first_failure_halts(ctx, caplog):
    log = []

    def fail(ctx):
        raise DownloadError("fetch failed", detail="404 Not Found")

    steps = [
        Step("one", _recording(log, "one"), ProvisionState.PRIVILEGE_CHECKED),
        Step("download", fail, ProvisionState.BINARY_INSTALLED),
        Step("three", _recording(log, "three"), ProvisionState.CERTIFICATE_ISSUED),
    ]
    reported = []

    status = Orchestrator(ctx, report=reported.append).run(steps)

    assert status == EXIT_FAILED
    assert log == ["one"]
    assert reported == []
    assert ctx.state is ProvisionState.FAILED
    assert ctx.failure.name == "download"
    assert ctx.failure.detail == "404 Not Found"
    assert "Step 'download' failed" in caplog.text
    assert "404 Not Found" in caplog.text


def test_file_system_error_fails_the_step(ctx, caplog):
    log = []

    def write(ctx):
        raise FileExistsError(17, "File exists", "/etc/sing-box")

    steps = [
        Step("Write config", write, ProvisionState.CONFIG_WRITTEN),
        Step("after", _recording(log, "after"), ProvisionState.SERVICE_REGISTERED),
    ]

    status = Orchestrator(ctx).run(steps)

    assert status == EXIT_FAILED
    assert log == []
    assert ctx.state is ProvisionState.FAILED
    assert ctx.failure.name == "Write config"
    assert isinstance(ctx.failure.error, CommandFailedError)
    assert "File exists" in ctx.failure.detail
    assert "Step 'Write config' failed" in caplog.text
