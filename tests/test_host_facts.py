import pytest

from conftest import FakeRunner
from singbox_deploy.host_facts import HostFacts, detect_firewall_tool, release_arch
from singbox_deploy.provision_errors import UnsupportedArchitectureError


@pytest.mark.parametrize(
    "machine, arch",
    [("x86_64", "amd64"), ("amd64", "amd64"), ("aarch64", "arm64"), ("arm64", "arm64")],
)
def test_release_arch_supported(machine, arch):
    assert release_arch(machine) == arch


@pytest.mark.parametrize("machine", ["riscv64", "armv7l", "i686", "s390x", ""])
def test_release_arch_unsupported(machine):
    with pytest.raises(UnsupportedArchitectureError):
        release_arch(machine)


def test_host_facts_arch_property():
    assert HostFacts(machine="x86_64", is_root=True).arch == "amd64"
    with pytest.raises(UnsupportedArchitectureError):
        HostFacts(machine="riscv64", is_root=True).arch


def test_firewall_tool_prefers_ufw():
    assert detect_firewall_tool(FakeRunner(tools=("ufw", "iptables"))) == "ufw"
    assert detect_firewall_tool(FakeRunner(tools=("iptables",))) == "iptables"
    assert detect_firewall_tool(FakeRunner(tools=())) is None
