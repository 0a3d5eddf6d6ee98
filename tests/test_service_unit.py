import pytest

from singbox_deploy.provision_errors import CommandFailedError
from singbox_deploy.service_unit import ServiceUnit, install_unit


def test_render_unit(settings):
    text = ServiceUnit.for_settings(settings).render()

    assert text.startswith("[Unit]\n")
    assert "After=network.target nss-lookup.target\n" in text
    assert f"ExecStart={settings.binary_path} run -c {settings.config_path}\n" in text
    assert "CapabilityBoundingSet=CAP_NET_ADMIN CAP_NET_BIND_SERVICE\n" in text
    assert "AmbientCapabilities=CAP_NET_ADMIN CAP_NET_BIND_SERVICE\n" in text
    assert "Restart=on-failure\n" in text
    assert "RestartSec=1800s\n" in text
    assert "LimitNOFILE=infinity\n" in text
    assert "[Install]\nWantedBy=multi-user.target\n" in text
    assert "User=" not in text


def test_install_unit_writes_and_enables(runner, settings):
    unit = ServiceUnit.for_settings(settings)

    install_unit(runner, settings, unit)

    assert settings.unit_path.read_text() == unit.render()
    assert settings.data_dir.is_dir()
    assert runner.calls == [
        ("systemctl", "daemon-reload"),
        ("systemctl", "enable", "sing-box"),
    ]


def test_install_unit_enable_failure(runner, settings):
    runner.respond(("systemctl", "enable"), returncode=1, stderr="Unit not found")
    with pytest.raises(CommandFailedError) as exc:
        install_unit(runner, settings, ServiceUnit.for_settings(settings))
    assert "Unit not found" in exc.value.detail
