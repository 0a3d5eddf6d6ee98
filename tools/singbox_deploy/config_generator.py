"""Generate the sing-box server JSON config.

Builds a single-profile config: one anytls inbound on the listen port with
TLS from the issued certificate, direct/block outbounds, DNS and routing.
Only the domain and the credential vary between deployments.
"""

import base64
import json
import logging
import os
import secrets
from pathlib import Path

from .deploy_config import DeploySettings

logger = logging.getLogger(__name__)

INBOUND_TAG = "anytls"
MIN_CREDENTIAL_BYTES = 16

# anytls padding scheme: packet index -> size ranges, "c" marks a check point
PADDING_SCHEME = [
    "stop=8",
    "0=30-30",
    "1=100-400",
    "2=400-500,c,500-1000,c,500-1000,c,500-1000,c,500-1000",
    "3=9-9,500-1000",
    "4=500-1000",
    "5=500-1000",
    "6=500-1000",
    "7=500-1000",
]


def generate_credential(nbytes: int = MIN_CREDENTIAL_BYTES) -> str:
    """Random password, base64 of nbytes random bytes."""
    if nbytes < MIN_CREDENTIAL_BYTES:
        raise ValueError(f"Credential needs at least {MIN_CREDENTIAL_BYTES} bytes")
    return base64.b64encode(secrets.token_bytes(nbytes)).decode("ascii")


def build_singbox_json(settings: DeploySettings, domain: str, password: str) -> dict:
    """Generate a complete sing-box config.

    Args:
        settings: Deployment paths and constants
        domain: Operator-supplied domain, also the TLS server name
        password: Generated credential for the single inbound user
    """
    return {
        "log": {
            "disabled": False,
            "level": "info",
            "timestamp": True,
        },
        "dns": _build_dns(),
        "inbounds": [_build_anytls_inbound(settings, domain, password)],
        "outbounds": [
            {"type": "direct", "tag": "direct"},
            {"type": "block", "tag": "block"},
        ],
        "route": {
            "rules": [
                {"protocol": "dns", "action": "hijack-dns"},
                {"inbound": INBOUND_TAG, "outbound": "direct"},
            ],
            "final": "direct",
            "auto_detect_interface": True,
        },
        "experimental": {
            "cache_file": {
                "enabled": True,
                "path": str(settings.cache_path),
            },
        },
    }


def _build_dns() -> dict:
    return {
        "servers": [
            {"tag": "cloudflare", "address": "1.1.1.1"},
            {"tag": "local", "address": "223.5.5.5", "detour": "direct"},
        ],
        "rules": [
            {"outbound": "any", "server": "local"},
        ],
        "final": "cloudflare",
        "strategy": "prefer_ipv4",
    }


def _build_anytls_inbound(settings: DeploySettings, domain: str, password: str) -> dict:
    return {
        "type": "anytls",
        "tag": INBOUND_TAG,
        "listen": "::",
        "listen_port": settings.listen_port,
        "users": [
            {"name": settings.username, "password": password},
        ],
        "padding_scheme": list(PADDING_SCHEME),
        "tls": {
            "enabled": True,
            "server_name": domain,
            "certificate_path": str(settings.certificate_path(domain)),
            "key_path": str(settings.private_key_path(domain)),
            "reality": {"enabled": False},
        },
    }


def write_config(config: dict, path: Path) -> Path:
    """Serialize config to path, readable by root only."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        # the open mode only applies to new files
        os.fchmod(f.fileno(), 0o600)
        json.dump(config, f, indent=4)
        f.write("\n")
    logger.info("Config written to %s", path)
    return path
