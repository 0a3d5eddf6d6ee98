"""Download a pinned sing-box release and install the binary.

Steps:
1. Fetch sing-box-{version}-linux-{arch}.tar.gz from GitHub releases
2. Check the archive is non-empty and readable
3. Extract the sing-box executable and move it to the install path
4. Remove the temporary download (always, even on failure)
"""

import logging
import os
import shutil
import stat
import tarfile
import tempfile
import urllib.error
import urllib.request
from pathlib import Path

from .deploy_config import DeploySettings
from .provision_errors import DownloadError

logger = logging.getLogger(__name__)

BINARY_NAME = "sing-box"


def asset_name(version: str, arch: str) -> str:
    """Release asset base name, e.g. sing-box-1.12.1-linux-amd64."""
    return f"sing-box-{version}-linux-{arch}"


def _fetch(url: str, target: Path) -> None:
    try:
        urllib.request.urlretrieve(url, target)
    except (urllib.error.URLError, OSError) as e:
        raise DownloadError(f"Failed to download {url}", detail=str(e)) from e

    if not target.is_file() or target.stat().st_size == 0:
        raise DownloadError(f"Downloaded archive is empty: {url}")
    if not tarfile.is_tarfile(target):
        raise DownloadError(f"Downloaded file is not a tar archive: {url}")


def _extract_binary(archive: Path, asset: str, work_dir: Path) -> Path:
    """Extract only the sing-box executable from the release archive."""
    try:
        with tarfile.open(archive, "r:gz") as tf:
            member = None
            for info in tf.getmembers():
                if info.isfile() and Path(info.name).name == BINARY_NAME:
                    member = info
                    break

            if member is None:
                raise DownloadError(
                    f"{BINARY_NAME} binary not found in {asset}.tar.gz",
                    detail=f"Contents: {tf.getnames()}",
                )

            src = tf.extractfile(member)
            if src is None:
                raise DownloadError(f"Cannot read {member.name} from archive")
            extracted = work_dir / BINARY_NAME
            with src, open(extracted, "wb") as dst:
                shutil.copyfileobj(src, dst)
    except (tarfile.TarError, EOFError) as e:
        raise DownloadError(f"Corrupt release archive {asset}.tar.gz", detail=str(e)) from e

    return extracted


def install_singbox(settings: DeploySettings, arch: str) -> Path:
    """Download and install sing-box. Returns the installed binary path."""
    asset = asset_name(settings.version, arch)
    url = settings.release_url(asset)
    target = settings.binary_path

    with tempfile.TemporaryDirectory(prefix="singbox-") as tmp:
        work_dir = Path(tmp)
        archive = work_dir / f"{asset}.tar.gz"

        logger.info("Downloading %s", url)
        _fetch(url, archive)
        extracted = _extract_binary(archive, asset, work_dir)

        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(extracted), target)

    # Make executable
    target.chmod(target.stat().st_mode | stat.S_IEXEC | stat.S_IXGRP | stat.S_IXOTH)
    if not (target.is_file() and os.access(target, os.X_OK)):
        raise DownloadError(f"{target} is not an executable file after install")

    logger.info("sing-box %s installed to %s", settings.version, target)
    return target
