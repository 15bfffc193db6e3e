from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol, Sequence

from ..config import Config
from .command import CmdResult, ExternalToolError, run_cmd
from .env import APP_NAME, SERVICE_DESCRIPTION, Paths
from .staging import ensure_directory, remove_path, write_file

logger = logging.getLogger(__name__)


class ServiceControl(Protocol):
    def probe(self) -> bool:
        ...

    def run(self, args: Sequence[str]) -> CmdResult:
        ...


class Systemctl:
    """ServiceControl backed by the systemctl binary."""

    def __init__(self, binary: str = "systemctl") -> None:
        self.binary = binary

    def probe(self) -> bool:
        try:
            res = run_cmd([self.binary, "--help"])
        except ExternalToolError as e:
            logger.debug("%s", e)
            return False
        return res.ok

    def run(self, args: Sequence[str]) -> CmdResult:
        res = run_cmd([self.binary, *args])
        if not res.ok:
            logger.error("%s %s: %s", self.binary, " ".join(args), res.stderr.strip())
        return res


def quote_arg(arg: str) -> str:
    """Quote one ExecStart argument for systemd (double quotes, no % specifiers)."""

    escaped = arg.replace("\\", "\\\\").replace('"', '\\"').replace("%", "%%")
    return f'"{escaped}"'


def render_unit(config: Config, launcher: Sequence[str], uid: int) -> str:
    exec_start = [
        *launcher,
        "launch",
        "--host",
        str(config.host),
        "--port",
        str(config.port),
        "--download-path",
        config.download_path,
        "--config-path",
        config.config_path,
    ]
    if config.has_auth:
        exec_start += ["--username", str(config.username), "--password", str(config.password)]

    return "\n".join(
        [
            "[Unit]",
            f"Description={SERVICE_DESCRIPTION}",
            "After=network.target network-online.target",
            "Requires=network-online.target",
            "",
            "[Service]",
            "Type=simple",
            f"ExecStart={' '.join(quote_arg(a) for a in exec_start)}",
            "LimitNOFILE=1024",
            "LimitNPROC=512",
            f"User={uid}",
            "",
            "[Install]",
            "WantedBy=multi-user.target",
            "",
        ]
    )


def _best_effort(control: ServiceControl, args: Sequence[str]) -> bool:
    try:
        return control.run(args).ok
    except ExternalToolError as e:
        logger.error("%s", e)
        return False


def supported(control: ServiceControl) -> bool:
    if control.probe():
        return True
    logger.warning("Your system does not support systemctl")
    return False


def register_service(
    *,
    control: ServiceControl,
    paths: Paths,
    config: Config,
    launcher: Sequence[str],
    uid: int,
) -> Optional[Path]:
    """Write the unit file and enable/start the service.

    Returns the unit path, or None when no service manager is available.
    """

    if not supported(control):
        return None

    unit_path = Path(paths.unit_file)
    ensure_directory(unit_path.parent, 0o755)
    write_file(unit_path, render_unit(config, launcher, uid).encode("utf-8"), 0o666)
    logger.info("Wrote %s", unit_path)

    for args in (["daemon-reload"], ["enable", APP_NAME], ["start", APP_NAME]):
        _best_effort(control, args)
    return unit_path


def unregister_service(*, control: ServiceControl) -> bool:
    if not supported(control):
        return False
    for args in (["disable", APP_NAME], ["stop", APP_NAME], ["daemon-reload"]):
        _best_effort(control, args)
    return True


def remove_unit_file(paths: Paths) -> None:
    if remove_path(paths.unit_file):
        logger.info("Removed service unit %s", paths.unit_file)
