from __future__ import annotations

import logging
import os
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from .config import Config
from .lib.env import (
    DSM_VERSION_BUILD,
    DSM_VERSION_MAJOR,
    DSM_VERSION_MINOR,
    PKG_NAME,
    Paths,
)
from .lib.staging import ensure_directory
from .steps.step_10_prepare_config import prepare_directories

logger = logging.getLogger(__name__)

ExecFn = Callable[[str, Sequence[str], Mapping[str, str]], None]


def launcher_argv(paths: Paths) -> List[str]:
    var = paths.var_dir
    return [
        str(paths.cli_launcher),
        "-launcher_listen",
        f"unix://{var}/{PKG_NAME}-launcher.sock",
        "-pid",
        f"{var}/{PKG_NAME}-launcher.pid",
        "-logfile",
        f"{var}/{PKG_NAME}-launcher.log",
    ]


def launcher_env(config: Config, paths: Paths, base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Environment the vendor launcher expects from a DSM package runtime."""

    host = str(config.host)
    if config.host.version == 6:
        host = f"[{host}]"

    env = dict(os.environ if base is None else base)
    env.update(
        {
            "DriveListen": f"unix://{paths.var_dir}/{PKG_NAME}.sock",
            "OS_VERSION": f"dsm {DSM_VERSION_MAJOR}.{DSM_VERSION_MINOR}-{DSM_VERSION_BUILD}",
            "HOME": config.config_path,
            "ConfigPath": config.config_path,
            "DownloadPATH": config.download_path,
            "SYNOPKG_DSM_VERSION_MAJOR": DSM_VERSION_MAJOR,
            "SYNOPKG_DSM_VERSION_MINOR": DSM_VERSION_MINOR,
            "SYNOPKG_DSM_VERSION_BUILD": DSM_VERSION_BUILD,
            "SYNOPKG_PKGNAME": PKG_NAME,
            "SYNOPKG_PKGDEST": str(paths.pkg_dest),
            "SYNOPKG_PKGBASE": paths.pkg_base,
            "GIN_MODE": "release",
            "PLATFORM": "群晖",
            "WebListenAddr": f"{host}:{config.port}",
        }
    )
    if config.has_auth:
        env["WebAuthUser"] = str(config.username)
        env["WebAuthPassword"] = str(config.password)
    return env


def run_launch(*, config: Config, paths: Paths, exec_fn: ExecFn = os.execve) -> None:
    """Replace this process with the staged vendor launcher.

    With the default exec_fn this call does not return.
    """

    prepare_directories(paths.on_host(config.download_path), paths.on_host(config.config_path))

    launcher = paths.cli_launcher
    if not launcher.is_file():
        raise FileNotFoundError(f"{launcher} not found; run `install` first")

    ensure_directory(paths.var_dir, 0o755)

    argv = launcher_argv(paths)
    logger.info("Launching %s (listen %s:%s)", launcher, config.host, config.port)
    exec_fn(argv[0], argv, launcher_env(config, paths))
