from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, Optional

from .config import ValidationError, build_config
from .installer import installed_state, run_install, run_uninstall
from .launch import run_launch
from .lib.assets import DEFAULT_ASSETS_PATH, open_asset_store
from .lib.env import PATHS, Paths, launcher_command
from .lib.systemd import Systemctl
from .logging_utils import configure_logging
from .state_store import render_state

logger = logging.getLogger(__name__)

CONFIG_KEYS = ("username", "password", "host", "port", "config_path", "download_path")


def _add_config_args(p: argparse.ArgumentParser) -> None:
    # -h stays reserved for --help
    p.add_argument("-U", "--username", default=None, help="Panel username")
    p.add_argument("-W", "--password", default=None, help="Panel password")
    p.add_argument("-H", "--host", default=None, help="Listen host (default 0.0.0.0)")
    p.add_argument("-p", "--port", default=None, help="Listen port, 1024-65535 (default 5055)")
    p.add_argument("-c", "--config-path", default=None, help="Config directory (default /opt/xunlei)")
    p.add_argument("-d", "--download-path", default=None, help="Download directory (default /tmp/downloads)")
    p.add_argument("--options", default=None, help="YAML file with any of the options above")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="xunlei-installer", description="Install and run the Xunlei NAS download service")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--log", default=None, help="Also write the log to this file")
    p.add_argument("--root", default=None, help="Install under this directory instead of /")
    p.add_argument("--state", default=None, help="Install record path (json|yaml); default inside the package root")

    sub = p.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    install = sub.add_parser("install", help="Install xunlei")
    _add_config_args(install)
    install.add_argument("--assets", default=DEFAULT_ASSETS_PATH, help="Asset directory or tar archive")

    uninstall = sub.add_parser("uninstall", help="Uninstall xunlei")
    uninstall.add_argument("--clear", action="store_true", help="Also remove the default config directory")

    launch = sub.add_parser("launch", help="Launch xunlei")
    _add_config_args(launch)

    sub.add_parser("status", help="Show the install record")
    return p


def _config_values(args: argparse.Namespace) -> Dict[str, Any]:
    return {k: getattr(args, k) for k in CONFIG_KEYS}


def _error_chain(e: BaseException) -> str:
    parts = []
    seen = set()
    cur: Optional[BaseException] = e
    while cur is not None and id(cur) not in seen:
        seen.add(id(cur))
        parts.append(str(cur) or type(cur).__name__)
        cur = cur.__cause__ or cur.__context__
    return "\n  caused by: ".join(parts)


def dispatch(args: argparse.Namespace, paths: Paths) -> int:
    if args.command == "install":
        config = build_config(_config_values(args), args.options)
        run_install(
            config=config,
            paths=paths,
            assets=open_asset_store(args.assets),
            control=Systemctl(),
            launcher=launcher_command(),
            state_path=args.state,
        )
    elif args.command == "uninstall":
        run_uninstall(paths=paths, control=Systemctl(), clear=bool(args.clear), state_path=args.state)
    elif args.command == "launch":
        run_launch(config=build_config(_config_values(args), args.options), paths=paths)
    elif args.command == "status":
        state = installed_state(paths, args.state)
        if state is None:
            print(f"not installed ({paths.pkg_base})")
            return 1
        sys.stdout.write(render_state(state))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    configure_logging(level=logging.DEBUG if args.debug else logging.INFO, log_path=args.log)
    paths = PATHS.rebased(args.root) if args.root else PATHS

    try:
        return dispatch(args, paths)
    except ValidationError as e:
        p.error(str(e))
    except Exception as e:
        logger.debug("Traceback", exc_info=True)
        logger.error("%s", _error_chain(e))
        return 1
