from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..lib.staging import ensure_directory
from ..pipeline import InstallContext

logger = logging.getLogger(__name__)


def prepare_directories(download_path: Path, config_path: Path) -> None:
    """Make sure the download and config directories exist.

    Callers pass locations already mapped through `Paths.on_host`.
    """

    for label, path in (("Download", download_path), ("Config", config_path)):
        p = Path(path)
        if p.exists() and not p.is_dir():
            raise NotADirectoryError(f"{label} path must be a directory: {p}")
        ensure_directory(p, 0o755)
        logger.info("%s directory: %s", label, p)


class PrepareConfigStep:
    step_id = "10_prepare_config"

    def run(self, ctx: InstallContext, state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("WebUI listen: %s:%s", ctx.config.host, ctx.config.port)
        paths = ctx.paths
        prepare_directories(paths.on_host(ctx.config.download_path), paths.on_host(ctx.config.config_path))
        state["config"] = ctx.config.public_dict()
        return state
