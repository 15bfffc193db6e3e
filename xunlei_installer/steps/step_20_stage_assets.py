from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.staging import ensure_directory, write_file
from ..pipeline import InstallContext

logger = logging.getLogger(__name__)


class StageAssetsStep:
    step_id = "20_stage_assets"

    def run(self, ctx: InstallContext, state: Dict[str, Any]) -> Dict[str, Any]:
        target_dir = ctx.paths.pkg_dest
        # Creates the package root too, both 0755.
        ensure_directory(target_dir, 0o755)

        names = ctx.assets.list()
        if not names:
            raise RuntimeError("Asset store is empty; nothing to install")

        for name in names:
            dest = target_dir / name
            write_file(dest, ctx.assets.get(name), 0o755)
            logger.info("Install to: %s", dest)

        state["assets"] = sorted(names)
        return state
