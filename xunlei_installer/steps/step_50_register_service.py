from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.systemd import register_service
from ..pipeline import InstallContext

logger = logging.getLogger(__name__)


class RegisterServiceStep:
    step_id = "50_register_service"

    def run(self, ctx: InstallContext, state: Dict[str, Any]) -> Dict[str, Any]:
        unit = register_service(
            control=ctx.control,
            paths=ctx.paths,
            config=ctx.config,
            launcher=ctx.launcher,
            uid=ctx.uid,
        )
        state["service_registered"] = unit is not None
        if unit is None:
            logger.info("Service not registered; start it with the `launch` subcommand")
        return state
