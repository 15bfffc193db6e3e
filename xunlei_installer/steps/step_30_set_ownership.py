from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.staging import set_ownership
from ..pipeline import InstallContext

logger = logging.getLogger(__name__)


class SetOwnershipStep:
    step_id = "30_set_ownership"

    def run(self, ctx: InstallContext, state: Dict[str, Any]) -> Dict[str, Any]:
        for path in (ctx.paths.pkg_base, ctx.paths.pkg_dest):
            try:
                set_ownership(path, ctx.uid, ctx.gid)
            except OSError as e:
                raise type(e)(
                    e.errno,
                    f"Failed to set ownership of {path} to uid={ctx.uid} gid={ctx.gid}: {e.strerror}",
                    e.filename,
                ) from e

        state["uid"] = ctx.uid
        state["gid"] = ctx.gid
        logger.info("Ownership set to %s:%s", ctx.uid, ctx.gid)
        return state
