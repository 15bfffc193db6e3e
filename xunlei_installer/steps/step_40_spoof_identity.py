from __future__ import annotations

from typing import Any, Dict

from ..lib.identity import spoof_identity
from ..pipeline import InstallContext


class SpoofIdentityStep:
    step_id = "40_spoof_identity"

    def run(self, ctx: InstallContext, state: Dict[str, Any]) -> Dict[str, Any]:
        state["identity_token"] = spoof_identity(ctx.paths)
        return state
