from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Sequence

from .config import Config
from .lib.assets import AssetStore
from .lib.env import Paths
from .lib.systemd import ServiceControl

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallContext:
    """Everything an install step may read. Built once per run."""

    config: Config
    paths: Paths
    assets: AssetStore
    control: ServiceControl
    launcher: Sequence[str]
    uid: int = field(default_factory=os.getuid)
    gid: int = field(default_factory=os.getgid)


class Step(Protocol):
    """A single install step."""

    step_id: str

    def run(self, ctx: InstallContext, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]


def run_pipeline(
    *,
    ctx: InstallContext,
    state: Dict[str, Any],
    steps: Sequence[Step],
) -> PipelineResult:
    """Run steps in order. The first exception aborts the remaining steps."""

    ran: List[str] = []

    for step in steps:
        state.setdefault("execution", {})["current_step"] = step.step_id
        logger.info("Running step %s", step.step_id)
        state = step.run(ctx, state)
        ran.append(step.step_id)

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran)
