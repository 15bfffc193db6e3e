from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from .config import Config
from .lib.assets import AssetStore
from .lib.env import Paths
from .lib.staging import remove_path
from .lib.systemd import ServiceControl, remove_unit_file, unregister_service
from .pipeline import InstallContext, run_pipeline
from .state_store import ensure_defaults, load_state, save_state
from .steps import (
    PrepareConfigStep,
    RegisterServiceStep,
    SetOwnershipStep,
    SpoofIdentityStep,
    StageAssetsStep,
)

logger = logging.getLogger(__name__)


def build_steps():
    return [
        PrepareConfigStep(),
        StageAssetsStep(),
        SetOwnershipStep(),
        SpoofIdentityStep(),
        RegisterServiceStep(),
    ]


def run_install(
    *,
    config: Config,
    paths: Paths,
    assets: AssetStore,
    control: ServiceControl,
    launcher: Sequence[str],
    uid: Optional[int] = None,
    gid: Optional[int] = None,
    state_path: Optional[str] = None,
) -> Dict[str, Any]:
    """Stage the vendor package, fake the host identity and register the service.

    Steps run in a fixed order and the first failure aborts the rest. Nothing
    is rolled back; running install again is the recovery path.
    """

    extra = {k: v for k, v in (("uid", uid), ("gid", gid)) if v is not None}
    ctx = InstallContext(
        config=config,
        paths=paths,
        assets=assets,
        control=control,
        launcher=list(launcher),
        **extra,
    )

    state = ensure_defaults({})
    try:
        result = run_pipeline(ctx=ctx, state=state, steps=build_steps())
    except Exception:
        logger.error("Install failed at step %s", state["execution"].get("current_step"))
        raise

    state = result.state
    state["execution"]["ran_steps"] = result.ran_steps
    state["installed_at"] = datetime.now(timezone.utc).isoformat(timespec="seconds")
    save_state(state_path or str(paths.state_file), state)

    logger.info("Installation completed")
    return state


def run_uninstall(
    *,
    paths: Paths,
    control: ServiceControl,
    clear: bool = False,
    state_path: Optional[str] = None,
) -> None:
    """Stop and remove the service and the staged package.

    Already-absent pieces are skipped; other filesystem errors propagate.
    """

    unregister_service(control=control)
    remove_unit_file(paths)

    if remove_path(paths.pkg_base):
        logger.info("Removed package %s", paths.pkg_base)
    else:
        logger.info("Package %s not installed", paths.pkg_base)

    if state_path and remove_path(state_path):
        logger.info("Removed install record %s", state_path)

    if clear and remove_path(paths.default_config):
        logger.info("Removed config directory %s", paths.default_config)

    logger.info("Uninstall completed")


def installed_state(paths: Paths, state_path: Optional[str] = None) -> Optional[Dict[str, Any]]:
    return load_state(state_path or str(paths.state_file))
