from __future__ import annotations

import os
import sys
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import List

APP_NAME = "xunlei"
PKG_NAME = "pan-xunlei-com"
SERVICE_DESCRIPTION = "Thunder remote download service"

DEFAULT_CONFIG_PATH = "/opt/xunlei"
DEFAULT_DOWNLOAD_PATH = "/tmp/downloads"

# DSM release the vendor binary is told it runs on.
DSM_VERSION_MAJOR = "7"
DSM_VERSION_MINOR = "2"
DSM_VERSION_BUILD = "64570"


@dataclass(frozen=True)
class Paths:
    """Every absolute location the installer touches.

    Derived locations (target dir, host subtree, ...) are properties so that
    `rebased()` only has to move the base fields.
    """

    pkg_base: str = f"/var/packages/{PKG_NAME}"
    syno_info: str = "/etc/synoinfo.conf"
    syno_authenticate: str = "/usr/syno/synoman/webman/modules/authenticate.cgi"
    unit_file: str = f"/etc/systemd/system/{APP_NAME}.service"
    default_config: str = DEFAULT_CONFIG_PATH
    root: str = "/"

    @property
    def pkg_dest(self) -> Path:
        return Path(self.pkg_base) / "target"

    @property
    def host_dir(self) -> Path:
        return self.pkg_dest / "host"

    @property
    def var_dir(self) -> Path:
        return self.pkg_dest / "var"

    @property
    def cli_launcher(self) -> Path:
        return self.pkg_dest / "xunlei-pan-cli-launcher"

    @property
    def state_file(self) -> Path:
        return Path(self.pkg_base) / "installer-state.json"

    @property
    def generated_syno_info(self) -> Path:
        # /var/packages/pan-xunlei-com/target/host/etc/synoinfo.conf
        return self.host_dir / self.syno_info.lstrip("/")

    @property
    def generated_syno_authenticate(self) -> Path:
        return self.host_dir / self.syno_authenticate.lstrip("/")

    def rebased(self, prefix: str) -> "Paths":
        """Return a copy with every base path moved under `prefix`."""

        root = Path(prefix)
        moved = {f.name: str(root / getattr(self, f.name).lstrip("/")) for f in fields(self)}
        return replace(self, **moved)

    def on_host(self, path: str) -> Path:
        """Where an absolute path from the config lives on this machine (under `root`)."""

        if Path(self.root) == Path("/"):
            return Path(path)
        return Path(self.root) / str(path).lstrip("/")


PATHS = Paths()


def launcher_command() -> List[str]:
    """Argv prefix that re-enters this program (used for the unit's ExecStart)."""

    exe = Path(sys.argv[0]) if sys.argv and sys.argv[0] else None
    if exe is not None and exe.name != "__main__.py" and exe.is_file() and os.access(exe, os.X_OK):
        return [str(exe.resolve())]
    return [sys.executable, "-m", "xunlei_installer"]
