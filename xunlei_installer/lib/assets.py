from __future__ import annotations

import logging
import tarfile
from pathlib import Path
from typing import Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_ASSETS_PATH = str(Path(__file__).resolve().parents[1] / "assets")


class AssetNotFound(KeyError):
    pass


class AssetStore(Protocol):
    """Read-only name -> bytes container for the vendor package files."""

    def list(self) -> List[str]:
        ...

    def get(self, name: str) -> bytes:
        ...


class DirectoryAssetStore:
    """Regular files directly inside a directory."""

    def __init__(self, root: str) -> None:
        self.root = Path(root)

    def list(self) -> List[str]:
        return sorted(p.name for p in self.root.iterdir() if p.is_file())

    def get(self, name: str) -> bytes:
        p = self.root / name
        if Path(name).name != name or not p.is_file():
            raise AssetNotFound(name)
        return p.read_bytes()


class TarAssetStore:
    """Regular members of a tar archive (any compression tarfile reads), keyed by base name.

    The archive is read once on first use; two members with the same base
    name are rejected.
    """

    def __init__(self, archive: str) -> None:
        self.archive = Path(archive)
        self._files: Optional[Dict[str, bytes]] = None

    def _load(self) -> Dict[str, bytes]:
        if self._files is not None:
            return self._files

        files: Dict[str, bytes] = {}
        sources: Dict[str, str] = {}
        with tarfile.open(self.archive) as tf:
            for member in tf:
                if not member.isfile():
                    continue
                name = Path(member.name).name
                if name in sources:
                    raise ValueError(
                        f"{self.archive}: {member.name} and {sources[name]} share the name {name}"
                    )
                fh = tf.extractfile(member)
                if fh is None:
                    continue
                with fh:
                    files[name] = fh.read()
                sources[name] = member.name

        self._files = files
        return files

    def list(self) -> List[str]:
        return sorted(self._load())

    def get(self, name: str) -> bytes:
        try:
            return self._load()[name]
        except KeyError:
            raise AssetNotFound(name) from None


class MemoryAssetStore:
    def __init__(self, files: dict) -> None:
        self.files = dict(files)

    def list(self) -> List[str]:
        return list(self.files)

    def get(self, name: str) -> bytes:
        try:
            return self.files[name]
        except KeyError:
            raise AssetNotFound(name) from None


def open_asset_store(path: str) -> AssetStore:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)
    if p.is_dir():
        logger.debug("Using asset directory %s", p)
        return DirectoryAssetStore(str(p))
    if tarfile.is_tarfile(str(p)):
        logger.debug("Using asset archive %s", p)
        return TarAssetStore(str(p))
    raise ValueError(f"Assets must be a directory or tar archive: {path}")
