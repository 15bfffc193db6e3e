from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def ensure_directory(path: PathLike, mode: int) -> None:
    """Create `path` and any missing ancestors, each with exactly `mode`.

    Existing directories are left alone. A non-directory anywhere on the way
    raises NotADirectoryError.
    """

    p = Path(path)
    missing: List[Path] = []
    cur = p
    while not cur.is_dir():
        if cur.exists() or cur.is_symlink():
            raise NotADirectoryError(f"Not a directory: {cur}")
        missing.append(cur)
        if cur.parent == cur:
            break
        cur = cur.parent

    for d in reversed(missing):
        d.mkdir(mode=mode)
        # mkdir honours the umask
        os.chmod(d, mode)
        logger.debug("Created directory %s (%o)", d, mode)


def write_file(path: PathLike, data: bytes, mode: int) -> None:
    """Create or overwrite `path` with `data` and permission bits `mode`.

    The parent directory must already exist.
    """

    p = Path(path)
    fd = os.open(p, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "wb") as fh:
        fh.write(data)
    os.chmod(p, mode)


def set_ownership(path: PathLike, uid: int, gid: int) -> None:
    """Recursively chown a tree. Symlinks are changed themselves, not followed."""

    root = Path(path)
    os.chown(root, uid, gid, follow_symlinks=False)
    if root.is_symlink() or not root.is_dir():
        return
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            os.chown(os.path.join(dirpath, name), uid, gid, follow_symlinks=False)


def symlink_if_absent(source: PathLike, link: PathLike) -> bool:
    """Point `link` at `source` unless something already lives at `link`.

    Dangling links count as existing. Returns True when a link was created.
    """

    lp = Path(link)
    if os.path.lexists(lp):
        logger.info("Keeping existing %s", lp)
        return False
    ensure_directory(lp.parent, 0o755)
    os.symlink(source, lp)
    logger.info("Linked %s -> %s", lp, source)
    return True


def remove_path(path: PathLike) -> bool:
    """Remove a file, link or directory tree. Absent paths are fine."""

    p = Path(path)
    try:
        if p.is_dir() and not p.is_symlink():
            shutil.rmtree(p)
        else:
            p.unlink()
    except FileNotFoundError:
        return False
    return True
