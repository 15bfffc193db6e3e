from __future__ import annotations

import logging
import secrets

from .env import Paths
from .staging import ensure_directory, symlink_if_absent, write_file

logger = logging.getLogger(__name__)

AUTHENTICATE_STUB = b"#!/usr/bin/env sh\necho OK"


def generate_token() -> str:
    return secrets.token_bytes(32).hex()[:7]


def syno_info_content(token: str) -> bytes:
    return f'unique="synology_{token}_720+"'.encode("utf-8")


def spoof_identity(paths: Paths) -> str:
    """Fabricate the Synology identity files the vendor binary checks for.

    Writes a random synoinfo.conf and an always-OK authenticate.cgi under the
    package's host subtree, then links the real system paths to them when
    nothing exists there yet. Returns the generated token.
    """

    token = generate_token()

    info = paths.generated_syno_info
    ensure_directory(info.parent, 0o755)
    write_file(info, syno_info_content(token), 0o644)

    auth = paths.generated_syno_authenticate
    ensure_directory(auth.parent, 0o755)
    write_file(auth, AUTHENTICATE_STUB, 0o755)

    symlink_if_absent(info, paths.syno_info)
    symlink_if_absent(auth, paths.syno_authenticate)

    logger.info("Synthetic host identity synology_%s_720+", token)
    return token
