from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

RECORD_VERSION = 1


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def load_state(path: str) -> Optional[Dict[str, Any]]:
    """Load an install record, or None when nothing was installed."""

    p = Path(path)
    if not p.exists():
        return None

    fmt = _detect_format(p)
    data: Any

    if fmt in {"yaml", "yml"}:
        import yaml  # type: ignore

        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    else:
        data = json.loads(p.read_text(encoding="utf-8"))

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    fmt = _detect_format(p)
    if fmt in {"yaml", "yml"}:
        import yaml  # type: ignore

        p.write_text(yaml.safe_dump(state, sort_keys=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    logger.debug("Saved install record %s", p)


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with defaults (without overriding existing values)."""

    state.setdefault("version", RECORD_VERSION)
    state.setdefault("config", {})
    state.setdefault("assets", [])
    state.setdefault("identity_token", None)
    state.setdefault("service_registered", False)

    exe = state.setdefault("execution", {})
    exe.setdefault("current_step", None)
    exe.setdefault("ran_steps", [])

    return state


def render_state(state: Dict[str, Any]) -> str:
    import yaml  # type: ignore

    return yaml.safe_dump(state, sort_keys=False, default_flow_style=False)
