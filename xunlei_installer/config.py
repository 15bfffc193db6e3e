from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .lib.env import DEFAULT_CONFIG_PATH, DEFAULT_DOWNLOAD_PATH

logger = logging.getLogger(__name__)

PORT_MIN = 1024
PORT_MAX = 65535

DEFAULTS: Dict[str, Any] = {
    "username": None,
    "password": None,
    "host": "0.0.0.0",
    "port": 5055,
    "config_path": DEFAULT_CONFIG_PATH,
    "download_path": DEFAULT_DOWNLOAD_PATH,
}


class ValidationError(ValueError):
    pass


def parse_port(value: Any) -> int:
    try:
        port = int(str(value).strip())
    except ValueError:
        raise ValidationError(f"`{value}` isn't a port number") from None
    if not PORT_MIN <= port <= PORT_MAX:
        raise ValidationError(f"Port not in range {PORT_MIN}-{PORT_MAX}")
    return port


def parse_host(value: Any) -> Union[ipaddress.IPv4Address, ipaddress.IPv6Address]:
    try:
        return ipaddress.ip_address(str(value).strip())
    except ValueError:
        raise ValidationError(f"`{value}` isn't a ip address") from None


@dataclass(frozen=True)
class Config:
    username: Optional[str]
    password: Optional[str]
    host: Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
    port: int
    config_path: str
    download_path: str

    @property
    def has_auth(self) -> bool:
        return bool(self.username) and bool(self.password)

    @classmethod
    def from_values(cls, values: Mapping[str, Any]) -> "Config":
        """Validate raw values (CLI strings or YAML scalars) over the defaults."""

        unknown = set(values) - set(DEFAULTS)
        if unknown:
            raise ValidationError(f"Unknown option(s): {', '.join(sorted(unknown))}")

        merged = dict(DEFAULTS)
        merged.update({k: v for k, v in values.items() if v is not None})

        for key in ("config_path", "download_path"):
            if not str(merged[key]).strip():
                raise ValidationError(f"{key} must not be empty")

        return cls(
            username=_opt_str(merged["username"]),
            password=_opt_str(merged["password"]),
            host=parse_host(merged["host"]),
            port=parse_port(merged["port"]),
            config_path=str(Path(str(merged["config_path"])).expanduser()),
            download_path=str(Path(str(merged["download_path"])).expanduser()),
        )

    def public_dict(self) -> Dict[str, Any]:
        """Serializable view; the password is never included."""

        return {
            "username": self.username,
            "auth": self.has_auth,
            "host": str(self.host),
            "port": self.port,
            "config_path": self.config_path,
            "download_path": self.download_path,
        }


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value)
    return s or None


def load_options_file(path: str) -> Dict[str, Any]:
    """Read install/launch options from a YAML mapping.

    Keys use either dashes or underscores (`config-path` == `config_path`).
    """

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("options file must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the options file") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValidationError(f"{path} must contain a mapping/object")

    return {str(k).replace("-", "_"): v for k, v in raw.items()}


def build_config(cli_values: Mapping[str, Any], options_file: Optional[str] = None) -> Config:
    values: Dict[str, Any] = {}
    if options_file:
        values.update(load_options_file(options_file))
        logger.debug("Loaded options from %s", options_file)
    values.update({k: v for k, v in cli_values.items() if v is not None})
    return Config.from_values(values)
