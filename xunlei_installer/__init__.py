"""Xunlei NAS package installer.

Stages the vendor's Synology package files on a generic Linux host:
- Copies the bundled binaries into /var/packages/pan-xunlei-com/target
- Fakes the Synology identity files the binary checks for
- Registers a systemd service when systemctl is available
- Launches the vendor binary with the environment it expects
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
