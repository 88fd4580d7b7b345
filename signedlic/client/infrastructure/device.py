"""Infrastructure layer: Local device identifier providers.
"""

from __future__ import annotations

import logging
import subprocess
import sys
import threading
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

DEVICE_ID_LENGTH = 16

LINUX_MACHINE_ID_PATHS = ("/etc/machine-id", "/var/lib/dbus/machine-id")


def parse_device_id(raw: str | None) -> bytes | None:
    """Turn a UUID string or 32-hex machine id into 16 bytes."""
    if not raw:
        return None
    try:
        return uuid.UUID(raw.strip()).bytes
    except ValueError:
        logger.debug("Unparseable device identifier %r", raw)
        return None


def format_device_id(device_id: bytes) -> str:
    """Canonical text form sent to the activation server."""
    return str(uuid.UUID(bytes=device_id)).upper()


def _read_text_first(paths: tuple[str, ...]) -> str | None:
    for path in paths:
        try:
            value = Path(path).read_text(encoding="utf-8").strip()
        except OSError:
            continue
        if value:
            return value
    return None


def _read_machine_id_windows() -> str | None:
    try:
        import winreg  # noqa: PLC0415
    except ImportError:
        return None
    try:
        with winreg.OpenKey(  # type: ignore[attr-defined]
            winreg.HKEY_LOCAL_MACHINE,  # type: ignore[attr-defined]
            r"SOFTWARE\Microsoft\Cryptography",
        ) as key:
            value, _ = winreg.QueryValueEx(key, "MachineGuid")  # type: ignore[attr-defined]
    except OSError:
        return None
    return str(value).strip() if value else None


def _read_machine_id_macos() -> str | None:
    try:
        output = subprocess.check_output(
            ["ioreg", "-rd1", "-c", "IOPlatformExpertDevice"],  # noqa: S607
            text=True,
            stderr=subprocess.DEVNULL,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    for line in output.splitlines():
        if "IOPlatformUUID" in line:
            parts = line.split("=", 1)
            if len(parts) == 2:  # noqa: PLR2004
                return parts[1].strip().strip('"') or None
    return None


def _read_machine_id_linux() -> str | None:
    return _read_text_first(LINUX_MACHINE_ID_PATHS)


class SystemDeviceIdentifierProvider:
    """Resolves the platform's stable machine identifier, once."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._resolved = False
        self._device_id: bytes | None = None

    @staticmethod
    def read_raw_identifier() -> str | None:
        if sys.platform == "win32":
            return _read_machine_id_windows()
        if sys.platform == "darwin":
            return _read_machine_id_macos()
        return _read_machine_id_linux()

    def resolve(self) -> bytes | None:
        with self._lock:
            if not self._resolved:
                self._device_id = parse_device_id(self.read_raw_identifier())
                self._resolved = True
                if self._device_id is None:
                    logger.warning("No device identifier available on this system")
            return self._device_id


class StaticDeviceIdentifierProvider:
    """Always resolves to the identifier it was given (or to nothing)."""

    def __init__(self, device_id: bytes | None):
        if device_id is not None and len(device_id) != DEVICE_ID_LENGTH:
            msg = f"Device identifier must be {DEVICE_ID_LENGTH} bytes, got {len(device_id)}"
            raise ValueError(msg)
        self._device_id = device_id

    def resolve(self) -> bytes | None:
        return self._device_id
