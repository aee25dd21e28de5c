"""
Default device identifier for the X-Authware-Hardware-ID header.

Applications that enable hardware-id checking bind sessions to a machine.
The identifier is a SHA-256 hash of a platform machine id, base64 encoded.
Any ``Callable[[], str]`` can be passed as ``AuthwareConfig.hardware_id_provider``
to replace it.
"""

import base64
import hashlib
import platform
import subprocess
from pathlib import Path
from typing import Optional

from .errors import HardwareIdUnavailableError


MACHINE_ID_PATHS = (Path("/etc/machine-id"), Path("/var/lib/dbus/machine-id"))


def hash_identifier(raw: str) -> str:
    """Hash a raw machine identifier into the wire format."""
    digest = hashlib.sha256(raw.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


def _windows_processor_id() -> Optional[str]:
    try:
        output = subprocess.run(
            ["wmic", "cpu", "get", "ProcessorId"],
            capture_output=True,
            text=True,
            check=True,
            timeout=10,
        ).stdout
    except (OSError, subprocess.SubprocessError):
        return None
    lines = [line.strip() for line in output.splitlines() if line.strip()]
    # First line is the column header
    return lines[1] if len(lines) > 1 else None


def _linux_machine_id() -> Optional[str]:
    for path in MACHINE_ID_PATHS:
        try:
            value = path.read_text().strip()
        except OSError:
            continue
        if value:
            return value
    return None


def platform_hardware_id() -> str:
    """
    Compute the hardware identifier of the current machine.

    Raises:
        HardwareIdUnavailableError: If the platform is unsupported or the
            machine id cannot be read.
    """
    system = platform.system()
    if system == "Windows":
        raw = _windows_processor_id()
    elif system == "Linux":
        raw = _linux_machine_id()
    else:
        raise HardwareIdUnavailableError(
            f"The default hardware ID system is not supported on {system}. "
            "Pass a hardware_id_provider to AuthwareConfig to support this platform."
        )

    if not raw:
        raise HardwareIdUnavailableError(f"Unable to read a machine identifier on {system}")
    return hash_identifier(raw)
