"""
Probe detection - enumerate connected debug probes.

Uses pyocd's probe enumeration, which covers CMSIS-DAP, ST-Link and J-Link.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ProbeInfo:
    """Metadata about a connected debug probe."""
    unique_id: str
    description: str
    vendor: Optional[str] = None
    product: Optional[str] = None


def list_probes() -> list[ProbeInfo]:
    """
    List all connected debug probes.

    Returns an empty list if pyocd is not installed or no probe is attached.
    """
    try:
        from pyocd.core.helpers import ConnectHelper
    except ImportError:
        return []

    probes = ConnectHelper.get_all_connected_probes(blocking=False, print_wait_message=False)

    return [
        ProbeInfo(
            unique_id=probe.unique_id,
            description=probe.description,
            vendor=getattr(probe, "vendor_name", None),
            product=getattr(probe, "product_name", None),
        )
        for probe in probes
    ]


def format_probe_table(probes: list[ProbeInfo]) -> list[str]:
    """Format probes as table rows for the terminal."""
    if not probes:
        return [
            "No debug probes detected.",
            "",
            "Troubleshooting:",
            "  - Check USB connections",
            "  - Ensure udev rules / drivers are installed",
            "  - Try: pyocd list",
        ]

    lines = [f"{'#':<3} {'Unique ID':<28} {'Description'}", "-" * 70]
    for i, probe in enumerate(probes):
        lines.append(f"{i:<3} {probe.unique_id:<28} {probe.description}")
    return lines
