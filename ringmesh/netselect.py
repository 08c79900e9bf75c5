"""Choosing which mesh access point a station should join."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ringmesh.runtime import LogLevel, log

SCAN_LIST_SIZE = 10
MIN_RSSI = -128

_TAG = "station"


@dataclass(frozen=True)
class ApRecord:
    """An access point seen during a scan."""

    ssid: str
    rssi: int
    channel: int = 0
    bssid: str = ""


def is_network_allowed(device_uuid: str, network_prefix: str, network_name: str) -> bool:
    """Whether ``network_name`` belongs to the mesh and is not this device's own."""
    return network_prefix in network_name and device_uuid not in network_name


def select_best_ap(
    records: Iterable[ApRecord], device_uuid: str, network_prefix: str
) -> Optional[ApRecord]:
    """Return the allowed access point with the strongest signal, or ``None``.

    Only the first ``SCAN_LIST_SIZE`` records are looked at; on equal signal
    the earlier record wins.
    """
    best: Optional[ApRecord] = None
    best_rssi = MIN_RSSI
    for index, record in enumerate(records):
        if index >= SCAN_LIST_SIZE:
            break
        if not is_network_allowed(device_uuid, network_prefix, record.ssid):
            continue
        log(
            LogLevel.INFO,
            _TAG,
            f"Allowed SSID: {record.ssid} | RSSI: {record.rssi} | Channel: {record.channel}",
        )
        if record.rssi > best_rssi:
            best = record
            best_rssi = record.rssi

    if best is None:
        log(LogLevel.WARNING, _TAG, "No allowed APs found")
    else:
        log(
            LogLevel.INFO,
            _TAG,
            f"Best AP found: SSID: {best.ssid} | RSSI: {best.rssi} | Channel: {best.channel}",
        )
    return best