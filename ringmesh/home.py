"""Role of the device of the home node that serves the local network."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ringmesh.netutils import get_node_subnet, mask_size
from ringmesh.ring_share import ComponentId
from ringmesh.role import Role
from ringmesh.runtime import LogLevel, log

_TAG = "home"


@dataclass
class HomeRole(Role):
    """Takes its subnet from the first provision and serves it over its access point."""

    is_provisioned: bool = False

    def on_start(self, router: Any) -> None:
        """Push the current routing table to the siblings."""
        router.shared_state.refresh(ComponentId.ROUTING)

    def on_sibling_provision(self, router: Any, event: Any) -> None:
        """Claim this device's block of the provisioned network."""
        if self.is_provisioned:
            log(
                LogLevel.WARNING,
                _TAG,
                "[on_provision] Home device already provisioned -- skipping new provision "
                f"(provider: {event.provider_id})",
            )
            return

        subnet = get_node_subnet(event.network, router.orientation)
        log(LogLevel.WARNING, _TAG, f"[on_provision] Got subnet {subnet.addr:08X}/{mask_size(subnet.mask)}")

        router.add_global_route(subnet, router.orientation)
        log(LogLevel.INFO, _TAG, "[on_provision] Added entry to node routing table")

        router.wireless.enable_ap_mode(subnet.addr, subnet.mask)
        log(LogLevel.INFO, _TAG, "[on_provision] Enabled AP mode")

        self.is_provisioned = True