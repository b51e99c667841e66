"""Factory for creating VPN bootstrap commands."""

import shlex
from pathlib import Path
from typing import List

from .commands import (
    DPKG_RECONFIGURE_TZDATA,
    IP_ADDR_ONELINE,
    IP_ROUTE,
    IPTABLES,
    OPENVPN,
    SG,
)
from .models import FirewallRule


class VPNCommandFactory:
    """Factory for creating VPN bootstrap commands."""

    @staticmethod
    def start_vpn(config_path: Path, options: List[str], group: str) -> List[str]:
        """Create the OpenVPN start command, run under `group` through sg."""
        openvpn_cmd = OPENVPN.with_options(config=str(config_path)).with_args(*options).build()
        return SG.with_args(group, "-c", shlex.join(openvpn_cmd)).build()

    @staticmethod
    def openvpn_directives(**options: str) -> List[str]:
        """Render validated OpenVPN options without the executable name."""
        return OPENVPN.with_options(**options).build()[1:]

    @staticmethod
    def flush_chain(chain: str) -> List[str]:
        """Create iptables chain flush command."""
        return IPTABLES.with_options(flush=chain).build()

    @staticmethod
    def append_rule(chain: str, rule: FirewallRule) -> List[str]:
        """Create iptables append command for a single rule."""
        return IPTABLES.with_options(append=chain, **rule.to_options()).build()

    @staticmethod
    def show_default_route() -> List[str]:
        """Create default route show command."""
        return IP_ROUTE.with_args("show", "default").build()

    @staticmethod
    def add_route(network: str, gateway: str, interface: str) -> List[str]:
        """Create route add command."""
        return IP_ROUTE.with_args("add", "to", network, "via", gateway, "dev", interface).build()

    @staticmethod
    def show_addresses(interface: str) -> List[str]:
        """Create one-line IPv4 address listing command for an interface."""
        return IP_ADDR_ONELINE.with_args("show", "dev", interface).build()

    @staticmethod
    def reconfigure_tzdata() -> List[str]:
        """Create tzdata reconfiguration command."""
        return DPKG_RECONFIGURE_TZDATA.build()
