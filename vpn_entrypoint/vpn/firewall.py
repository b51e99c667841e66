"""Default-deny OUTPUT policy: only DNS, the VPN itself and local traffic leave."""

import ipaddress
from typing import Iterable, List

from .command_factory import VPNCommandFactory
from .exceptions import CommandFailed, FirewallInstallFailure
from .models import FirewallRule
from .utils import Runner, run_command
from ..logging_utility import logger


CHAIN = "OUTPUT"


def detect_subnets(interface: str, runner: Runner = run_command) -> List[str]:
    """Return the IPv4 networks configured on `interface`, e.g. ['172.17.0.0/16']."""
    stdout, _ = runner(VPNCommandFactory.show_addresses(interface))
    subnets = []
    for line in stdout.splitlines():
        fields = line.split()
        if len(fields) >= 4 and fields[2] == "inet":
            network = str(ipaddress.ip_interface(fields[3]).network)
            if network not in subnets:
                subnets.append(network)
    return subnets


def base_rules(tunnel_interfaces: Iterable[str], subnets: Iterable[str]) -> List[FirewallRule]:
    """Accept rules that never depend on the firewall engine's extensions."""
    rules = [
        FirewallRule("ACCEPT", match="conntrack", ctstate="ESTABLISHED,RELATED"),
        FirewallRule("ACCEPT", out_interface="lo"),
    ]
    rules += [FirewallRule("ACCEPT", out_interface=dev) for dev in tunnel_interfaces]
    rules += [FirewallRule("ACCEPT", destination=net) for net in subnets]
    rules.append(FirewallRule("ACCEPT", protocol="udp", match="udp", dport=53))
    return rules


def owner_rules(group: str) -> List[FirewallRule]:
    return [FirewallRule("ACCEPT", protocol=proto, match="owner", gid_owner=group)
            for proto in ("tcp", "udp")]


def port_rules(port: int) -> List[FirewallRule]:
    return [FirewallRule("ACCEPT", protocol=proto, match=proto, dport=port)
            for proto in ("tcp", "udp")]


class FirewallInstaller:
    """Replaces the OUTPUT chain; rules are only ever appended, DROP last."""

    def __init__(self, interface: str, tunnel_interfaces: Iterable[str],
                 vpn_group: str, vpn_port: int, runner: Runner = run_command):
        self.interface = interface
        self.tunnel_interfaces = list(tunnel_interfaces)
        self.vpn_group = vpn_group
        self.vpn_port = vpn_port
        self.runner = runner
        self.installed: List[FirewallRule] = []

    def _append(self, rule: FirewallRule) -> None:
        self.runner(VPNCommandFactory.append_rule(CHAIN, rule))
        self.installed.append(rule)

    def _append_control_rules(self) -> None:
        try:
            for rule in owner_rules(self.vpn_group):
                self._append(rule)
            logger.info(f"Allowing VPN control traffic for group {self.vpn_group}")
        except CommandFailed as e:
            logger.warning(f"Owner matching unavailable, allowing port {self.vpn_port} instead: {e.stderr.strip()}")
            for rule in port_rules(self.vpn_port):
                self._append(rule)

    def install(self) -> List[FirewallRule]:
        """
        Flush OUTPUT and install the accept list followed by DROP.

        Returns:
            The rules in the order they were appended

        Raises:
            FirewallInstallFailure: the engine is missing or rejected a rule
        """
        self.installed = []
        try:
            subnets = detect_subnets(self.interface, self.runner)
            if not subnets:
                logger.warning(f"No IPv4 network found on {self.interface}")

            self.runner(VPNCommandFactory.flush_chain(CHAIN))
            for rule in base_rules(self.tunnel_interfaces, subnets):
                self._append(rule)
            self._append_control_rules()
            self._append(FirewallRule("DROP"))
        except CommandFailed as e:
            raise FirewallInstallFailure(f"Unable to install firewall: {e}") from e

        logger.info(f"Installed {len(self.installed)} {CHAIN} rules, default DROP")
        return list(self.installed)


def install_firewall(interface: str, tunnel_interfaces: Iterable[str], vpn_group: str,
                     vpn_port: int, runner: Runner = run_command) -> List[FirewallRule]:
    return FirewallInstaller(interface, tunnel_interfaces, vpn_group, vpn_port, runner).install()
