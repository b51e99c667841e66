import shlex
from pathlib import Path

import pytest

from vpn_entrypoint.vpn.command_factory import VPNCommandFactory
from vpn_entrypoint.vpn.commands import IPTABLES, OPENVPN, Command, ValidationError
from vpn_entrypoint.vpn.models import FirewallRule


def test_empty_command_rejected():
    with pytest.raises(ValidationError):
        Command.from_str("")


def test_unknown_option_rejected():
    with pytest.raises(ValidationError, match="--jump"):
        IPTABLES.with_options(insert="OUTPUT")


def test_option_value_type_checked():
    with pytest.raises(ValidationError):
        IPTABLES.with_options(dport="domain")


def test_builders_do_not_mutate_templates():
    OPENVPN.with_options(config="/vpn/vpn.conf")

    assert OPENVPN.build() == ["openvpn"]


def test_rule_rendered_in_iptables_order():
    rule = FirewallRule("ACCEPT", protocol="udp", match="udp", dport=53)

    assert VPNCommandFactory.append_rule("OUTPUT", rule) == [
        "iptables", "--append", "OUTPUT", "--protocol", "udp", "--match", "udp",
        "--dport", "53", "--jump", "ACCEPT",
    ]


def test_start_vpn_quotes_inner_command():
    cmd = VPNCommandFactory.start_vpn(Path("/vpn/my vpn.conf"), ["--remote", "host;rm -rf /", "1194"], "vpn")

    assert cmd[:3] == ["sg", "vpn", "-c"]
    assert shlex.split(cmd[3]) == ["openvpn", "--config", "/vpn/my vpn.conf",
                                   "--remote", "host;rm -rf /", "1194"]


def test_add_route_command():
    assert VPNCommandFactory.add_route("192.168.1.0/24", "10.0.0.1", "eth0") == [
        "ip", "route", "add", "to", "192.168.1.0/24", "via", "10.0.0.1", "dev", "eth0",
    ]
