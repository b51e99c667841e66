from pathlib import Path

import pytest

from vpn_entrypoint.settings import Settings
from vpn_entrypoint.vpn.exceptions import CommandFailed
from vpn_entrypoint.vpn.models import MisconfigurationPolicy


class FakeRunner:
    """Stands in for run_command; records every command it is given."""

    def __init__(self):
        self.calls = []
        self._responses = []
        self._failures = []

    def respond(self, tokens, stdout):
        self._responses.append((list(tokens), stdout))

    def fail(self, tokens, stderr="error"):
        self._failures.append((list(tokens), stderr))

    @staticmethod
    def _matches(tokens, cmd):
        return all(token in cmd for token in tokens)

    def __call__(self, cmd, check=True, input=None):
        self.calls.append(list(cmd))
        for tokens, stderr in self._failures:
            if self._matches(tokens, cmd):
                if check:
                    raise CommandFailed(cmd, 1, stderr)
                return "", stderr
        for tokens, stdout in self._responses:
            if self._matches(tokens, cmd):
                return stdout, ""
        return "", ""

    def commands(self, program):
        return [call for call in self.calls if call[0] == program]


ETH0_ADDR = (
    "2: eth0    inet 172.17.0.2/16 brd 172.17.255.255 scope global eth0\\"
    "       valid_lft forever preferred_lft forever\n"
)
DEFAULT_ROUTE = "default via 10.0.0.1 dev eth0 \n"


@pytest.fixture
def runner():
    fake = FakeRunner()
    fake.respond(["ip", "addr", "show"], ETH0_ADDR)
    fake.respond(["ip", "route", "show", "default"], DEFAULT_ROUTE)
    return fake


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    zoneinfo = tmp_path / "zoneinfo"
    (zoneinfo / "Europe").mkdir(parents=True)
    (zoneinfo / "Europe" / "Berlin").write_text("TZif2")
    (zoneinfo / "EST5EDT").write_text("TZif2")
    (tmp_path / "etc").mkdir()

    return Settings(
        config_file=tmp_path / "vpn" / "vpn.conf",
        auth_file=tmp_path / "vpn" / "vpn.auth",
        resolv_conf=tmp_path / "etc" / "resolv.conf",
        resolvconf_hook=tmp_path / "sbin" / "resolvconf",
        update_resolv_conf=tmp_path / "etc" / "openvpn" / "update-resolv-conf",
        tun_device=tmp_path / "dev" / "net" / "tun",
        zoneinfo_dir=zoneinfo,
        timezone_file=tmp_path / "etc" / "timezone",
        localtime=tmp_path / "etc" / "localtime",
        misconfiguration_policy=MisconfigurationPolicy.DELAYED_EXIT,
        misconfiguration_delay=5,
    )


@pytest.fixture
def bare_runner():
    return FakeRunner()
