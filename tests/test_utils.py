from types import SimpleNamespace

import pytest

from vpn_entrypoint.vpn import utils
from vpn_entrypoint.vpn.exceptions import CommandFailed
from vpn_entrypoint.vpn.utils import find_process, read_config_directives, run_command


def _proc(pid, name, cmdline):
    return SimpleNamespace(info={"pid": pid, "name": name, "cmdline": cmdline})


@pytest.fixture
def process_table(monkeypatch):
    table = [
        _proc(1, "python3", ["python3", "-m", "vpn_entrypoint.main"]),
        _proc(7, "sg", ["sg", "vpn", "-c", "openvpn --config /vpn/vpn.conf"]),
        _proc(9, None, None),
        _proc(12, "openvpn", ["/usr/sbin/openvpn", "--config", "/vpn/vpn.conf"]),
    ]
    monkeypatch.setattr(utils.psutil, "process_iter", lambda attrs=None: iter(table))
    return table


def test_find_process_by_name(process_table):
    assert find_process("openvpn") == 12


def test_find_process_skips_excluded_pid(process_table):
    assert find_process("openvpn", exclude_pid=12) is None


def test_find_process_matches_argv0(process_table):
    process_table[3].info["name"] = "openvpn-2.6"

    assert find_process("openvpn") == 12


def test_ca_directives_read(tmp_path):
    conf = tmp_path / "vpn.conf"
    conf.write_text("client\n# ca commented.crt\nca /vpn/ca.crt\n<ca>\n-----BEGIN-----\n</ca>\n")

    assert read_config_directives(conf, "ca") == ["/vpn/ca.crt"]


def test_missing_executable_raises_command_failed():
    with pytest.raises(CommandFailed) as exc:
        run_command(["/no/such/binary"])

    assert exc.value.cmd == ["/no/such/binary"]


def test_ca_directives_survive_undecodable_bytes(tmp_path):
    conf = tmp_path / "vpn.conf"
    conf.write_bytes(b"client\n# \xff\xfe\nca /vpn/ca.crt\n")

    assert read_config_directives(conf, "ca") == ["/vpn/ca.crt"]
