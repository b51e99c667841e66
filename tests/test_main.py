import pytest

from vpn_entrypoint.main import env_arguments, parse_directives


def test_flags_become_directives():
    directives = parse_directives(
        ["-d", "-f", "-r", "10.0.0.0/8", "-a", "alice;s3;cret", "-t", "Europe/Berlin", "sleep", "10"],
        environ={},
    )

    assert directives.dns is True
    assert directives.firewall is True
    assert directives.routes == ["10.0.0.0/8"]
    assert directives.auth.username == "alice"
    assert directives.auth.password == "s3;cret"
    assert directives.timezone == "Europe/Berlin"
    assert directives.command == ["sleep", "10"]


def test_no_arguments_means_start_vpn():
    directives = parse_directives([], environ={})

    assert directives.command == []
    assert directives.vpn is None
    assert directives.timezone is None


def test_vpn_flag_splits_server_user_password():
    directives = parse_directives(["-v", "vpn.example.com;alice;pa;ss"], environ={})

    assert directives.vpn.server == "vpn.example.com"
    assert directives.vpn.username == "alice"
    assert directives.vpn.password == "pa;ss"


def test_empty_timezone_flag_kept_empty():
    assert parse_directives(["-t", ""], environ={}).timezone == ""


def test_environment_translated_to_flags():
    environ = {"DNS": "true", "FIREWALL": "1", "ROUTE": "192.168.1.0/24", "TZ": "EST5EDT",
               "VPN": "vpn.example.com;alice;pw"}

    assert env_arguments(environ) == [
        "-d",
        "-v", "vpn.example.com;alice;pw",
        "-t", "EST5EDT",
        "-r", "192.168.1.0/24",
        "-f",
    ]


def test_explicit_flags_override_environment():
    directives = parse_directives(["-t", "Europe/Berlin", "-r", "10.0.0.0/8"],
                                  environ={"TZ": "UTC", "ROUTE": "192.168.1.0/24"})

    assert directives.timezone == "Europe/Berlin"
    assert directives.routes == ["192.168.1.0/24", "10.0.0.0/8"]


def test_empty_environment_values_ignored():
    directives = parse_directives([], environ={"DNS": "", "FIREWALL": "", "TZ": ""})

    assert directives.dns is False
    assert directives.firewall is False
    assert directives.timezone is None


@pytest.mark.parametrize("argv, code", [
    (["-x"], 1),
    (["-v", "vpn.example.com;alice"], 1),
    (["-a", "alice"], 1),
    (["-r"], 2),
    (["-d", "-t"], 2),
])
def test_usage_errors_exit_codes(argv, code, capsys):
    with pytest.raises(SystemExit) as exc:
        parse_directives(argv, environ={})

    assert exc.value.code == code
    assert "usage:" in capsys.readouterr().err
