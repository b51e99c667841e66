import argparse
import os
import sys
from typing import List, Mapping, Optional

from .logging_utility import logger
from .settings import load_settings
from .vpn.exceptions import ConfigurationError
from .vpn.manager import EXIT_BOOTSTRAP_FAILED, BootstrapManager
from .vpn.models import AuthCredential, Directives, VPNServer


EXIT_UNKNOWN_OPTION = 1
EXIT_MISSING_ARGUMENT = 2

DESCRIPTION = "Configure the container network, then run OpenVPN."
EPILOG = "The 'command' (if provided and valid) will be run instead of openvpn."


class EntrypointArgumentParser(argparse.ArgumentParser):
    """Exits 2 when a flag lacks its value and 1 for any other usage error."""

    def error(self, message):
        self.print_usage(sys.stderr)
        code = EXIT_MISSING_ARGUMENT if "expected one argument" in message else EXIT_UNKNOWN_OPTION
        self.exit(code, f"{self.prog}: error: {message}\n")


def auth_value(value: str) -> AuthCredential:
    user, sep, password = value.partition(";")
    if not sep:
        raise argparse.ArgumentTypeError("expected '<user>;<pass>'")
    return AuthCredential(username=user, password=password)


def vpn_value(value: str) -> VPNServer:
    parts = value.split(";", 2)
    if len(parts) != 3:
        raise argparse.ArgumentTypeError("expected '<server>;<user>;<password>'")
    server, user, password = parts
    return VPNServer(server=server, username=user, password=password)


def build_parser() -> argparse.ArgumentParser:
    parser = EntrypointArgumentParser(
        prog="vpn-entrypoint",
        description=DESCRIPTION,
        epilog=EPILOG,
    )
    parser.add_argument("-a", dest="auth", metavar="<user>;<pass>", type=auth_value,
                        help="VPN server authentication")
    parser.add_argument("-d", dest="dns", action="store_true",
                        help="Use the VPN provider's DNS resolvers")
    parser.add_argument("-f", dest="firewall", action="store_true",
                        help="Firewall rules so that only the VPN and DNS are allowed to "
                             "send internet traffic (IE if VPN is down it's offline)")
    parser.add_argument("-r", dest="routes", metavar="<network>", action="append", default=[],
                        help="CIDR network (IE 192.168.1.0/24) to add a route to "
                             "(allows replies once the VPN is up)")
    parser.add_argument("-t", dest="timezone", metavar="[timezone]",
                        help="Configure timezone, empty for the default")
    parser.add_argument("-v", dest="vpn", metavar="<server>;<user>;<password>", type=vpn_value,
                        help="Configure OpenVPN")
    parser.add_argument("command", nargs=argparse.REMAINDER,
                        help="Command to run instead of openvpn")
    return parser


def env_arguments(environ: Mapping[str, str]) -> List[str]:
    """Translate environment settings into flags, in front of explicit ones."""
    args: List[str] = []
    if environ.get("DNS"):
        args += ["-d"]
    if environ.get("VPN"):
        args += ["-v", environ["VPN"]]
    if environ.get("TZ"):
        args += ["-t", environ["TZ"]]
    if environ.get("ROUTE"):
        args += ["-r", environ["ROUTE"]]
    if environ.get("FIREWALL"):
        args += ["-f"]
    return args


def parse_directives(argv: List[str], environ: Optional[Mapping[str, str]] = None) -> Directives:
    environ = os.environ if environ is None else environ
    args = build_parser().parse_args(env_arguments(environ) + list(argv))
    return Directives(
        dns=args.dns,
        firewall=args.firewall,
        auth=args.auth,
        routes=args.routes,
        timezone=args.timezone,
        vpn=args.vpn,
        command=args.command,
    )


def main(argv: Optional[List[str]] = None) -> int:
    directives = parse_directives(sys.argv[1:] if argv is None else argv)
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(str(e))
        return EXIT_BOOTSTRAP_FAILED
    return BootstrapManager(settings, directives).run()


if __name__ == "__main__":
    sys.exit(main())
