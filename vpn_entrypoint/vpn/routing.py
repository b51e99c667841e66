"""Return routes so replies to peer networks bypass the tunnel."""

from typing import Optional

from .command_factory import VPNCommandFactory
from .exceptions import CommandFailed, RouteInstallFailure
from .models import ReturnRoute
from .utils import Runner, run_command
from ..logging_utility import logger


def default_gateway(runner: Runner = run_command) -> Optional[str]:
    """Read the gateway of the default route from the live routing table."""
    stdout, _ = runner(VPNCommandFactory.show_default_route())
    for line in stdout.splitlines():
        fields = line.split()
        if fields[:1] == ["default"] and "via" in fields:
            index = fields.index("via")
            if index + 1 < len(fields):
                return fields[index + 1]
    return None


def add_return_route(network: str, interface: str, runner: Runner = run_command) -> ReturnRoute:
    """
    Route `network` via the current default gateway over `interface`.

    An existing identical route is accepted as success.

    Raises:
        RouteInstallFailure: no default gateway, or the route was rejected
    """
    try:
        gateway = default_gateway(runner)
    except CommandFailed as e:
        raise RouteInstallFailure(f"Unable to read routing table: {e}") from e
    if gateway is None:
        raise RouteInstallFailure(f"No default gateway, cannot route {network}")

    route = ReturnRoute(network=network, gateway=gateway, interface=interface)
    try:
        runner(VPNCommandFactory.add_route(network, gateway, interface))
    except CommandFailed as e:
        if "File exists" in e.stderr:
            logger.info(f"Route to {network} already present")
            return route
        raise RouteInstallFailure(f"Unable to add route to {network}: {e}") from e

    logger.info(f"Added return route to {network} via {gateway} dev {interface}")
    return route
