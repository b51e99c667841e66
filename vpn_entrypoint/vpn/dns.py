"""Provider DNS: let the VPN client rewrite the resolver through a hook."""

import os
import shlex
import sys
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from .command_factory import VPNCommandFactory
from .exceptions import VPNError
from .models import RuntimeOptions
from ..logging_utility import logger


DNS_KEY = "dns"
SCRIPT_SECURITY_LEVEL = 2

templates = Environment(
    loader=FileSystemLoader(str(Path(__file__).parent.parent / "templates")),
    keep_trailing_newline=True,
)
templates.filters["shquote"] = shlex.quote


def enable_provider_dns(options: RuntimeOptions, update_script: Path) -> bool:
    """
    Have OpenVPN call `update_script` on tunnel up and down.

    Only the first call per run adds directives; later calls return False.
    """
    directives = VPNCommandFactory.openvpn_directives(
        script_security=str(SCRIPT_SECURITY_LEVEL),
        up=str(update_script),
        down=str(update_script),
    )
    registered = options.register(DNS_KEY, directives)
    if registered:
        logger.info(f"Using VPN provider DNS via {update_script}")
    return registered


def render_resolvconf_hook(resolv_conf: Path, python: str = None) -> str:
    template = templates.get_template("resolvconf.sh.j2")
    return template.render(
        python=python or sys.executable,
        resolv_conf=str(resolv_conf),
    )


def ensure_resolvconf_hook(hook: Path, resolv_conf: Path) -> bool:
    """Install the fallback resolvconf shim unless an executable one exists."""
    if os.access(hook, os.X_OK):
        return False

    logger.info(f"Installing resolvconf shim at {hook}")
    try:
        hook.parent.mkdir(parents=True, exist_ok=True)
        hook.write_text(render_resolvconf_hook(resolv_conf))
        hook.chmod(0o755)
    except OSError as e:
        raise VPNError(f"Unable to install resolvconf shim {hook}: {e}") from e
    return True
