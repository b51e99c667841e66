"""Credentials file provisioning for OpenVPN --auth-user-pass."""

from pathlib import Path
from typing import List

from .command_factory import VPNCommandFactory
from .models import AuthCredential, RuntimeOptions
from .utils import write_private_file
from ..logging_utility import logger


AUTH_KEY = "auth"


def provision_auth(credential: AuthCredential, auth_file: Path) -> Path:
    """Write username and password on two lines, readable by the owner only."""
    write_private_file(auth_file, f"{credential.username}\n{credential.password}\n")
    logger.info(f"Wrote VPN credentials for {credential.username} to {auth_file}")
    return auth_file


def auth_directives(auth_file: Path) -> List[str]:
    return VPNCommandFactory.openvpn_directives(auth_user_pass=str(auth_file))


def register_auth(options: RuntimeOptions, auth_file: Path) -> bool:
    """Add the --auth-user-pass directive once per run."""
    return options.register(AUTH_KEY, auth_directives(auth_file))
