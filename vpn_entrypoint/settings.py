"""Fixed paths and policy knobs for the bootstrap, with optional INI overrides."""

import configparser
import os
from pathlib import Path
from typing import Tuple

from pydantic import BaseModel, Field, ValidationError

from .vpn.exceptions import ConfigurationError
from .vpn.models import MisconfigurationPolicy


DEFAULT_SETTINGS_FILE = "/etc/vpn-entrypoint.conf"


class Settings(BaseModel):
    config_file: Path = Path("/vpn/vpn.conf")
    auth_file: Path = Path("/vpn/vpn.auth")

    resolv_conf: Path = Path("/etc/resolv.conf")
    resolvconf_hook: Path = Path("/sbin/resolvconf")
    update_resolv_conf: Path = Path("/etc/openvpn/update-resolv-conf")

    tun_device: Path = Path("/dev/net/tun")
    tun_major: int = 10
    tun_minor: int = 200

    zoneinfo_dir: Path = Path("/usr/share/zoneinfo")
    timezone_file: Path = Path("/etc/timezone")
    localtime: Path = Path("/etc/localtime")
    default_timezone: str = "EST5EDT"

    interface: str = "eth0"
    tunnel_interfaces: Tuple[str, ...] = ("tap0", "tun0")
    vpn_group: str = "vpn"
    vpn_port: int = 1194
    openvpn_binary: str = "openvpn"

    misconfiguration_policy: MisconfigurationPolicy = MisconfigurationPolicy.DELAYED_EXIT
    misconfiguration_delay: float = Field(default=120.0, gt=0)


def _load_config(config_file: str) -> configparser.ConfigParser:
    config = configparser.ConfigParser()
    config.read(config_file)
    return config


def load_settings(config_file: str = None) -> Settings:
    """
    Build Settings from defaults and an optional INI file.

    Keys from every section are merged, later sections winning, so the file
    may be grouped however the operator likes ([paths], [network], ...).
    `tunnel_interfaces` is a comma separated list.
    """
    if config_file is None:
        config_file = os.environ.get("VPN_ENTRYPOINT_CONFIG", DEFAULT_SETTINGS_FILE)

    overrides = {}
    if os.path.exists(config_file):
        config = _load_config(config_file)
        for section in config.sections():
            for key, value in config[section].items():
                if key not in Settings.model_fields:
                    raise ConfigurationError(f"Unknown setting '{key}' in {config_file} [{section}]")
                if key == "tunnel_interfaces":
                    value = tuple(v.strip() for v in value.split(",") if v.strip())
                overrides[key] = value

    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings in {config_file}: {e}")
