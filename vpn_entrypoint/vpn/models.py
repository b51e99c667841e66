"""Data models for the VPN bootstrap."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field


class StartupState(Enum):
    """Outcome of the startup decision sequence"""
    NO_COMMAND = "no_command"
    ALREADY_RUNNING = "already_running"
    COMMAND_NOT_FOUND = "command_not_found"
    EXEC_SUBSTITUTE = "exec_substitute"
    NOT_CONFIGURED = "not_configured"
    START_VPN = "start_vpn"


class MisconfigurationPolicy(Enum):
    """What to do when the VPN config or its certificate is missing"""
    EXIT = "exit"
    DELAYED_EXIT = "delayed_exit"
    BLOCK = "block"


class AuthCredential(BaseModel):
    username: str
    password: str


class VPNServer(BaseModel):
    server: str
    username: str
    password: str


class Directives(BaseModel):
    """Canonical directive set produced by the command line layer."""
    dns: bool = False
    firewall: bool = False
    auth: Optional[AuthCredential] = None
    routes: List[str] = Field(default_factory=list)
    timezone: Optional[str] = None
    vpn: Optional[VPNServer] = None
    command: List[str] = Field(default_factory=list)


@dataclass
class FirewallRule:
    """Single OUTPUT rule, rendered as iptables long options"""
    target: str
    protocol: Optional[str] = None
    match: Optional[str] = None
    ctstate: Optional[str] = None
    out_interface: Optional[str] = None
    destination: Optional[str] = None
    dport: Optional[int] = None
    gid_owner: Optional[str] = None

    def to_options(self) -> Dict[str, str]:
        options = {}
        for name in ("protocol", "match", "ctstate", "out_interface",
                     "destination", "dport", "gid_owner"):
            value = getattr(self, name)
            if value is not None:
                options[name] = str(value)
        options["jump"] = self.target
        return options


@dataclass
class ReturnRoute:
    """Host route back to a peer network"""
    network: str
    gateway: str
    interface: str


class RuntimeOptions:
    """
    Append-only list of extra options for the VPN client invocation.

    Components hand their directives to `register` under a key; a key is
    accepted once per run so repeated registration does not duplicate
    options. `consume` hands the list over for the final exec and may only
    be called once.
    """

    def __init__(self):
        self._options: List[str] = []
        self._registered: Set[str] = set()
        self._consumed = False

    def register(self, key: str, directives: List[str]) -> bool:
        if key in self._registered:
            return False
        self._registered.add(key)
        self.extend(directives)
        return True

    def extend(self, directives: List[str]) -> None:
        if self._consumed:
            raise RuntimeError("runtime options already consumed")
        self._options.extend(str(d) for d in directives)

    def consume(self) -> List[str]:
        if self._consumed:
            raise RuntimeError("runtime options already consumed")
        self._consumed = True
        return list(self._options)

    def __iter__(self):
        return iter(list(self._options))

    def __len__(self):
        return len(self._options)
