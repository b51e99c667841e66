"""Command templates and builders for the VPN bootstrap."""

from typing import List, Optional, Dict
from dataclasses import dataclass
from pathlib import Path


class CommandError(Exception):
    """Base exception for command-related errors."""
    pass


class ValidationError(CommandError):
    """Raised when command validation fails."""
    pass


@dataclass
class Command:
    """Command builder with validation."""
    base_cmd: List[str]
    _valid_options: Optional[Dict[str, type]] = None

    def _validate_option(self, opt: str, value: Optional[str]) -> None:
        """Validate option and its value if validation rules exist."""
        if self._valid_options is not None:
            # Remove leading dashes for validation
            opt_name = opt.lstrip('-').replace('-', '_')

            if opt_name not in self._valid_options:
                valid_opts = ", ".join(f"--{opt.replace('_', '-')}"
                                       for opt in self._valid_options.keys())
                raise ValidationError(
                    f"Invalid option '{opt}' for command {self.base_cmd[0]}. "
                    f"Valid options are: {valid_opts}"
                )

            expected_type = self._valid_options[opt_name]
            if value is None:
                raise ValidationError(f"Option '{opt}' requires a value")

            try:
                if expected_type == Path:
                    Path(value)
                else:
                    expected_type(value)
            except ValueError:
                raise ValidationError(
                    f"Invalid value '{value}' for option '{opt}'. Expected {expected_type.__name__}"
                )

    def _validate_executable(self) -> None:
        """Validate that base command exists."""
        if not self.base_cmd:
            raise ValidationError("Command cannot be empty")

    @classmethod
    def from_str(cls, cmd: str, valid_options: Optional[Dict[str, type]] = None) -> 'Command':
        """Create command from string with optional validation rules."""
        command = cls(cmd.split(), valid_options)
        command._validate_executable()
        return command

    def with_arg(self, arg: str) -> 'Command':
        """Add single argument."""
        return Command(self.base_cmd + [str(arg)], self._valid_options)

    def with_args(self, *args: str) -> 'Command':
        """Add multiple arguments."""
        return Command(self.base_cmd + [str(a) for a in args], self._valid_options)

    def with_options(self, **kwargs: Optional[str]) -> 'Command':
        """Add multiple options with validation, in keyword order."""
        cmd = self.base_cmd.copy()
        for opt, value in kwargs.items():
            self._validate_option(opt, str(value) if value is not None else None)
            cmd.append("--" + opt.replace("_", "-"))
            if value is not None:
                cmd.append(str(value))
        return Command(cmd, self._valid_options)

    def build(self) -> List[str]:
        """Get final command list."""
        self._validate_executable()
        return list(self.base_cmd)


IPTABLES_OPTIONS = {
    'flush': str,
    'append': str,
    'protocol': str,
    'match': str,
    'ctstate': str,
    'out_interface': str,
    'destination': str,
    'dport': int,
    'gid_owner': str,
    'jump': str,
}

OPENVPN_OPTIONS = {
    'config': Path,
    'auth_user_pass': Path,
    'script_security': int,
    'up': Path,
    'down': Path,
}


IPTABLES = Command.from_str("iptables", valid_options=IPTABLES_OPTIONS)

IP = Command.from_str("ip")
IP_ROUTE = IP.with_arg("route")
IP_ADDR_ONELINE = Command.from_str("ip -o -4 addr")

OPENVPN = Command.from_str("openvpn", valid_options=OPENVPN_OPTIONS)

SG = Command.from_str("sg")

DPKG_RECONFIGURE_TZDATA = Command.from_str(
    "dpkg-reconfigure -f noninteractive tzdata"
)
