"""Custom exceptions for the VPN bootstrap."""


class VPNError(Exception):
    """Base exception for VPN bootstrap errors."""
    pass


class ConfigurationError(VPNError):
    """Raised when the entrypoint settings are invalid"""
    pass


class CommandFailed(VPNError):
    """Raised when an external command exits non-zero or cannot be run"""

    def __init__(self, cmd, returncode=None, stderr=""):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr or ""
        super().__init__(f"Command failed: {' '.join(self.cmd)}\n{self.stderr}".rstrip())


class InvalidTimezone(VPNError):
    """Raised when no zoneinfo resource exists for the requested timezone"""
    pass


class FirewallInstallFailure(VPNError):
    """Raised when the OUTPUT policy cannot be installed"""
    pass


class RouteInstallFailure(VPNError):
    """Raised when a return route cannot be added"""
    pass


class CommandNotFound(VPNError):
    """Raised when the substitute command is not an executable on PATH"""
    pass


class NotConfigured(VPNError):
    """Raised when the VPN config file or its certificate is missing"""
    pass
