"""VPN bootstrap orchestration: configure the network, then exec the client."""

import os
import shutil
import stat
import time
from pathlib import Path
from typing import Callable, List, Optional

from .auth import provision_auth, register_auth
from .command_factory import VPNCommandFactory
from .dns import enable_provider_dns, ensure_resolvconf_hook
from .exceptions import (
    CommandNotFound,
    InvalidTimezone,
    NotConfigured,
    RouteInstallFailure,
    VPNError,
)
from .firewall import install_firewall
from .models import (
    AuthCredential,
    Directives,
    MisconfigurationPolicy,
    RuntimeOptions,
    StartupState,
    VPNServer,
)
from .routing import add_return_route
from .timezone import set_timezone
from .utils import Runner, find_process, read_config_directives, run_command
from ..logging_utility import logger
from ..settings import Settings


EXIT_OK = 0
EXIT_NOT_CONFIGURED = 0
EXIT_COMMAND_NOT_FOUND = 13
EXIT_BOOTSTRAP_FAILED = 14


class BootstrapManager:
    """
    Runs one container start: decide what to start, configure, then exec.

    Decision order:
      1. a command was given and resolves on PATH -> configure, exec it
      2. a command was given but does not resolve -> exit 13, nothing touched
      3. an OpenVPN process already exists       -> exit 0, nothing touched
      4. configure, then validate config and certificate -> misconfiguration
         policy if either is missing
      5. install the resolvconf shim and tun node, exec OpenVPN under the
         VPN group

    Nothing is rolled back when a later step fails.
    """

    def __init__(
            self,
            settings: Settings,
            directives: Directives,
            runner: Runner = run_command,
            exec_fn: Callable[[str, List[str]], None] = os.execvp,
            sleep: Callable[[float], None] = time.sleep,
            which: Callable[[str], Optional[str]] = shutil.which,
            process_probe: Optional[Callable[[], Optional[int]]] = None,
    ):
        self.settings = settings
        self.directives = directives
        self.runner = runner
        self.exec_fn = exec_fn
        self.sleep = sleep
        self.which = which
        self.process_probe = process_probe or self._find_running_vpn
        self.options = RuntimeOptions()
        self.state = StartupState.NO_COMMAND

    def _find_running_vpn(self) -> Optional[int]:
        return find_process(self.settings.openvpn_binary, exclude_pid=os.getpid())

    def resolve_command(self, name: str) -> str:
        executable = self.which(name)
        if not executable:
            raise CommandNotFound(f"command not found: {name}")
        return executable

    def run(self) -> int:
        command = self.directives.command
        executable = None
        if command:
            try:
                executable = self.resolve_command(command[0])
            except CommandNotFound as e:
                self.state = StartupState.COMMAND_NOT_FOUND
                logger.error(str(e))
                return EXIT_COMMAND_NOT_FOUND
        else:
            pid = self.process_probe()
            if pid is not None:
                self.state = StartupState.ALREADY_RUNNING
                logger.info(f"Service already running (pid {pid}), please restart container to apply changes")
                return EXIT_OK

        try:
            self.configure()
            if executable:
                self.state = StartupState.EXEC_SUBSTITUTE
                logger.info(f"Running {' '.join(command)} instead of OpenVPN")
                self.exec_fn(executable, list(command))
                return EXIT_OK
            return self.start_vpn()
        except VPNError as e:
            logger.error(str(e))
            return EXIT_BOOTSTRAP_FAILED

    def configure(self) -> None:
        """Apply the requested network and system configuration, in order."""
        directives = self.directives
        if directives.timezone is not None:
            self.apply_timezone(directives.timezone or self.settings.default_timezone)
        if directives.dns:
            enable_provider_dns(self.options, self.settings.update_resolv_conf)
        if directives.firewall:
            install_firewall(
                self.settings.interface,
                self.settings.tunnel_interfaces,
                self.settings.vpn_group,
                self.settings.vpn_port,
                self.runner,
            )
        for network in directives.routes:
            self.apply_return_route(network)
        if directives.vpn:
            self.configure_vpn(directives.vpn)
        if directives.auth:
            self.configure_auth(directives.auth)

    def apply_timezone(self, name: str) -> bool:
        try:
            return set_timezone(
                name,
                self.settings.zoneinfo_dir,
                self.settings.timezone_file,
                self.settings.localtime,
                self.runner,
            )
        except InvalidTimezone as e:
            logger.error(str(e))
            return False

    def apply_return_route(self, network: str) -> bool:
        try:
            add_return_route(network, self.settings.interface, self.runner)
            return True
        except RouteInstallFailure as e:
            logger.error(str(e))
            return False

    def configure_auth(self, credential: AuthCredential) -> None:
        auth_file = provision_auth(credential, self.settings.auth_file)
        register_auth(self.options, auth_file)

    def configure_vpn(self, vpn: VPNServer) -> None:
        self.options.extend(["--remote", vpn.server, str(self.settings.vpn_port)])
        self.configure_auth(AuthCredential(username=vpn.username, password=vpn.password))

    def check_configuration(self) -> None:
        """
        Raises:
            NotConfigured: the config file, or a `ca` file it names, is missing
        """
        config_file = self.settings.config_file
        if not config_file.exists():
            raise NotConfigured("VPN not configured!")

        for ca in read_config_directives(config_file, "ca"):
            ca_path = Path(ca)
            # relative to the config file, not the working directory
            if not ca_path.is_absolute():
                ca_path = config_file.parent / ca_path
            if not ca_path.exists():
                raise NotConfigured(f"VPN cert missing: {ca}")

    def handle_misconfiguration(self) -> int:
        policy = self.settings.misconfiguration_policy
        delay = self.settings.misconfiguration_delay
        if policy == MisconfigurationPolicy.BLOCK:
            logger.info("Waiting for VPN configuration, restart the container once it is in place")
            while True:
                self.sleep(delay)
        if policy == MisconfigurationPolicy.DELAYED_EXIT:
            logger.info(f"Exiting in {delay:g} seconds")
            self.sleep(delay)
        return EXIT_NOT_CONFIGURED

    def ensure_tun_device(self) -> bool:
        tun = self.settings.tun_device
        try:
            if stat.S_ISCHR(tun.stat().st_mode):
                return False
        except OSError:
            pass

        logger.info(f"Creating tun device {tun}")
        try:
            tun.parent.mkdir(parents=True, exist_ok=True)
            os.mknod(tun, stat.S_IFCHR | 0o666,
                     os.makedev(self.settings.tun_major, self.settings.tun_minor))
        except OSError as e:
            raise VPNError(f"Unable to create tun device {tun}: {e}") from e
        return True

    def start_vpn(self) -> int:
        try:
            self.check_configuration()
        except NotConfigured as e:
            self.state = StartupState.NOT_CONFIGURED
            logger.error(str(e))
            return self.handle_misconfiguration()

        ensure_resolvconf_hook(self.settings.resolvconf_hook, self.settings.resolv_conf)
        self.ensure_tun_device()

        self.state = StartupState.START_VPN
        cmd = VPNCommandFactory.start_vpn(
            self.settings.config_file,
            self.options.consume(),
            self.settings.vpn_group,
        )
        logger.info(f"Starting OpenVPN using config: {self.settings.config_file}")
        self.exec_fn(cmd[0], cmd)
        return EXIT_OK
