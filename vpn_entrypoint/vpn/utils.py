"""Utility functions for the VPN bootstrap."""

import os
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import psutil

from .exceptions import CommandFailed
from ..logging_utility import logger


Runner = Callable[..., Tuple[str, str]]


def run_command(cmd: List[str], check: bool = True, input: Optional[str] = None) -> Tuple[str, str]:
    """
    Run a command and return its output.

    Args:
        cmd: Command as list of strings
        check: Whether to raise on a non-zero exit status
        input: Text fed to the command's standard input

    Returns:
        Tuple of (stdout, stderr)

    Raises:
        CommandFailed: the command exited non-zero (with check) or the
            executable could not be found
    """
    logger.debug(f"Running command: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=check, input=input)
        return result.stdout, result.stderr
    except FileNotFoundError:
        raise CommandFailed(cmd, stderr=f"{cmd[0]}: command not found")
    except subprocess.CalledProcessError as e:
        if check:
            raise CommandFailed(cmd, e.returncode, e.stderr)
        return e.stdout, e.stderr


def find_process(name: str, exclude_pid: Optional[int] = None) -> Optional[int]:
    """
    Look for a running process by executable name.

    Args:
        name: Process name, compared to the process name and the basename
            of argv[0]
        exclude_pid: Pid to ignore, normally our own

    Returns:
        The pid of the first match, or None
    """
    for proc in psutil.process_iter(attrs=["pid", "name", "cmdline"]):
        info = proc.info
        if info["pid"] == exclude_pid:
            continue
        cmdline = info.get("cmdline") or []
        argv0 = os.path.basename(cmdline[0]) if cmdline else ""
        if info.get("name") == name or argv0 == name:
            return info["pid"]
    return None


def read_config_directives(config_file: Path, directive: str) -> List[str]:
    """Return the first argument of every `directive` line in an OpenVPN config."""
    values = []
    with open(config_file, "r", errors="replace") as f:
        for line in f:
            fields = line.split()
            if len(fields) >= 2 and fields[0] == directive:
                values.append(fields[1])
    return values


def write_private_file(path: Path, content: str, mode: int = 0o600) -> None:
    """Write `content` to `path`, creating it with `mode` and enforcing it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "w") as f:
        f.write(content)
    os.chmod(path, mode)
