"""Container timezone configuration."""

import os
import shutil
from pathlib import Path

from .command_factory import VPNCommandFactory
from .exceptions import InvalidTimezone
from .utils import Runner, run_command
from ..logging_utility import logger


def _current_timezone(timezone_file: Path) -> str:
    try:
        return timezone_file.read_text().strip()
    except FileNotFoundError:
        return ""


def set_timezone(
        name: str,
        zoneinfo_dir: Path,
        timezone_file: Path,
        localtime: Path,
        runner: Runner = run_command,
) -> bool:
    """
    Point the container at the zoneinfo entry for `name`.

    Args:
        name: Zoneinfo identifier, e.g. 'EST5EDT' or 'Europe/Berlin'
        zoneinfo_dir: Root of the zoneinfo database
        timezone_file: File holding the configured identifier
        localtime: Symlink to repoint at the zoneinfo entry
        runner: Command runner used for the tzdata reconfiguration hook

    Returns:
        True if anything was changed, False if the timezone was already set

    Raises:
        InvalidTimezone: no zoneinfo entry exists for `name`
    """
    zone = zoneinfo_dir / name
    if (not name or Path(name).is_absolute() or ".." in Path(name).parts
            or not zone.exists()):
        raise InvalidTimezone(f"invalid timezone specified: {name}")

    if _current_timezone(timezone_file) == name:
        logger.info(f"Timezone already set to {name}")
        return False

    if timezone_file.exists() and not os.access(timezone_file, os.W_OK):
        logger.warning(f"{timezone_file} is not writable, leaving timezone unchanged")
        return False

    logger.info(f"Setting timezone to {name}")
    timezone_file.write_text(f"{name}\n")

    if localtime.is_symlink() or localtime.exists():
        localtime.unlink()
    localtime.symlink_to(zone)

    if shutil.which(VPNCommandFactory.reconfigure_tzdata()[0]):
        _, stderr = runner(VPNCommandFactory.reconfigure_tzdata(), check=False)
        if stderr:
            logger.debug(f"tzdata reconfiguration: {stderr.strip()}")
    return True
