"""
Minimal resolvconf replacement used as the OpenVPN up/down resolver hook.

    resolvconf -a [name]   read a resolver config on stdin and install it
    resolvconf -d [name]   put the original resolver config back

The first -a copies the live file to `<file>.orig`; that copy is never
overwritten afterwards, so repeated up/down cycles always restore the
configuration the container started with.
"""

import os
import shutil
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from ..logging_utility import logger


DEFAULT_RESOLV_CONF = "/etc/resolv.conf"


def backup_path(conf: Path) -> Path:
    return conf.with_name(conf.name + ".orig")


def apply(conf: Path, stream: TextIO) -> None:
    backup = backup_path(conf)
    if not backup.exists():
        if conf.exists():
            shutil.copy2(conf, backup)
        else:
            backup.write_text("")
        logger.info(f"Backed up {conf} to {backup}")

    content = stream.read()
    # Write in place; the file may be a bind mount that cannot be replaced.
    with open(conf, "w") as f:
        f.write(content)
    logger.info(f"Updated {conf}")


def restore(conf: Path) -> bool:
    backup = backup_path(conf)
    if not backup.exists():
        logger.warning(f"No backup at {backup}, leaving {conf} unchanged")
        return False

    with open(conf, "w") as f:
        f.write(backup.read_text())
    logger.info(f"Restored {conf} from {backup}")
    return True


def main(argv: Optional[List[str]] = None, stdin: TextIO = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    conf = Path(os.environ.get("RESOLV_CONF", DEFAULT_RESOLV_CONF))
    mode = args[0] if args else ""

    if mode == "-a":
        apply(conf, stdin or sys.stdin)
    elif mode == "-d":
        restore(conf)
    return 0


if __name__ == "__main__":
    sys.exit(main())
