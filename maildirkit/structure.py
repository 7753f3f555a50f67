import logging
import os
from pathlib import Path
from typing import Union

from .errors import NotADirectory

logger = logging.getLogger("maildir")

SUBDIRS = ("cur", "new", "tmp")

PathLike = Union[str, Path]


def verify(base: PathLike) -> bool:
    base = Path(base)
    return all((base / sub).is_dir() for sub in SUBDIRS)


def initialize(base: PathLike) -> None:
    """Create tmp, new and cur under an existing directory.

    Not idempotent, running it twice fails with FileExistsError.
    """
    base = Path(base)
    if not base.is_dir():
        raise NotADirectory(base)
    for sub in SUBDIRS:
        (base / sub).mkdir()
    logger.info(f"Initialized maildir {base=!s}")


def destroy(base: PathLike) -> None:
    base = Path(base)
    if not base.is_dir():
        raise NotADirectory(base)
    for sub in SUBDIRS:
        sub_path = base / sub
        if not sub_path.is_dir():
            continue
        with os.scandir(sub_path) as it:
            files = [entry.path for entry in it if not entry.is_dir(follow_symlinks=False)]
        for path in files:
            os.unlink(path)
        sub_path.rmdir()
        logger.debug(f"Removed {sub_path!s} with {len(files)} files")
    logger.info(f"Destroyed maildir {base=!s}")
