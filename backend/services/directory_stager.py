"""Scratch directory staging for per-category downloads"""

import shutil
import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


def stage_directory(directory: Union[str, Path]) -> Path:
    """
    Return an existing, empty directory at the given path

    Anything already there (files, subdirectories) is removed first.
    A path that does not exist yet is simply created.
    """
    path = Path(directory)

    if path.is_dir():
        shutil.rmtree(path)
    elif path.exists():
        path.unlink()

    path.mkdir(parents=True)
    logger.debug(f"Staged empty directory: {path}")
    return path
