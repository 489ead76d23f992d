# File Search
#
# Recursive file-name search. Walks with an explicit stack so deep trees
# cannot exhaust the interpreter's recursion limit.

import logging
import os
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)


def search_files(root: Union[str, Path], name: str) -> List[str]:
    """
    Find files under ``root`` whose file name contains ``name``.

    Symlinked directories are not followed. Directories that cannot be
    read are logged and skipped.

    Returns:
        Sorted list of matching file paths

    Raises:
        FileNotFoundError: ``root`` does not exist or is not a directory
    """
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Not a directory: {root}")

    matches = []
    stack = [root]

    while stack:
        directory = stack.pop()
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    if entry.is_dir(follow_symlinks=False):
                        stack.append(Path(entry.path))
                    elif name in entry.name:
                        matches.append(entry.path)
        except (PermissionError, FileNotFoundError) as e:
            logger.warning("Skipping %s: %s", directory, e)

    matches.sort()
    return matches
