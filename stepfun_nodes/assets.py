"""Build-time asset copying.

Copies icons, the README and templates into the packaged output directory
and places the node icon next to the node and credential definitions so
the host can resolve it.
"""

import logging
import shutil
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)

ICON_NAME = "stepfun.png"


def copy_file_if_exists(src: Path, dest: Path) -> bool:
    """Copy a single file, skipping it when the source is missing.

    Returns:
        bool: True if the file was copied
    """
    if not src.is_file():
        logger.debug(f"Skipping missing file: {src}")
        return False
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, dest)
    logger.debug(f"Copied {src} -> {dest}")
    return True


def copy_dir_recursive(src: Path, dest: Path) -> List[Path]:
    """Copy a directory tree, skipping it when the source is missing.

    Returns:
        List[Path]: Destination paths of the copied files
    """
    if not src.is_dir():
        logger.debug(f"Skipping missing directory: {src}")
        return []
    copied = []
    dest.mkdir(parents=True, exist_ok=True)
    for entry in sorted(src.iterdir()):
        target = dest / entry.name
        if entry.is_dir():
            copied.extend(copy_dir_recursive(entry, target))
        elif entry.is_file():
            shutil.copyfile(entry, target)
            copied.append(target)
    return copied


def copy_assets(root: Union[str, Path],
                dist: Union[str, Path, None] = None) -> List[Path]:
    """Copy packaging assets from ``root`` into ``dist``.

    Args:
        root: Project root containing icons/, templates/ and README.md
        dist: Output directory (default: <root>/dist)

    Returns:
        List[Path]: Destination paths of every copied file
    """
    root = Path(root)
    dist = Path(dist) if dist is not None else root / "dist"
    logger.info(f"Copying assets from {root} to {dist}")

    copied = []
    copied.extend(copy_dir_recursive(root / "icons", dist / "icons"))
    if copy_file_if_exists(root / "README.md", dist / "README.md"):
        copied.append(dist / "README.md")
    copied.extend(copy_dir_recursive(root / "templates", dist / "templates"))

    icon = root / "icons" / ICON_NAME
    for target in (
        dist / "nodes" / "StepFunTts" / ICON_NAME,
        dist / "nodes" / "StepFunAsr" / ICON_NAME,
        dist / "credentials" / ICON_NAME,
    ):
        if copy_file_if_exists(icon, target):
            copied.append(target)

    logger.info(f"Copied {len(copied)} asset file(s)")
    return copied
