"""
Preparation of the submissions folder: cleanup and archive extraction.
"""

import logging
import shutil
import zipfile
from pathlib import Path

from .config import ARCHIVE_PATTERN, HOMEWORK_MARKER

log = logging.getLogger(__name__)


def clean_up_folder(folder: Path) -> None:
    """
    Delete everything inside `folder`, keeping the folder itself.

    Args:
        folder: Directory left over from a previous run.
    """
    if not folder.exists():
        folder.mkdir(parents=True)
        return

    for item in folder.iterdir():
        if item.is_dir() and not item.is_symlink():
            shutil.rmtree(item)
        else:
            item.unlink()


def extract_archives(archives_dir: Path, destination: Path) -> list[Path]:
    """
    Unpack every submission archive into its own folder.

    An archive named "Ivanov_hw3.81234.zip" is extracted to
    "<destination>/hw3.81234". Archives without the homework marker in
    their name are ignored; corrupt ones are logged and skipped.

    Args:
        archives_dir: Directory with the submitted .zip files.
        destination: Submissions root to extract into.

    Returns:
        Folders that were extracted.
    """
    extracted: list[Path] = []

    for archive in sorted(archives_dir.glob(ARCHIVE_PATTERN)):
        marker = archive.stem.lower().find(HOMEWORK_MARKER)
        if marker == -1:
            log.debug("Ignoring %s: no '%s' in its name", archive, HOMEWORK_MARKER)
            continue

        target = destination / archive.stem[marker:]
        try:
            with zipfile.ZipFile(archive, "r") as zip_ref:
                target.mkdir(parents=True, exist_ok=True)
                zip_ref.extractall(target)
        except zipfile.BadZipFile:
            log.warning("Unable to extract %s", archive)
            continue
        extracted.append(target)

    return extracted
