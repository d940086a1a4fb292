"""
Artifact path helpers
"""

import os
import shutil
import tempfile
from pathlib import Path

from .routes import ARTIFACT_EXTENSION

PARTIAL_SUFFIX = ".part"


def find_available_path(name: str, target: Path) -> Path:
    """Return ``target`` or the first free ``"<name> (n).jar"`` beside it

    ``n`` starts at 1 and increments until no file exists at the candidate,
    so an unrelated artifact sharing a base name is never clobbered.
    """
    target = Path(target)
    conflicts = 0
    while target.exists():
        conflicts += 1
        target = target.parent / f"{name} ({conflicts}){ARTIFACT_EXTENSION}"
    return target


def artifact_stem(path: Path) -> str:
    """File name of ``path`` without its extension"""
    file_name = Path(path).name
    return file_name.rsplit('.', 1)[0] if '.' in file_name else file_name


def create_partial_file(directory: Path) -> Path:
    """Create an empty temporary file for an in-flight download in ``directory``"""
    fd, path = tempfile.mkstemp(prefix=".ore-", suffix=PARTIAL_SUFFIX, dir=str(directory))
    os.close(fd)
    return Path(path)


def clean_directory(directory: Path):
    """Delete everything inside ``directory`` but keep the directory itself"""
    directory = Path(directory)
    if not directory.exists():
        return
    for entry in directory.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()
