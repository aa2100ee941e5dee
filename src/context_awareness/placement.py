"""File placement helpers for every side effect outside the JSON documents."""

from __future__ import annotations

import os
import shutil
from pathlib import Path


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def set_executable(path: Path) -> None:
    if os.name != "nt":
        path.chmod(0o755)


def copy_file(source: Path, dest: Path, *, executable: bool = False) -> Path:
    """Copy *source* to *dest*, creating parent directories.

    A missing *source* raises ``FileNotFoundError``; it is not swallowed.
    """
    ensure_dir(dest.parent)
    shutil.copy2(source, dest)
    if executable:
        set_executable(dest)
    return dest


def remove_path(path: Path) -> bool:
    """Remove a file or directory tree. Returns False if nothing was there."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return True
    if path.exists() or path.is_symlink():
        path.unlink()
        return True
    return False


def remove_dir_if_empty(path: Path) -> bool:
    """Remove *path* when it is an empty directory."""
    if path.is_dir() and not any(path.iterdir()):
        path.rmdir()
        return True
    return False


def path_exists(path: Path) -> bool:
    return path.exists()
