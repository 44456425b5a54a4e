"""Choosing which files to upload."""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Protocol

from cloudy.errors import FileSelectionError, NoFilesSelectedError

logger = logging.getLogger(__name__)

FZF_COMMAND = ["fzf", "--multi", "--preview", "file -b {}"]


class FileSelector(Protocol):
    """Produces the list of files for a batch."""

    def select(self) -> list[Path]: ...


def list_files(directory: Path, include_hidden: bool = True) -> list[Path]:
    """Every regular file under ``directory``, recursively, sorted."""
    files = []
    for root, dirs, names in os.walk(directory):
        if not include_hidden:
            dirs[:] = [d for d in dirs if not d.startswith(".")]
            names = [n for n in names if not n.startswith(".")]
        for name in names:
            path = Path(root) / name
            if path.is_file():
                files.append(path)
    return sorted(files)


class ExplicitPathSelector:
    """A path given on the command line: one file, or every file in a directory."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def select(self) -> list[Path]:
        if self.path.is_dir():
            files = list_files(self.path)
            if not files:
                raise NoFilesSelectedError(f"No files found in {self.path}")
            return files
        if self.path.is_file():
            return [self.path]
        raise NoFilesSelectedError(f"Path not found: {self.path}")


class InteractiveSelector:
    """Multi-select from non-hidden files under ``root`` using fzf."""

    def __init__(self, root: Path = Path(".")):
        self.root = Path(root)

    @staticmethod
    def is_available() -> bool:
        return shutil.which("fzf") is not None

    def select(self) -> list[Path]:
        if not self.is_available():
            raise FileSelectionError(
                "fzf is not installed. Please install it first or specify file paths directly."
            )

        candidates = list_files(self.root, include_hidden=False)
        if not candidates:
            raise NoFilesSelectedError(f"No files found in {self.root}")

        listing = "\n".join(str(p) for p in candidates)
        logger.debug("Offering %d files to fzf", len(candidates))
        try:
            # fzf draws its UI on the terminal; only the selection comes back on stdout
            result = subprocess.run(
                FZF_COMMAND,
                input=listing,
                stdout=subprocess.PIPE,
                text=True,
                check=False,
            )
        except OSError as e:
            raise FileSelectionError(f"Failed to run fzf: {e}") from e

        # 1: no match, 130: aborted with Esc/Ctrl-C
        if result.returncode not in (0, 1, 130):
            raise FileSelectionError(f"fzf exited with status {result.returncode}")

        selected = [Path(line) for line in result.stdout.splitlines() if line.strip()]
        if not selected:
            raise NoFilesSelectedError("No files selected for upload.")
        return selected


def selector_for(path: Path | None) -> FileSelector:
    """Explicit selection when a path is given, interactive otherwise."""
    if path is None:
        return InteractiveSelector()
    return ExplicitPathSelector(path)
