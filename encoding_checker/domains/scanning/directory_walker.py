import asyncio
import logging
import os
from pathlib import Path
from typing import AsyncIterator, Callable, List, Optional, Tuple

from encoding_checker.core.cancellation import CancellationToken
from encoding_checker.core.exceptions import RootEnumerationError

ErrorReporter = Callable[[Path, OSError], None]


def _list_directory(directory: Path) -> Tuple[List[Path], List[Path]]:
    """Blocking listing of one directory, split into files and subdirectories (name order)."""
    files: List[Path] = []
    subdirectories: List[Path] = []
    with os.scandir(directory) as iterator:
        entries = sorted(iterator, key=lambda entry: entry.name)
    for entry in entries:
        try:
            # Directory symlinks are never followed, so the walk cannot loop
            if entry.is_dir(follow_symlinks=False):
                subdirectories.append(Path(entry.path))
            elif entry.is_file():
                files.append(Path(entry.path))
        except OSError as e:
            logging.debug(f"Skipping entry that could not be inspected: {entry.path}: {e}")
    return files, subdirectories


class DirectoryWalker:
    """
    Enumerates candidate files below a root directory.

    Files of a directory are yielded before its subdirectories are entered.
    A subdirectory that cannot be listed is skipped (and reported) so one
    unreadable subtree never stops the walk. Only a failure to list the root
    itself is fatal and raises RootEnumerationError.
    """

    def __init__(
        self,
        root_directory: str,
        recursive: bool,
        cancellation_token: CancellationToken,
        report_error: Optional[ErrorReporter] = None,
    ):
        self._root = Path(os.path.abspath(root_directory))
        self._recursive = recursive
        self._token = cancellation_token
        self._report_error = report_error

    @property
    def root(self) -> Path:
        return self._root

    async def iter_files(self) -> AsyncIterator[Path]:
        """
        Lazily yield absolute file paths.

        The cancellation token is checked before every directory listing; once
        it is set the iteration simply stops.
        """
        stack: List[Path] = [self._root]
        while stack:
            if self._token.is_cancelled():
                logging.debug(f"Directory walk of {self._root} stopped by cancellation")
                return

            current = stack.pop()
            try:
                files, subdirectories = await asyncio.to_thread(_list_directory, current)
            except OSError as e:
                if current == self._root:
                    raise RootEnumerationError(str(self._root), str(e)) from e
                logging.warning(f"Skipping unreadable directory {current}: {e}")
                if self._report_error:
                    self._report_error(current, e)
                continue

            for file_path in files:
                yield file_path

            if self._recursive:
                # Reversed so the stack pops subdirectories in name order
                stack.extend(reversed(subdirectories))

    async def collect_files(self) -> List[Path]:
        """
        Upfront enumeration pass used to fix the total file count of a scan.

        Returns whatever was found before a cancellation; callers check the
        token afterwards.
        """
        return [file_path async for file_path in self.iter_files()]
