"""Walks a local directory to implement the StructureProvider port."""

from __future__ import annotations

import logging
import os

from project_reviewer.domain.exceptions import InvalidProjectPathError, StructureUnavailableError
from project_reviewer.services.file_filter import is_skipped_dir, should_skip

logger = logging.getLogger(__name__)


class LocalStructureProvider:
    """Walk a directory, pruning build output, dependencies and VCS metadata."""

    def __init__(self, follow_symlinks: bool = False) -> None:
        self._follow_symlinks = follow_symlinks

    def list_files(self, root: str) -> list[str]:
        """Return sorted absolute paths of every non-excluded file under *root*."""
        root_abs = os.path.abspath(root)
        if not os.path.isdir(root_abs):
            raise InvalidProjectPathError(f"Project path is not a directory: {root_abs}")

        def _raise(err: OSError) -> None:
            raise err

        files: list[str] = []
        try:
            for dirpath, dirnames, filenames in os.walk(
                root_abs, onerror=_raise, followlinks=self._follow_symlinks
            ):
                dirnames[:] = sorted(d for d in dirnames if not is_skipped_dir(d))
                for name in filenames:
                    absolute = os.path.join(dirpath, name)
                    relative = os.path.relpath(absolute, root_abs).replace(os.sep, "/")
                    if should_skip(relative):
                        continue
                    files.append(absolute)
        except OSError as exc:
            raise StructureUnavailableError(f"Cannot list files under {root_abs}: {exc}") from exc

        files.sort()
        logger.debug("Listed %d files under %s", len(files), root_abs)
        return files
