"""Build a :class:`ProjectTree` from the flat file list of a structure provider."""

from __future__ import annotations

import logging
import os
from pathlib import PurePosixPath
from typing import Callable, Iterable

from project_reviewer.domain.entities import FileNode, NodeKind, ProjectTree
from project_reviewer.domain.exceptions import EmptyProjectError, StructureUnavailableError

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    """Return the canonical fingerprint for a project-relative path.

    ``./src/a.py``, ``/src/a.py`` and ``src\\a.py`` all map to ``src/a.py``.
    """
    cleaned = path.strip().replace("\\", "/")
    while cleaned.startswith("./"):
        cleaned = cleaned[2:]
    cleaned = cleaned.lstrip("/")
    if not cleaned:
        return ""
    return str(PurePosixPath(cleaned))


def _file_size(path: str) -> int | None:
    try:
        return os.path.getsize(path)
    except OSError:
        return None


class _DirBuilder:
    """Mutable directory node used while the tree is assembled."""

    __slots__ = ("path", "children")

    def __init__(self, path: str) -> None:
        self.path = path
        self.children: list[_DirBuilder | FileNode] = []

    def freeze(self) -> FileNode:
        return FileNode(
            path=self.path,
            kind=NodeKind.DIRECTORY,
            children=tuple(
                c.freeze() if isinstance(c, _DirBuilder) else c for c in self.children
            ),
        )


def build_tree(
    root: str,
    absolute_paths: Iterable[str],
    size_of: Callable[[str], int | None] = _file_size,
) -> ProjectTree:
    """Split each absolute path into segments and insert it into a rooted tree.

    Placeholder directory nodes are created on demand, in first-seen order.

    Raises
    ------
    StructureUnavailableError
        If an entry is not a string or lies outside *root*.
    EmptyProjectError
        If no files remain.
    """
    root_abs = os.path.abspath(root)
    top = _DirBuilder("")
    dirs: dict[str, _DirBuilder] = {"": top}
    seen: set[str] = set()

    for raw in absolute_paths:
        if not isinstance(raw, str) or not raw:
            raise StructureUnavailableError(f"Malformed entry from structure provider: {raw!r}")

        absolute = os.path.abspath(os.path.join(root_abs, raw))
        relative = os.path.relpath(absolute, root_abs)
        if relative in (os.curdir, os.pardir) or relative.startswith(os.pardir + os.sep):
            raise StructureUnavailableError(
                f"Structure provider returned a path outside {root_abs}: {raw}"
            )

        rel_posix = normalize_path(relative)
        if rel_posix in seen:
            continue
        seen.add(rel_posix)

        segments = rel_posix.split("/")
        parent = top
        current = ""
        for segment in segments[:-1]:
            current = f"{current}/{segment}" if current else segment
            node = dirs.get(current)
            if node is None:
                node = _DirBuilder(current)
                dirs[current] = node
                parent.children.append(node)
            parent = node

        parent.children.append(
            FileNode(path=rel_posix, kind=NodeKind.FILE, size=size_of(absolute))
        )

    if not seen:
        raise EmptyProjectError(f"No files found under {root_abs}.")

    logger.info("Project structure: %d files, %d directories", len(seen), len(dirs) - 1)
    return ProjectTree(root_path=root_abs, root=top.freeze(), file_paths=frozenset(seen))
