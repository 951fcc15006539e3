"""Markdown discovery and navigation-tree construction for a workspace root."""

from __future__ import annotations

import os
import stat

from .logging_utils import setup_logger
from .models import FileNode, NodeKind

logger = setup_logger("mdviewer.tree")

MARKDOWN_EXTENSIONS = (".md", ".markdown")


class DiscoveryError(Exception):
    """The workspace root could not be walked."""


def is_markdown_name(name: str) -> bool:
    return not name.startswith(".") and name.endswith(MARKDOWN_EXTENSIONS)


def discover_markdown_files(root: str | os.PathLike) -> list[str]:
    """Return ``/``-separated paths of every markdown document under ``root``.

    Hidden entries are skipped and symlinked directories are followed unless
    they point back at one of their own ancestors. Names are visited in
    sorted order within each directory. Raises ``DiscoveryError`` when the
    root itself is missing, not a directory, or unreadable; unreadable
    sub-directories are skipped.
    """
    root_path = os.path.abspath(root)
    try:
        root_stat = os.stat(root_path)
    except OSError as exc:
        raise DiscoveryError(f"Cannot access workspace root: {root_path}") from exc
    if not stat.S_ISDIR(root_stat.st_mode):
        raise DiscoveryError(f"Workspace root is not a directory: {root_path}")

    found: list[str] = []

    def walk(directory: str, rel_parts: list[str], ancestors: frozenset) -> None:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            if not rel_parts:
                raise DiscoveryError(f"Cannot list workspace root: {root_path}") from exc
            logger.warning(f"Skipping unreadable directory {'/'.join(rel_parts)}: {exc}")
            return

        for entry in entries:
            if entry.name.startswith("."):
                continue
            try:
                if entry.is_dir():
                    st = entry.stat()
                    key = (st.st_dev, st.st_ino)
                    if key in ancestors:
                        logger.debug(f"Symlink cycle at {entry.path}, not descending")
                        continue
                    walk(entry.path, rel_parts + [entry.name], ancestors | {key})
                elif entry.is_file() and is_markdown_name(entry.name):
                    found.append("/".join(rel_parts + [entry.name]))
            except OSError as exc:
                # Dangling symlinks and entries removed mid-walk
                logger.debug(f"Skipping {entry.path}: {exc}")

    walk(root_path, [], frozenset({(root_stat.st_dev, root_stat.st_ino)}))
    return found


def new_root(root: str | os.PathLike) -> FileNode:
    normalized = os.path.normpath(os.path.abspath(root))
    name = os.path.basename(normalized) or normalized
    return FileNode(name=name, path="", kind=NodeKind.DIRECTORY, children=[])


def insert_path(root: FileNode, rel_path: str) -> None:
    """Insert one discovered document path into the tree rooted at ``root``.

    Intermediate directories are created on demand. Inserting a path that is
    already present is a no-op.
    """
    parts = [p for p in rel_path.split("/") if p]
    current = root
    for i, part in enumerate(parts):
        is_file = i == len(parts) - 1
        child = current.find_child(part)
        if child is None:
            child = FileNode(
                name=part,
                path="/".join(parts[: i + 1]),
                kind=NodeKind.FILE if is_file else NodeKind.DIRECTORY,
                children=None if is_file else [],
            )
            current.children.append(child)
        if not is_file:
            if child.kind is not NodeKind.DIRECTORY:
                raise ValueError(f"{child.path} is a file, cannot hold {rel_path}")
            current = child


def build_tree(root: str | os.PathLike) -> FileNode:
    """Build the navigation tree of every markdown document under ``root``."""
    tree = new_root(root)
    for rel_path in discover_markdown_files(root):
        insert_path(tree, rel_path)
    return tree


def flatten_files(node: FileNode) -> list[FileNode]:
    """File leaves of ``node`` in tree order."""
    if node.kind is NodeKind.FILE:
        return [node]
    out: list[FileNode] = []
    for child in node.children or []:
        out.extend(flatten_files(child))
    return out


def file_node(rel_path: str) -> FileNode:
    """Snapshot node for a single document, used in ``added`` change events."""
    return FileNode(name=rel_path.rsplit("/", 1)[-1], path=rel_path, kind=NodeKind.FILE)
