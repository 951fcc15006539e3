from __future__ import annotations

import logging
import os
import stat
import time
from dataclasses import dataclass, field
from pathlib import Path

from .content import extract
from .logging_utils import setup_logger, log_operation, elapsed_ms
from .models import DocumentContent, ErrorKind, ErrorResult, FileNode, SearchHit
from .search import search_workspace
from .security import is_safe
from .tree import DiscoveryError, build_tree


@dataclass(frozen=True)
class FileService:
    """Read-only access to the documents under one workspace root.

    Every operation returns either its success value or an ``ErrorResult``.
    Nothing is cached: each call goes back to the filesystem.
    """

    root: Path
    logger: logging.Logger | None = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'root', Path(os.path.abspath(self.root)))
        if self.logger is None:
            object.__setattr__(self, 'logger', setup_logger("mdviewer.service"))

    def list_tree(self) -> FileNode | ErrorResult:
        start_time = time.time()
        try:
            tree = build_tree(self.root)
        except DiscoveryError as e:
            log_operation(self.logger, "list_tree", str(self.root), False, elapsed_ms(start_time),
                          error_kind=ErrorKind.DISCOVERY_FAILED.value, error=str(e))
            return ErrorResult(kind=ErrorKind.DISCOVERY_FAILED,
                               message="Failed to discover markdown files")
        log_operation(self.logger, "list_tree", str(self.root), True, elapsed_ms(start_time),
                      result_summary=f"{len(tree.children)} top-level entries")
        return tree

    def get_document(self, rel_path: str) -> DocumentContent | ErrorResult:
        start_time = time.time()
        target = self._checked_target("get_document", rel_path, start_time)
        if isinstance(target, ErrorResult):
            return target

        try:
            raw = target.read_bytes()
        except OSError as e:
            return self._fail("get_document", rel_path, start_time, ErrorKind.NOT_FOUND,
                              "File not found", str(e))

        doc = extract(raw.decode("utf-8", errors="replace"), path=rel_path)
        log_operation(self.logger, "get_document", rel_path, True, elapsed_ms(start_time),
                      result_summary="frontmatter" if doc.frontmatter else "plain")
        return doc

    def get_asset(self, rel_path: str) -> bytes | ErrorResult:
        start_time = time.time()
        target = self._checked_target("get_asset", rel_path, start_time)
        if isinstance(target, ErrorResult):
            return target

        try:
            data = target.read_bytes()
        except OSError as e:
            return self._fail("get_asset", rel_path, start_time, ErrorKind.NOT_FOUND,
                              "Asset not found", str(e))

        log_operation(self.logger, "get_asset", rel_path, True, elapsed_ms(start_time),
                      result_summary=f"{len(data)} bytes")
        return data

    def search(self, query: str, limit: int = 30) -> list[SearchHit] | ErrorResult:
        start_time = time.time()
        try:
            hits = search_workspace(self.root, query, limit=limit)
        except DiscoveryError as e:
            return self._fail("search", query, start_time, ErrorKind.DISCOVERY_FAILED,
                              "Failed to discover markdown files", str(e))
        log_operation(self.logger, "search", query, True, elapsed_ms(start_time),
                      result_summary=f"{len(hits)} hits")
        return hits

    def _checked_target(self, operation: str, rel_path: str, start_time: float) -> Path | ErrorResult:
        """Gate a client-supplied path: safety first, then a regular-file check."""
        if not is_safe(self.root, rel_path):
            return self._fail(operation, rel_path, start_time, ErrorKind.FORBIDDEN,
                              "Access to this path is not allowed")

        target = Path(os.path.normpath(os.path.join(self.root, rel_path)))
        try:
            st = target.stat()
        except (OSError, ValueError) as e:
            return self._fail(operation, rel_path, start_time, ErrorKind.NOT_FOUND,
                              "File not found", str(e))
        if not stat.S_ISREG(st.st_mode):
            return self._fail(operation, rel_path, start_time, ErrorKind.NOT_FOUND,
                              "File not found", "not a regular file")
        return target

    def _fail(self, operation: str, target: str, start_time: float, kind: ErrorKind,
              message: str, error: str | None = None) -> ErrorResult:
        log_operation(self.logger, operation, target, False, elapsed_ms(start_time),
                      error_kind=kind.value, error=error)
        return ErrorResult(kind=kind, message=message)
