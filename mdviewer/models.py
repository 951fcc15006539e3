from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class NodeKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class FileNode(BaseModel):
    name: str
    path: str  # "/"-separated, relative to the workspace root; "" for the root
    kind: NodeKind
    children: Optional[List[FileNode]] = None  # None for files

    def find_child(self, name: str) -> Optional[FileNode]:
        for child in self.children or []:
            if child.name == name:
                return child
        return None


class DocumentContent(BaseModel):
    path: str
    body: str
    frontmatter: Optional[Dict[str, Any]] = None


class ChangeKind(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"


class ChangeEvent(BaseModel):
    kind: ChangeKind
    path: str
    node: Optional[FileNode] = None


class ErrorKind(str, Enum):
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    DISCOVERY_FAILED = "DISCOVERY_FAILED"


class ErrorResult(BaseModel):
    kind: ErrorKind
    message: str


class SearchHit(BaseModel):
    path: str
    line_no: int  # 0 for a file name match
    line: str
