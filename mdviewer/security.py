from __future__ import annotations

import os

from fastapi import Header, HTTPException
from .config import settings


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")):
    if not settings.api_key:
        return
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


def is_safe(root: str | os.PathLike, rel_path: str) -> bool:
    """Return True if ``rel_path`` joined onto ``root`` stays inside ``root``.

    Purely lexical: ``.`` and ``..`` segments are collapsed, symlinks are not
    resolved and the filesystem is never touched. The prefix check is
    boundary-aware, so root ``/a/b`` rejects ``/a/bc``.
    """
    if "\0" in rel_path:
        return False
    root_norm = os.path.normpath(os.path.abspath(root))
    candidate = os.path.normpath(os.path.join(root_norm, rel_path))
    if candidate == root_norm:
        return True
    prefix = root_norm if root_norm.endswith(os.sep) else root_norm + os.sep
    return candidate.startswith(prefix)
