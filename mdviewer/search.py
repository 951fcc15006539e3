from __future__ import annotations
from pathlib import Path
import re

from .models import SearchHit
from .tree import build_tree, flatten_files


def search_workspace(root: Path, query: str, limit: int = 30) -> list[SearchHit]:
    q = (query or "").strip()
    if not q:
        return []

    rel_paths = [node.path for node in flatten_files(build_tree(root))]
    hits: list[SearchHit] = []

    # 1) file name matches
    for rel_path in rel_paths:
        if q.lower() in rel_path.lower():
            hits.append(SearchHit(path=rel_path, line_no=0, line=f"[FileName Match: {rel_path}]"))
            if len(hits) >= limit:
                return hits

    # 2) line content matches
    pat = re.compile(re.escape(q), re.IGNORECASE)
    for rel_path in rel_paths:
        try:
            text = (Path(root) / rel_path).read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue
        for idx, line in enumerate(text.splitlines(), start=1):
            if pat.search(line):
                hits.append(SearchHit(path=rel_path, line_no=idx, line=line.strip()))
                if len(hits) >= limit:
                    return hits
    return hits
