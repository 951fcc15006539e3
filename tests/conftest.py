import pytest
from pathlib import Path


@pytest.fixture
def workspace(tmp_path) -> Path:
    root = tmp_path / "docs"
    root.mkdir()

    (root / "a.md").write_text("""---
title: Test Note
tags:
  - test
---

# Test Note

This is a test note content.
""", encoding="utf-8")

    (root / "x").mkdir()
    (root / "x" / "b.md").write_text("# Nested Note\n\nThis is a nested note.\n", encoding="utf-8")
    (root / "x" / "y").mkdir()
    (root / "x" / "y" / "c.md").write_text("# Deep\n", encoding="utf-8")
    (root / "x" / "diagram.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x01\xff")

    (root / "readme.txt").write_text("Not markdown", encoding="utf-8")
    (root / ".hidden").mkdir()
    (root / ".hidden" / "secret.md").write_text("# Hidden", encoding="utf-8")

    # Sibling directory sharing the root's name as a prefix
    (tmp_path / "docs-private").mkdir()
    (tmp_path / "docs-private" / "secret.md").write_text("# Private", encoding="utf-8")

    return root.resolve()
