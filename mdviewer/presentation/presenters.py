"""
Presenters for mdviewer
Convert file service results to Markdown for HTML display
"""

from __future__ import annotations

from typing import Any, List
from urllib.parse import quote

from ..models import DocumentContent, FileNode, NodeKind


class BasePresenter:
    """Base presenter with common formatting utilities"""

    def escape_markdown(self, text: str) -> str:
        """Escape markdown special characters"""
        if not text:
            return ""

        chars_to_escape = ['\\', '*', '_', '`', '[', ']', '(', ')', '#', '+', '-', '.', '!', '|']
        for char in chars_to_escape:
            text = text.replace(char, f'\\{char}')

        return text

    def view_url(self, rel_path: str) -> str:
        return f"/view?path={quote(rel_path, safe='/')}"


class TreePresenter(BasePresenter):
    """Convert the document tree to a nested Markdown list"""

    def to_markdown(self, tree: FileNode) -> str:
        header = f"# {self.escape_markdown(tree.name)}"
        if not tree.children:
            return f"{header}\n\n**No markdown documents found.**"

        lines: List[str] = [header, ""]
        self._append_children(tree, lines, depth=0)
        return "\n".join(lines)

    def _append_children(self, node: FileNode, lines: List[str], depth: int) -> None:
        indent = "    " * depth
        for child in node.children or []:
            name = self.escape_markdown(child.name)
            if child.kind is NodeKind.DIRECTORY:
                lines.append(f"{indent}- **{name}/**")
                self._append_children(child, lines, depth + 1)
            else:
                lines.append(f"{indent}- [{name}]({self.view_url(child.path)})")


class DocumentPresenter(BasePresenter):
    """Convert a document to Markdown, front-matter first as a table"""

    def to_markdown(self, doc: DocumentContent) -> str:
        if not doc.frontmatter:
            return doc.body

        parts = ["| Key | Value |", "|-----|-------|"]
        for key, value in doc.frontmatter.items():
            parts.append(f"| {self.escape_markdown(key)} | {self._format_value(value)} |")

        return "\n".join(parts) + "\n\n" + doc.body

    def _format_value(self, value: Any) -> str:
        if isinstance(value, (list, tuple)):
            return ", ".join(self._format_value(v) for v in value)
        if isinstance(value, dict):
            return ", ".join(f"{k}: {self._format_value(v)}" for k, v in value.items())
        return self.escape_markdown(str(value)).replace("\n", " ")
