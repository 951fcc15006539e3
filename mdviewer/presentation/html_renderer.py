"""
HTML Renderer for mdviewer
Converts Markdown to a styled page that reloads itself on change events
"""

from __future__ import annotations

import json
import posixpath
import re
from html import unescape
from typing import Optional
from urllib.parse import quote, unquote

import markdown

from ..config import settings

URL_ATTR_RE = re.compile(r'(<(?:img|a)\b[^>]*?\b(?:src|href)=")([^"]*)(")')
EXTERNAL_URL_RE = re.compile(r'^(?:[a-zA-Z][a-zA-Z0-9+.-]*:|/|#)')
MARKDOWN_LINK_RE = re.compile(r'\.(?:md|markdown)(?:#.*)?$')


class HtmlRenderer:
    """HTML renderer with a light or dark theme"""

    def __init__(self, theme: Optional[str] = None):
        self.theme = theme or settings.css_theme

        # Configure markdown processor with common extensions
        self.md = markdown.Markdown(
            extensions=[
                'tables',           # Table support
                'fenced_code',      # ```code blocks
                'toc',              # Table of contents
                'codehilite',       # Syntax highlighting
            ],
            extension_configs={
                'codehilite': {
                    'css_class': 'highlight',
                    'use_pygments': False,  # Use CSS-only highlighting
                }
            }
        )

    def render(self, markdown_text: str, title: str = "mdviewer", doc_path: Optional[str] = None) -> str:
        """Convert Markdown to a complete HTML page.

        ``doc_path`` is the workspace-relative path of the rendered document;
        relative image and document links are resolved against its directory
        and the page reloads when that document changes.
        """
        self.md.reset()
        html_content = self.md.convert(markdown_text)
        if doc_path is not None:
            html_content = self._rewrite_urls(html_content, doc_path)

        return self._build_html_document(html_content, self._get_complete_css(), title, doc_path)

    def _rewrite_urls(self, html: str, doc_path: str) -> str:
        base = posixpath.dirname(doc_path)

        def repl(m: re.Match) -> str:
            url = m.group(2)
            if not url or EXTERNAL_URL_RE.match(url):
                return m.group(0)
            target, _, fragment = unescape(url).partition("#")
            target = unquote(target)
            rel = posixpath.normpath(posixpath.join(base, target))
            if m.group(0).startswith("<a") and MARKDOWN_LINK_RE.search(target):
                new_url = f"/view?path={quote(rel, safe='/')}"
                if fragment:
                    new_url += f"#{quote(fragment)}"
            else:
                new_url = f"/api/asset?path={quote(rel, safe='/')}"
            return f"{m.group(1)}{new_url}{m.group(3)}"

        return URL_ATTR_RE.sub(repl, html)

    def _build_html_document(self, content: str, css: str, title: str, doc_path: Optional[str]) -> str:
        javascript = self._get_live_reload_javascript(doc_path)

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{self._escape_html(title)}</title>
    <style>
{css}
    </style>
    <script>
{javascript}
    </script>
</head>
<body>
    <nav class="top-nav"><a href="/">Index</a></nav>
    <article class="markdown-body">
        {content}
    </article>
</body>
</html>"""

    def _escape_html(self, text: str) -> str:
        """Escape HTML entities"""
        return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")

    def _get_live_reload_javascript(self, doc_path: Optional[str]) -> str:
        """Reload the page when the change feed reports a relevant event"""
        # json.dumps gives a JS string literal; "</" is split so it cannot end the script tag
        watched = json.dumps(doc_path).replace("</", "<\\/")
        return """
(function() {
    'use strict';
    var watched = %s;

    function connect() {
        var proto = window.location.protocol === 'https:' ? 'wss:' : 'ws:';
        var ws = new WebSocket(proto + '//' + window.location.host + '/ws');

        ws.onmessage = function(msg) {
            var event;
            try {
                event = JSON.parse(msg.data);
            } catch (e) {
                return;
            }
            if (watched === null) {
                // Index page: the tree changed
                if (event.kind === 'added' || event.kind === 'removed') {
                    window.location.reload();
                }
            } else if (event.path === watched) {
                if (event.kind === 'changed') {
                    window.location.reload();
                } else if (event.kind === 'removed') {
                    window.location.href = '/';
                }
            }
        };

        ws.onclose = function() {
            setTimeout(connect, 2000);
        };
    }

    document.addEventListener('DOMContentLoaded', connect);
})();
""" % watched

    def _get_complete_css(self) -> str:
        """Generate complete CSS with theme"""
        return "\n".join([
            self._get_css_variables(),
            self._get_base_css(),
            self._get_theme_css(),
        ])

    def _get_css_variables(self) -> str:
        return """
:root {
    --font-size: 16px;
    --max-width: 860px;
    --line-height: 1.6;
    --border-radius: 6px;
    --spacing: 16px;
}
"""

    def _get_base_css(self) -> str:
        """Base CSS styles"""
        return """
/* Base styles */
.markdown-body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Helvetica, Arial, sans-serif;
    font-size: var(--font-size);
    line-height: var(--line-height);
    max-width: var(--max-width);
    margin: 0 auto;
    padding: 20px;
    word-wrap: break-word;
}

.top-nav {
    max-width: var(--max-width);
    margin: 0 auto;
    padding: 12px 20px 0 20px;
}

h1, h2, h3, h4, h5, h6 {
    margin-top: 24px;
    margin-bottom: var(--spacing);
    font-weight: 600;
    line-height: 1.25;
}

h1, h2 {
    border-bottom: 1px solid var(--border-color);
    padding-bottom: 8px;
}

code, pre {
    font-family: 'SF Mono', Monaco, 'Cascadia Code', 'Roboto Mono', Consolas, monospace;
    font-size: 85%;
}

code {
    padding: 2px 4px;
    border-radius: 3px;
    background-color: var(--code-bg);
}

pre {
    padding: var(--spacing);
    border-radius: var(--border-radius);
    overflow: auto;
    line-height: 1.45;
    background-color: var(--code-bg);
    border: 1px solid var(--border-color);
}

pre code {
    padding: 0;
    background: none;
}

img {
    max-width: 100%;
}

a {
    color: var(--accent-color);
    text-decoration: none;
}

a:hover {
    text-decoration: underline;
}

table {
    border-collapse: collapse;
    margin-bottom: var(--spacing);
}

th, td {
    border: 1px solid var(--border-color);
    padding: 6px 12px;
    text-align: left;
}

th {
    background-color: var(--code-bg);
}

blockquote {
    margin: 0 0 var(--spacing) 0;
    padding-left: var(--spacing);
    border-left: 4px solid var(--border-color);
    color: var(--muted-color);
}

hr {
    border: none;
    height: 1px;
    background-color: var(--border-color);
}

body {
    background-color: var(--bg-color);
    color: var(--text-color);
    margin: 0;
}
"""

    def _get_theme_css(self) -> str:
        """Theme colours"""
        themes = {
            "light": """
:root {
    --bg-color: #ffffff;
    --text-color: #24292f;
    --muted-color: #656d76;
    --accent-color: #0969da;
    --border-color: #d0d7de;
    --code-bg: #f6f8fa;
}
""",
            "dark": """
:root {
    --bg-color: #0d1117;
    --text-color: #e6edf3;
    --muted-color: #8d96a0;
    --accent-color: #2f81f7;
    --border-color: #30363d;
    --code-bg: #161b22;
}
""",
        }
        return themes.get(self.theme, themes["light"])
