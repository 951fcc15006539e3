"""Front-matter extraction.

A document may open with a YAML block fenced by ``---`` lines::

    ---
    title: Hello
    ---

    # Body

``extract`` never raises. Whenever the block is missing, unterminated,
unparseable, or not a non-empty mapping, the whole raw text is returned as
the body and no front-matter is reported.
"""

from __future__ import annotations

import re

import yaml
from pydantic_core import PydanticSerializationError, to_json

from .logging_utils import setup_logger
from .models import DocumentContent

logger = setup_logger("mdviewer.content")

DELIMITER = "---"
LEADING_BLANK_LINES_RE = re.compile(r"\A(?:[ \t]*\r?\n)+")
LINE_END_RE = re.compile(r"(?<=\n)")


def _is_delimiter(line: str) -> bool:
    return line.rstrip(" \t\r\n") == DELIMITER


def parse_frontmatter(block: str) -> dict | None:
    """Parse a front-matter block, None unless it is a non-empty mapping."""
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        logger.debug(f"Front-matter is not valid YAML: {e}")
        return None
    if not isinstance(data, dict) or not data:
        return None
    data = {str(k): v for k, v in data.items()}
    try:
        to_json(data)
    except (PydanticSerializationError, ValueError) as e:
        # Binary values that are not UTF-8, self-referencing anchors
        logger.debug(f"Front-matter has values that cannot be sent as JSON: {e}")
        return None
    return data


def extract(raw_text: str, path: str = "") -> DocumentContent:
    lines = LINE_END_RE.split(raw_text)
    if not lines or not _is_delimiter(lines[0]):
        return DocumentContent(path=path, body=raw_text)

    closing = next((i for i in range(1, len(lines)) if _is_delimiter(lines[i])), None)
    if closing is None:
        logger.warning(f"Unterminated front-matter in {path or '<text>'}, using raw text")
        return DocumentContent(path=path, body=raw_text)

    frontmatter = parse_frontmatter("".join(lines[1:closing]))
    if frontmatter is None:
        return DocumentContent(path=path, body=raw_text)

    rest = "".join(lines[closing + 1:])
    return DocumentContent(
        path=path,
        body=LEADING_BLANK_LINES_RE.sub("", rest),
        frontmatter=frontmatter,
    )
