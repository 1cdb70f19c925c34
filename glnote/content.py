"""Turn a note's markdown into an issue description."""

import re

EMPTY_NOTE_PLACEHOLDER = "Created from Obsidian note (content was empty)"

_LEADING_BLOCK = re.compile(r"\A---\n.*?^---[ \t]*(?:\n|\Z)", re.DOTALL | re.MULTILINE)
_WIKILINK = re.compile(r"\[\[([^\]]+)\]\]")
_TAG = re.compile(r"#([A-Za-z0-9_-]+)")


def strip_frontmatter(content: str) -> str:
    """Drop a leading ``---`` metadata block, closing marker line included."""
    return _LEADING_BLOCK.sub("", content, count=1)


def transform_markdown(content: str) -> str:
    """Rewrite Obsidian-only syntax into plain markdown GitLab renders sensibly.

    ``[[Note]]`` becomes ``Note`` and ``#tag`` becomes an inline code span so
    GitLab does not read it as an issue reference or heading.
    """
    transformed = strip_frontmatter(content)
    transformed = _WIKILINK.sub(r"\1", transformed)
    transformed = _TAG.sub(r"`#\1`", transformed)
    transformed = transformed.strip()
    return transformed or EMPTY_NOTE_PLACEHOLDER
