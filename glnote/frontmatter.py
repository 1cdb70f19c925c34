"""Record the issue URL in a note's frontmatter without disturbing anything else."""

import re

ISSUE_URL_KEY = "gitlab_issue_url"

# Opening marker, then everything up to the first line that is exactly the closing marker.
_BLOCK = re.compile(r"\A---\n(?P<body>.*?)^---$", re.DOTALL | re.MULTILINE)
_KEY_LINE = re.compile(rf"^{ISSUE_URL_KEY}:.*$", re.MULTILINE)


def has_frontmatter_block(content: str) -> bool:
    return _BLOCK.match(content) is not None


def _issue_line(issue_url: str) -> str:
    return f'{ISSUE_URL_KEY}: "{issue_url}"'


def add_issue_url(content: str, issue_url: str) -> str:
    """Return ``content`` with ``gitlab_issue_url`` set to ``issue_url``.

    An existing key is rewritten on its own line; otherwise the key is appended
    as the last entry of the block. Notes without a block get a new one holding
    only that key. Other keys and the body are left byte-for-byte intact.
    """
    match = _BLOCK.match(content)
    if match is None:
        return f"---\n{_issue_line(issue_url)}\n---\n{content}"

    body = match.group("body")
    if _KEY_LINE.search(body):
        # A callable replacement keeps backslashes in the URL literal.
        body = _KEY_LINE.sub(lambda _: _issue_line(issue_url), body, count=1)
    else:
        body = f"{body}{_issue_line(issue_url)}\n"
    return f"---\n{body}---{content[match.end():]}"
