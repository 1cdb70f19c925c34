"""Notes on disk: the document store, metadata hint and active-note lookup."""

import asyncio
import logging
from pathlib import Path

import frontmatter

from glnote.errors import DocumentReadError, LocalWriteError

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".md"


class Vault:
    def __init__(self, root: Path | str = ".") -> None:
        self.root = Path(root).expanduser().resolve()

    def resolve(self, note: Path | str | None = None) -> Path | None:
        """Return the note to act on, or None when there is no active note.

        An explicit path is taken relative to the vault root. Without one, the
        most recently modified markdown file in the vault is the active note.
        """
        if note is not None:
            path = Path(note).expanduser()
            if not path.is_absolute():
                path = self.root / path
            return path if path.is_file() else None

        candidates = [
            p for p in self.root.rglob(f"*{NOTE_SUFFIX}") if p.is_file() and not _is_hidden(p, self.root)
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda p: p.stat().st_mtime)

    @staticmethod
    def is_note(path: Path) -> bool:
        return path.suffix == NOTE_SUFFIX

    async def read(self, path: Path) -> str:
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentReadError(f"Could not read {path.name}: {exc}") from exc

    async def write(self, path: Path, text: str) -> None:
        try:
            await asyncio.to_thread(path.write_text, text, encoding="utf-8")
        except OSError as exc:
            raise LocalWriteError(f"Could not write {path.name}: {exc}") from exc
        logger.debug("Wrote %s", path)

    def has_metadata_block(self, path: Path) -> bool:
        """Index-style hint; the frontmatter editor's own detection is authoritative."""
        try:
            return bool(frontmatter.checks(path.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError):
            return False


def _is_hidden(path: Path, root: Path) -> bool:
    # Skips .obsidian/, .trash/ and friends.
    return any(part.startswith(".") for part in path.relative_to(root).parts)
