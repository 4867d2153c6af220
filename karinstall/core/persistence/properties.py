"""
Properties file persistence — ordered, comment-preserving key=value files.

Karaf reads ``etc/startup.properties`` and ``etc/*.cfg`` as Java
properties. This reader keeps entry order and every comment or blank
line that precedes an entry, so rewriting a file touches only what
changed. Writes are atomic (write to temp file, then rename).
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Iterator
from pathlib import Path

from karinstall.core.errors import ManifestError

logger = logging.getLogger(__name__)

_COMMENT_CHARS = ("#", "!")
_SEPARATORS = ("=", ":")
_UNESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


class Properties:
    """An ordered property map that remembers comments.

    Comment and blank lines read from a file are attached to the entry
    that follows them; lines after the last entry are kept as a footer.
    A header is only written for files created from scratch.
    """

    def __init__(self, header: list[str] | None = None):
        self.header: list[str] = list(header or [])
        self.footer: list[str] = []
        self._values: dict[str, str] = {}
        self._comments: dict[str, list[str]] = {}

    # ── Mapping access ──────────────────────────────────────────

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._values))

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._values.get(key, default)

    def keys(self) -> list[str]:
        return list(self._values)

    def items(self) -> list[tuple[str, str]]:
        return list(self._values.items())

    def comments(self, key: str) -> list[str]:
        """Comment and blank lines written just before ``key``."""
        return list(self._comments.get(key, []))

    def put(self, key: str, value: str, comment: list[str] | None = None) -> None:
        """Set a value.

        ``comment`` is attached only when the key is new; an existing
        entry keeps its position and its comments.
        """
        if key not in self._values and comment:
            self._comments[key] = list(comment)
        self._values[key] = value

    # ── Load / save ─────────────────────────────────────────────

    def load(self, path: Path) -> None:
        """Replace the content with what ``path`` holds.

        Raises:
            ManifestError: If the file cannot be read.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestError(path, f"cannot read: {e}") from e

        self.header = []
        self._values.clear()
        self._comments.clear()
        pending: list[str] = []

        for logical in _logical_lines(text.splitlines()):
            stripped = logical.strip()
            if not stripped or stripped.startswith(_COMMENT_CHARS):
                pending.append(logical.rstrip())
                continue
            key, value = _split_entry(stripped)
            if pending:
                self._comments[key] = pending
                pending = []
            self._values[key] = value

        self.footer = pending
        logger.debug("Loaded %d properties from %s", len(self._values), path)

    def dumps(self) -> str:
        """Serialize to properties text."""
        lines: list[str] = list(self.header)
        for key, value in self._values.items():
            lines.extend(self._comments.get(key, []))
            lines.append(f"{_escape(key, is_key=True)}={_escape(value, is_key=False)}")
        lines.extend(self.footer)
        return "\n".join(lines) + "\n"

    def save(self, path: Path) -> None:
        """Write to ``path`` atomically.

        Raises:
            ManifestError: If the file cannot be written.
        """
        content = self.dumps()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            _fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".props_", suffix=".tmp")
            tmp = Path(tmp_path)
            try:
                with open(_fd, "w", encoding="utf-8") as fh:
                    fh.write(content)
                tmp.replace(path)
            except Exception:
                tmp.unlink(missing_ok=True)
                raise
        except OSError as e:
            raise ManifestError(path, f"cannot write: {e}") from e
        logger.debug("Saved %d properties to %s", len(self._values), path)


def _logical_lines(raw_lines: list[str]) -> Iterator[str]:
    """Join continuation lines (an odd number of trailing backslashes)."""
    buffer = ""
    for line in raw_lines:
        if buffer:
            line = line.lstrip()
        elif line.lstrip().startswith(_COMMENT_CHARS):
            yield line
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            buffer += line[:-1]
            continue
        yield buffer + line
        buffer = ""
    if buffer:
        yield buffer


def _split_entry(line: str) -> tuple[str, str]:
    """Split a logical line at the first unescaped separator."""
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in _SEPARATORS or ch.isspace():
            break
        i += 1

    key = line[:i]
    rest = line[i:].lstrip()
    if rest[:1] in _SEPARATORS:
        rest = rest[1:].lstrip()
    return _unescape(key), _unescape(rest)


def _unescape(text: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch != "\\" or i + 1 >= len(text):
            out.append(ch)
            i += 1
            continue
        nxt = text[i + 1]
        if nxt == "u" and i + 6 <= len(text):
            try:
                out.append(chr(int(text[i + 2:i + 6], 16)))
                i += 6
                continue
            except ValueError:
                pass
        out.append(_UNESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)


def _escape(text: str, is_key: bool) -> str:
    out: list[str] = []
    for i, ch in enumerate(text):
        if ch == "\\":
            out.append("\\\\")
        elif ch == "\t":
            out.append("\\t")
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\r":
            out.append("\\r")
        elif ch == " " and (is_key or i == 0):
            out.append("\\ ")
        elif is_key and ch in ("=", ":", "#", "!"):
            out.append("\\" + ch)
        else:
            out.append(ch)
    return "".join(out)
