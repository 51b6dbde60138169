# pattern.py
from __future__ import annotations
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from wildignore import wildmatch
from wildignore.wildmatch import as_bytes
from wildignore.errors import CompileError
from wildignore.models import Case, Mode


class Pattern(BaseModel):
    """
    One compiled ignore-file line.

    `text` is the glob body with the '!' / '/' markers removed; escapes are
    kept and only resolved while matching. `mode` records what the markers
    meant.
    """
    model_config = ConfigDict(frozen=True)

    text: bytes
    mode: Mode = Mode.NONE

    @classmethod
    def from_bytes(cls, line: Union[bytes, str]) -> "Pattern":
        return compile_pattern(line)

    @property
    def is_negative(self) -> bool:
        return bool(self.mode & Mode.NEGATIVE)

    def matches_path(self, path: Union[bytes, str], basename_start: Optional[int] = None,
                     is_dir: bool = False, case: Case = Case.SENSITIVE) -> bool:
        return matches_path(self, path, basename_start, is_dir, case)

    def __str__(self) -> str:
        prefix = ("!" if self.mode & Mode.NEGATIVE else "") + ("/" if self.mode & Mode.ABSOLUTE else "")
        suffix = "/" if self.mode & Mode.MUST_BE_DIR else ""
        return prefix + self.text.decode("utf-8", "backslashreplace") + suffix


def _escaped(text: bytes, pos: int) -> bool:
    """True if text[pos] is preceded by an odd number of backslashes."""
    count = 0
    while pos > 0 and text[pos - 1] == wildmatch.BACKSLASH:
        count += 1
        pos -= 1
    return count % 2 == 1


def _trim_trailing_spaces(line: bytes) -> bytes:
    last_space = None
    i = 0
    while i < len(line):
        c = line[i]
        if c == 0x20:
            if last_space is None:
                last_space = i
        elif c == wildmatch.BACKSLASH:
            i += 1
            if i == len(line):
                # a dangling backslash keeps whatever precedes it
                return line
            last_space = None
        else:
            last_space = None
        i += 1
    if last_space is None:
        return line
    return line[:last_space]


def _has_unescaped_slash(text: bytes) -> bool:
    i = 0
    while i < len(text):
        if text[i] == wildmatch.BACKSLASH:
            i += 2
            continue
        if text[i] == wildmatch.SLASH:
            return True
        i += 1
    return False


def compile_pattern(line: Union[bytes, str]) -> Pattern:
    """
    Turn one ignore-file line (newline already removed) into a Pattern.

    Raises CompileError for empty lines, lines that are nothing but markers
    ('!', '/', '!/', '//'), dangling escapes and broken character classes.
    """
    raw = as_bytes(line)
    if not raw:
        raise CompileError("empty pattern line", raw)

    text = _trim_trailing_spaces(raw)
    mode = Mode.NONE

    if text.startswith(b"!"):
        mode |= Mode.NEGATIVE
        text = text[1:]
    if text.startswith(b"/"):
        mode |= Mode.ABSOLUTE
        text = text[1:]
    if text.endswith(b"/") and not _escaped(text, len(text) - 1):
        mode |= Mode.MUST_BE_DIR
        text = text[:-1]

    if not text:
        raise CompileError("pattern is empty once its markers are removed", raw)
    if not _has_unescaped_slash(text):
        mode |= Mode.NO_SUB_DIR

    problem = wildmatch.syntax_error(text)
    if problem:
        raise CompileError(problem, raw)

    return Pattern(text=text, mode=mode)


def basename_start(path: Union[bytes, str]) -> Optional[int]:
    """Offset of the first byte after the last '/', or None for a single-segment path."""
    pos = as_bytes(path).rfind(b"/")
    if pos < 0:
        return None
    return pos + 1


def matches_path(pattern: Pattern, path: Union[bytes, str], basename_start: Optional[int] = None,
                 is_dir: bool = False, case: Case = Case.SENSITIVE) -> bool:
    """
    Decide whether `pattern` structurally matches `path`.

    Patterns without a '/' (and without a leading anchor) look only at the
    basename, which is how they match at any depth. Everything else is
    matched against the full path from its first byte. NEGATIVE is reported
    as a match like any other pattern; callers decide what it means.
    """
    if pattern.mode & Mode.MUST_BE_DIR and not is_dir:
        return False

    value = as_bytes(path)
    if pattern.mode & Mode.NO_SUB_DIR and not pattern.mode & Mode.ABSOLUTE:
        if basename_start is not None:
            value = value[basename_start:]

    return wildmatch.glob_match(pattern.text, value, case)
