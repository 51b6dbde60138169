"""

loading .gitignore style files into
ordered pattern lists

"""


# ignorefile.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict

from wildignore.errors import CompileError
from wildignore.models import Case
from wildignore.pattern import Pattern, basename_start, compile_pattern
from wildignore.wildmatch import as_bytes


class IgnoreRule(BaseModel):
    """A compiled pattern and the line it came from."""
    model_config = ConfigDict(frozen=True)

    pattern: Pattern
    source: str = ""
    line_number: int = 0
    raw: bytes = b""

    def describe(self) -> str:
        """`source:line:pattern`, the way `git check-ignore -v` prints it."""
        return f"{self.source}:{self.line_number}:{self.raw.decode('utf-8', 'backslashreplace')}"


class PatternList:
    """
    The patterns of one ignore file, in file order.

    `base` is the directory holding the file, relative to the walk root
    (empty for the root itself). Paths handed to `last_match` are relative to
    the root; only those below `base` can match.
    """

    def __init__(self, rules: Optional[List[IgnoreRule]] = None, base: Union[bytes, str] = b"",
                 source: str = ""):
        self.rules: List[IgnoreRule] = list(rules or [])
        self.base = as_bytes(base).strip(b"/")
        self.source = source

    def __len__(self) -> int:
        return len(self.rules)

    @classmethod
    def from_lines(cls, lines: Iterable[Union[bytes, str]], base: Union[bytes, str] = b"",
                   source: str = "", strict: bool = False) -> "PatternList":
        rules: List[IgnoreRule] = []
        for number, line in enumerate(lines, start=1):
            raw = as_bytes(line).rstrip(b"\n").rstrip(b"\r")
            if not raw.strip(b" ") or raw.startswith(b"#"):
                continue
            try:
                pattern = compile_pattern(raw)
            except CompileError as e:
                if strict:
                    raise
                logging.warning(f"Skipping {source or '<lines>'}:{number}: {e}")
                continue
            rules.append(IgnoreRule(pattern=pattern, source=source, line_number=number, raw=raw))
        logging.debug(f"Loaded {len(rules)} patterns from {source or '<lines>'}")
        return cls(rules, base=base, source=source)

    @classmethod
    def from_file(cls, path: Union[str, Path], base: Union[bytes, str] = b"", source: Optional[str] = None,
                  strict: bool = False) -> "PatternList":
        """Read an ignore file; a missing file yields an empty list."""
        path = Path(path)
        if source is None:
            source = str(path)
        if not path.is_file():
            return cls([], base=base, source=source)
        with path.open("rb") as fh:
            return cls.from_lines(fh.read().split(b"\n"), base=base, source=source, strict=strict)

    def _relative(self, path: bytes) -> Optional[bytes]:
        if not self.base:
            return path
        prefix = self.base + b"/"
        if not path.startswith(prefix):
            return None
        return path[len(prefix):]

    def last_match(self, path: Union[bytes, str], is_dir: bool = False,
                   case: Case = Case.SENSITIVE) -> Optional[IgnoreRule]:
        """The last rule in file order that matches `path`, or None."""
        rel = self._relative(as_bytes(path).strip(b"/"))
        if rel is None or not rel:
            return None
        start = basename_start(rel)
        for rule in reversed(self.rules):
            if rule.pattern.matches_path(rel, start, is_dir, case):
                return rule
        return None

    def is_ignored(self, path: Union[bytes, str], is_dir: bool = False,
                   case: Case = Case.SENSITIVE) -> Optional[bool]:
        """None when no rule applies, else whether the deciding rule excludes the path."""
        rule = self.last_match(path, is_dir, case)
        if rule is None:
            return None
        return not rule.pattern.is_negative


class IgnoreStack:
    """
    Pattern lists in increasing precedence: global excludes, info/exclude,
    then .gitignore files from the root downwards. The highest-precedence
    list that has a matching rule decides.
    """

    def __init__(self, lists: Optional[List[PatternList]] = None, case: Case = Case.SENSITIVE):
        self.lists: List[PatternList] = list(lists or [])
        self.case = case

    def push(self, patterns: PatternList) -> "IgnoreStack":
        """Return a new stack with `patterns` on top; the receiver is left untouched."""
        return IgnoreStack(self.lists + [patterns], case=self.case)

    def match(self, path: Union[bytes, str], is_dir: bool = False) -> Optional[IgnoreRule]:
        for patterns in reversed(self.lists):
            rule = patterns.last_match(path, is_dir, self.case)
            if rule is not None:
                return rule
        return None

    def is_ignored(self, path: Union[bytes, str], is_dir: bool = False) -> bool:
        rule = self.match(path, is_dir)
        return rule is not None and not rule.pattern.is_negative
