"""
Replaying `git check-ignore` transcripts against our matcher.

A transcript is a sequence of two-line records:

    <pattern> <path>
    <check-ignore -v -n output for that path>

The second line starts with "::\\t" when git reported no match. Two files are
usually captured, one holding only matches and one holding only non-matches,
so a record that contradicts its file is a broken baseline rather than a
matcher bug.
"""
import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set, Tuple, Union

from git import Repo
from pydantic import BaseModel

from wildignore.errors import BaselineError, CompileError, MatchDepthExceeded
from wildignore.models import Case, MatchRecord
from wildignore.pattern import basename_start, compile_pattern

NO_MATCH_PREFIX = b"::\t"


class BaselineReport(BaseModel):
    total: int = 0
    correct: int = 0
    errors: int = 0
    mismatches: List[MatchRecord] = []

    @property
    def agreement(self) -> float:
        """Fraction of records where we agree with git."""
        if not self.total:
            return 1.0
        return self.correct / self.total


def parse_baseline(data: bytes) -> Iterator[MatchRecord]:
    lines = iter(data.splitlines())
    for header in lines:
        if not header.strip():
            continue
        pattern, sep, value = header.partition(b" ")
        if not sep:
            raise BaselineError(f"record header without a path: {header!r}")
        verdict = next(lines, None)
        if verdict is None:
            return
        yield MatchRecord(pattern=pattern, value=value.lstrip(), is_match=not verdict.startswith(NO_MATCH_PREFIX))


def read_baseline(path: Union[str, Path], expected: bool) -> List[MatchRecord]:
    """Parse a transcript whose records must all have `is_match == expected`."""
    records = []
    seen: Set[MatchRecord] = set()
    for record in parse_baseline(Path(path).read_bytes()):
        if record in seen:
            raise BaselineError(f"duplicate entry in {path}: {record.pattern!r} {record.value!r}")
        if record.is_match != expected:
            raise BaselineError(
                f"{path} should only contain {'matches' if expected else 'non-matches'}, "
                f"check the baseline and the git version: {record.pattern!r} {record.value!r}")
        seen.add(record)
        records.append(record)
    return records


def replay(records: Iterable[MatchRecord], case: Case = Case.SENSITIVE,
           report: Optional[BaselineReport] = None) -> BaselineReport:
    """Run each record through the matcher as a file path (is_dir=False)."""
    if report is None:
        report = BaselineReport()
    for record in records:
        report.total += 1
        try:
            pattern = compile_pattern(record.pattern)
            actual = pattern.matches_path(record.value, basename_start(record.value), False, case)
        except (CompileError, MatchDepthExceeded) as e:
            logging.warning(f"Baseline entry {record.pattern!r} {record.value!r} failed: {e}")
            report.errors += 1
            continue
        if actual == record.is_match:
            report.correct += 1
        else:
            report.mismatches.append(record)
    return report


def compare_baseline(inputs: Iterable[Tuple[Union[str, Path], bool]],
                     case: Case = Case.SENSITIVE) -> BaselineReport:
    """Replay every (transcript file, expected outcome) pair into one report."""
    report = BaselineReport()
    for path, expected in inputs:
        replay(read_baseline(path, expected), case, report)
    logging.info(f"Baseline agreement {report.correct}/{report.total} ({report.errors} errors)")
    return report


def capture_with_git(pairs: Iterable[Tuple[bytes, bytes]], workdir: Union[str, Path]) -> bytes:
    """
    Produce a transcript by asking a real git for each (pattern, path) pair.

    Every pair gets a fresh single-line .gitignore in a repository at
    `workdir`; paths do not need to exist.
    """
    workdir = Path(workdir)
    repo = Repo.init(workdir)
    gitignore = workdir / ".gitignore"
    out: List[bytes] = []
    for pattern, value in pairs:
        gitignore.write_bytes(pattern + b"\n")
        _, stdout, _ = repo.git.check_ignore(
            "-v", "-n", "--no-index", os.fsdecode(value),
            with_extended_output=True, with_exceptions=False)
        out.append(pattern + b" " + value)
        out.append(os.fsencode(stdout))
    return b"\n".join(out) + b"\n"
