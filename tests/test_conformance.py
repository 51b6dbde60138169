"""
Compare against the git binary itself. Needs `git` on PATH and is opt-in:

    WILDIGNORE_CONFORMANCE=1 pytest -m conformance
"""
import os
import shutil
from pathlib import Path

import pytest

from wildignore.baseline import capture_with_git, parse_baseline, replay

pytestmark = [
    pytest.mark.conformance,
    pytest.mark.skipif(not os.environ.get("WILDIGNORE_CONFORMANCE"), reason="set WILDIGNORE_CONFORMANCE=1"),
    pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed"),
]

FIXTURES = Path(__file__).parent / "fixtures"


def _pairs():
    pairs = []
    for name in ("git-baseline.match", "git-baseline.nmatch"):
        for record in parse_baseline((FIXTURES / name).read_bytes()):
            pairs.append((record.pattern, record.value))
    return pairs


def test_fixtures_still_match_the_installed_git(tmp_path: Path):
    captured = list(parse_baseline(capture_with_git(_pairs(), tmp_path)))
    expected = [r for name in ("git-baseline.match", "git-baseline.nmatch")
                for r in parse_baseline((FIXTURES / name).read_bytes())]
    assert [r.is_match for r in captured] == [r.is_match for r in expected]


def test_live_git_agrees_with_us(tmp_path: Path):
    pairs = _pairs() + [
        (b"[[:upper:]]*", b"Makefile"),
        (b"[!a-z]*", b"README"),
        (b"**/x/**", b"a/x/b"),
        (b"x/**/", b"x/y"),
    ]
    report = replay(parse_baseline(capture_with_git(pairs, tmp_path)))
    assert report.errors == 0
    assert report.mismatches == []


def test_capture_keeps_undecodable_paths(tmp_path: Path):
    records = list(parse_baseline(capture_with_git([(b"caf*", b"caf\xe9"), (b"x", b"caf\xe9")], tmp_path)))
    assert [(r.value, r.is_match) for r in records] == [(b"caf\xe9", True), (b"caf\xe9", False)]
