"""
Wildcard matching for ignore-file patterns.

This is the glob dialect git uses for .gitignore lines, always in "pathname"
mode:
  - '?' matches one byte that is not '/'.
  - '*' matches any run of bytes that does not contain '/'.
  - '**' matches across '/' but only when it is a whole path segment
    ('**/x', 'x/**', 'x/**/y'); anywhere else it is an ordinary '*'.
  - '[...]' matches one byte (never '/') from a set, with '!' or '^'
    negation, ranges and POSIX classes such as [:alpha:].
  - '\\x' matches 'x' literally.

Everything works on bytes. Case folding is ASCII only.
"""
from typing import Callable, Dict, Optional, Tuple, Union

from wildignore.errors import MatchDepthExceeded
from wildignore.models import Case

# Deepest nesting of '*' backtracking before we give up on a pattern.
MAX_WILDCARD_DEPTH = 200

SLASH = ord("/")
BACKSLASH = ord("\\")
STAR = ord("*")
QUESTION = ord("?")
OPEN_BRACKET = ord("[")
CLOSE_BRACKET = ord("]")
COLON = ord(":")
DASH = ord("-")
BANG = ord("!")
CARET = ord("^")


def _is_upper(c: int) -> bool:
    return 65 <= c <= 90


def _is_lower(c: int) -> bool:
    return 97 <= c <= 122


def _is_alpha(c: int) -> bool:
    return _is_upper(c) or _is_lower(c)


def _is_digit(c: int) -> bool:
    return 48 <= c <= 57


def _is_graph(c: int) -> bool:
    return 33 <= c <= 126


POSIX_CLASSES: Dict[bytes, Callable[[int], bool]] = {
    b"alnum": lambda c: _is_alpha(c) or _is_digit(c),
    b"alpha": _is_alpha,
    b"blank": lambda c: c in (9, 32),
    b"cntrl": lambda c: c < 32 or c == 127,
    b"digit": _is_digit,
    b"graph": _is_graph,
    b"lower": _is_lower,
    b"print": lambda c: 32 <= c <= 126,
    b"punct": lambda c: _is_graph(c) and not (_is_alpha(c) or _is_digit(c)),
    b"space": lambda c: c in (9, 10, 11, 12, 13, 32),
    b"upper": _is_upper,
    b"xdigit": lambda c: _is_digit(c) or 65 <= (c & ~32) <= 70,
}


def _lower(c: int) -> int:
    return c + 32 if _is_upper(c) else c


def _upper(c: int) -> int:
    return c - 32 if _is_lower(c) else c


def _same(c: int, p: int, fold: bool) -> bool:
    return c == p or (fold and _lower(c) == _lower(p))


def _in_range(c: int, low: int, high: int, fold: bool) -> bool:
    if low <= c <= high:
        return True
    if fold:
        return low <= _lower(c) <= high or low <= _upper(c) <= high
    return False


def as_bytes(value: Union[bytes, str]) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def _match_class(pat: bytes, p: int, c: int, fold: bool) -> Tuple[Optional[int], bool]:
    """
    Evaluate the bracket expression starting at pat[p] == '[' against byte c.

    Returns (index after the closing ']', matched), or (None, False) when the
    class is unterminated or names an unknown [:class:].
    """
    plen = len(pat)
    p += 1
    if p < plen and pat[p] in (BANG, CARET):
        negated = True
        p += 1
    else:
        negated = False

    matched = False
    prev: Optional[int] = None
    first = True
    while True:
        if p >= plen:
            return None, False
        pc = pat[p]
        if pc == CLOSE_BRACKET and not first:
            break
        first = False

        if pc == BACKSLASH:
            p += 1
            if p >= plen:
                return None, False
            pc = pat[p]
            if _same(c, pc, fold):
                matched = True
            prev = pc
        elif pc == DASH and prev is not None and p + 1 < plen and pat[p + 1] != CLOSE_BRACKET:
            p += 1
            high = pat[p]
            if high == BACKSLASH:
                p += 1
                if p >= plen:
                    return None, False
                high = pat[p]
            if _in_range(c, prev, high, fold):
                matched = True
            prev = None
        elif pc == OPEN_BRACKET and p + 1 < plen and pat[p + 1] == COLON:
            start = p + 2
            end = pat.find(b"]", start)
            if end < 0:
                return None, False
            if end - start < 1 or pat[end - 1] != COLON:
                # no closing ":]", so this '[' is just a member of the set
                if _same(c, pc, fold):
                    matched = True
                prev = pc
            else:
                name = pat[start:end - 1]
                check = POSIX_CLASSES.get(name)
                if check is None:
                    return None, False
                if check(c):
                    matched = True
                elif fold and name in (b"upper", b"lower") and _is_alpha(c):
                    matched = True
                p = end
                prev = None
        else:
            if _same(c, pc, fold):
                matched = True
            prev = pc
        p += 1

    return p + 1, matched != negated


def syntax_error(pattern_text: Union[bytes, str]) -> Optional[str]:
    """Return a description of the first structural problem in the pattern, or None."""
    pat = as_bytes(pattern_text)
    p = 0
    while p < len(pat):
        pc = pat[p]
        if pc == BACKSLASH:
            if p + 1 >= len(pat):
                return "dangling escape at end of pattern"
            p += 2
        elif pc == OPEN_BRACKET:
            end, _ = _match_class(pat, p, 0, False)
            if end is None:
                return f"unterminated or invalid character class at offset {p}"
            p = end
        else:
            p += 1
    return None


def glob_match(pattern_text: Union[bytes, str], candidate: Union[bytes, str],
               case: Case = Case.SENSITIVE) -> bool:
    """
    Return True if the whole candidate is matched by the whole pattern.

    Backtracking positions are memoized on (pattern_pos, text_pos), so the
    work is polynomial even for patterns full of wildcards. Raises
    MatchDepthExceeded if '*' recursion nests deeper than MAX_WILDCARD_DEPTH.
    """
    pat = as_bytes(pattern_text)
    text = as_bytes(candidate)
    fold = case == Case.FOLD
    plen, tlen = len(pat), len(text)
    memo: Dict[Tuple[int, int], bool] = {}

    def match(p: int, t: int, depth: int) -> bool:
        key = (p, t)
        if key in memo:
            return memo[key]
        if depth > MAX_WILDCARD_DEPTH:
            raise MatchDepthExceeded(
                f"wildcards nest deeper than {MAX_WILDCARD_DEPTH} in {pat!r}")
        result = match_from(p, t, depth)
        memo[key] = result
        return result

    def match_from(p: int, t: int, depth: int) -> bool:
        while p < plen:
            pc = pat[p]
            if pc == STAR:
                return match_star(p, t, depth)
            if t >= tlen:
                return False
            c = text[t]
            if pc == BACKSLASH:
                p += 1
                if p >= plen or not _same(c, pat[p], fold):
                    return False
            elif pc == QUESTION:
                if c == SLASH:
                    return False
            elif pc == OPEN_BRACKET:
                end, matched = _match_class(pat, p, c, fold)
                if end is None or not matched or c == SLASH:
                    return False
                p = end
                t += 1
                continue
            elif not _same(c, pc, fold):
                return False
            p += 1
            t += 1
        return t == tlen

    def match_star(p: int, t: int, depth: int) -> bool:
        start = p
        while p < plen and pat[p] == STAR:
            p += 1

        crosses_slash = False
        if p - start > 1:
            opens_segment = start == 0 or pat[start - 1] == SLASH
            closes_segment = (p == plen or pat[p] == SLASH
                              or (pat[p] == BACKSLASH and p + 1 < plen and pat[p + 1] == SLASH))
            crosses_slash = opens_segment and closes_segment

        if p == plen:
            return crosses_slash or text.find(b"/", t) < 0

        # "**/" may also stand for no directory at all
        if crosses_slash and pat[p] == SLASH and match(p + 1, t, depth + 1):
            return True

        for i in range(t, tlen):
            if match(p, i, depth + 1):
                return True
            if not crosses_slash and text[i] == SLASH:
                return False
        return False

    return match(0, 0, 0)
