import re

import pandas as pd

from normalizer import normalize_code
from prereq_tree import And, Leaf, Or, PrereqNode

# Case-insensitive connectives. ";" binds like AND.
AND_SPLIT = re.compile(r'\s*;\s*|\s+and\s+', re.IGNORECASE)
OR_SPLIT = re.compile(r'\s+or\s+', re.IGNORECASE)

# A code-looking token, used to tell grouping parens from annotation parens.
CODE_TOKEN_RE = re.compile(r'[A-Za-z]{2,5}\s*-?\s*\d{3,4}')
# Innermost parenthetical clause, e.g. "(may be concurrent)"
PAREN_RE = re.compile(r'\(([^()]*)\)')

# Grammar the parser does not model; such strings are rejected as a whole.
UNSUPPORTED_SIGNALS = [
    "permission",
    "consent",
    "standing",
    "instructor",
    "minimum grade",
    "placement",
    "co-req",
    "coreq",
]

NONE_VALUES = {"none", "none listed", "n/a", "nan", ""}


def _strip_annotations(s: str) -> str:
    """Remove parenthetical clauses that name no course code."""
    prev = None
    while prev != s:
        prev = s
        s = PAREN_RE.sub(
            lambda m: m.group(0) if CODE_TOKEN_RE.search(m.group(1)) else "",
            s,
        )
    return re.sub(r'\s{2,}', ' ', s).strip()


def _split_top_level(s: str, pattern: re.Pattern) -> list[str]:
    """Split on `pattern` only where it occurs outside parentheses."""
    parts: list[str] = []
    depth = 0
    start = 0
    pos = 0
    while pos < len(s):
        ch = s[pos]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(0, depth - 1)
        elif depth == 0:
            m = pattern.match(s, pos)
            if m and m.end() > pos:
                parts.append(s[start:pos])
                start = m.end()
                pos = m.end()
                continue
        pos += 1
    parts.append(s[start:])
    return [p.strip() for p in parts if p.strip()]


def _unwrap_parens(s: str) -> str:
    while s.startswith("(") and s.endswith(")"):
        depth = 0
        for i, ch in enumerate(s):
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0 and i != len(s) - 1:
                    return s
        s = s[1:-1].strip()
    return s


def _parse_expr(s: str) -> PrereqNode:
    s = _unwrap_parens(s)

    and_parts = _split_top_level(s, AND_SPLIT)
    if len(and_parts) > 1:
        return And(tuple(_parse_expr(p) for p in and_parts))

    or_parts = _split_top_level(s, OR_SPLIT)
    if len(or_parts) > 1:
        return Or(tuple(_parse_expr(p) for p in or_parts))

    code = normalize_code(s)
    if code is None:
        raise ValueError(f"Cannot parse course code from: {s!r}")
    return Leaf(code)


def parse_prereq_logic(prereq_str) -> PrereqNode | None:
    """
    Parses a catalog prerequisite_logic string into a prerequisite tree.

    Supported grammar:
      none / none listed       → None
      CODE                     → Leaf
      CODE; CODE  |  CODE and CODE   → And
      CODE or CODE             → Or
      (CODE or CODE) and CODE  → parenthesized groups nest

    AND binds looser than OR, so "CSC 1051; MAT 1500 or MAT 1505" reads as
    CSC 1051 AND (MAT 1500 OR MAT 1505). Parenthetical annotations such as
    "(may be concurrent)" are stripped before parsing.

    Raises ValueError for anything else (permission/standing clauses,
    free text).
    """
    if prereq_str is None or (isinstance(prereq_str, float) and pd.isna(prereq_str)):
        return None

    s = str(prereq_str).strip()
    if s.lower() in NONE_VALUES:
        return None

    s_lower = s.lower()
    for signal in UNSUPPORTED_SIGNALS:
        if signal in s_lower:
            raise ValueError(f"Unsupported prerequisite grammar: {s!r}")

    stripped = _strip_annotations(s)
    if not stripped:
        return None
    try:
        return _parse_expr(stripped)
    except ValueError as exc:
        raise ValueError(f"Unsupported prerequisite grammar: {s!r}") from exc
