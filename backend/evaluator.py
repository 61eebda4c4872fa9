import sys

from prereq_tree import And, Leaf, Or, PrereqNode


def prereqs_satisfied(
    node: PrereqNode | None,
    satisfied_codes: set,
    course_code: str | None = None,
) -> bool:
    """
    Returns True if the prerequisite tree is satisfied by the given set of codes.

    No tree → True. And() with no children → True, Or() with no children →
    False; the asymmetry is intentional.

    `course_code` names the course that owns the tree. A leaf naming that
    course, or a node already on the current evaluation path, is a cycle and
    evaluates False instead of recursing.
    """
    if node is None:
        return True

    visited_codes: set[str] = {course_code} if course_code else set()
    on_path: set[int] = set()

    def _eval(n) -> bool:
        if isinstance(n, Leaf):
            if n.course_code in visited_codes:
                print(
                    f"[WARN] Cyclic prerequisite: {course_code} requires itself",
                    file=sys.stderr,
                )
                return False
            return n.course_code in satisfied_codes

        if id(n) in on_path:
            print(f"[WARN] Cyclic prerequisite tree under {course_code or 'unknown course'}", file=sys.stderr)
            return False
        on_path.add(id(n))
        try:
            if isinstance(n, And):
                return all(_eval(child) for child in n.children)
            if isinstance(n, Or):
                return any(_eval(child) for child in n.children)
        finally:
            on_path.discard(id(n))
        raise TypeError(f"Not a prerequisite node: {n!r}")

    return _eval(node)


def build_prereq_check_string(
    node: PrereqNode | None,
    completed: set,
    implied: set | None = None,
) -> str:
    """
    Returns a human-readable string showing which prereqs are satisfied and how.
    Examples:
      "CSC 1051 ✓"
      "CSC 1051 ✓; MAT 1500 (implied) ✓"
      "MAT 1500 ✓ (or MAT 1505)"
    """
    implied = implied or set()

    def label_code(code: str) -> str:
        if code in completed:
            return f"{code} ✓"
        if code in implied:
            return f"{code} (implied) ✓"
        return f"{code} ✗"

    def _render(n, nested: bool) -> str:
        if isinstance(n, Leaf):
            return label_code(n.course_code)
        if isinstance(n, And):
            text = "; ".join(_render(c, True) for c in n.children)
            return f"({text})" if nested and len(n.children) > 1 else text
        if isinstance(n, Or):
            known = completed | implied
            met = [c for c in n.children if prereqs_satisfied(c, known)]
            if met:
                others = [_render(c, True) for c in n.children if c is not met[0]]
                head = _render(met[0], True)
                return f"{head} (or {' or '.join(o.rstrip(' ✗') for o in others)})" if others else head
            text = " or ".join(_render(c, True) for c in n.children)
            return f"({text})" if nested and len(n.children) > 1 else text
        raise TypeError(f"Not a prerequisite node: {n!r}")

    if node is None:
        return "No prerequisites"
    return _render(node, False)
