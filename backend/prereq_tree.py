"""
Prerequisite expression tree.

A tree is one of three node kinds:
  Leaf(course_code)   the named course must be completed
  And(children)       every child must hold
  Or(children)        at least one child must hold

A course with no prerequisites has no tree (None).

Wire shape (what the course API serves and accepts):
  {"type": "COURSE", "courseCode": "CSC 1051"}
  {"type": "AND", "children": [...]}
  {"type": "OR", "children": [...]}
  {} or null for "no prerequisites"
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Leaf:
    course_code: str


@dataclass(frozen=True)
class And:
    children: tuple = ()


@dataclass(frozen=True)
class Or:
    children: tuple = ()


PrereqNode = Union[Leaf, And, Or]

_LEAF_TYPES = {"course", "leaf", "single"}


def tree_from_wire(raw) -> PrereqNode | None:
    """Decode the wire shape into a tree. Raises ValueError on unknown shapes."""
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValueError(f"Prerequisite node must be an object, got {type(raw).__name__}")
    if not raw:
        return None

    node_type = str(raw.get("type", "") or "").strip().lower()
    if node_type in _LEAF_TYPES or (not node_type and "courseCode" in raw):
        code = str(raw.get("courseCode", "") or "").strip()
        if not code:
            raise ValueError("Leaf node is missing courseCode")
        return Leaf(code)
    if node_type in ("and", "or"):
        children = raw.get("children") or []
        if not isinstance(children, list):
            raise ValueError(f"{node_type.upper()} children must be a list")
        decoded = tuple(
            child for child in (tree_from_wire(c) for c in children)
            if child is not None
        )
        return And(decoded) if node_type == "and" else Or(decoded)
    raise ValueError(f"Unknown prerequisite node type: {raw.get('type')!r}")


def tree_to_wire(node: PrereqNode | None) -> dict:
    if node is None:
        return {}
    if isinstance(node, Leaf):
        return {"type": "COURSE", "courseCode": node.course_code}
    if isinstance(node, And):
        return {"type": "AND", "children": [tree_to_wire(c) for c in node.children]}
    if isinstance(node, Or):
        return {"type": "OR", "children": [tree_to_wire(c) for c in node.children]}
    raise TypeError(f"Not a prerequisite node: {node!r}")


def tree_course_codes(node: PrereqNode | None) -> list[str]:
    """Every leaf code in the tree, first occurrence order, no duplicates."""
    codes: list[str] = []

    def _walk(n):
        if n is None:
            return
        if isinstance(n, Leaf):
            if n.course_code not in codes:
                codes.append(n.course_code)
        elif isinstance(n, (And, Or)):
            for child in n.children:
                _walk(child)
        else:
            raise TypeError(f"Not a prerequisite node: {n!r}")

    _walk(node)
    return codes
