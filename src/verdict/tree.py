"""Shared helpers for working with the Lark Tree/Token nodes built by parser_rd."""
from __future__ import annotations
from typing import List, Optional, TypeGuard
from typing_extensions import TypeAlias

from lark import Token, Tree

Node: TypeAlias = Tree | Token


def is_tree(node: Node) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: Node) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: Node) -> Optional[str]:
    return str(node.data) if is_tree(node) else None

def tree_children(node: Node) -> List[Node]:
    if not is_tree(node):
        return []

    return list(node.children)

def token_kind(node: Node) -> Optional[str]:
    return str(node.type) if is_token(node) else None

def pretty(node: Node, indent: str = "  ") -> str:
    """Indented outline of a literal tree (tokens inline with their kind)."""
    lines: List[str] = []

    def walk(n: Node, level: int) -> None:
        pad = indent * level
        if is_token(n):
            lines.append(f"{pad}{str(n.type).lower()}  {n.value}")
            return

        lines.append(f"{pad}{tree_label(n)}")
        for child in tree_children(n):
            walk(child, level + 1)

    walk(node, 0)
    return "\n".join(lines)
