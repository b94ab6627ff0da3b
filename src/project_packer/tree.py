"""
Directory tree rendering for bundle headers.

Builds the box-drawing "Project Structure" block from a list of relative
paths. Order follows first appearance of each segment, never sorting, so the
same input order always gives the same text.
"""

from __future__ import annotations

from collections.abc import Iterable

from .utils import normalize_path

_Node = dict[str, "_Node"]


def build_tree(paths: Iterable[str]) -> _Node:
    """
    Build a nested insertion-ordered mapping keyed by path segment.

    Args:
        paths: Relative file paths

    Returns:
        Root node; leaves map to empty dicts
    """
    root: _Node = {}
    for path in paths:
        node = root
        for segment in normalize_path(path).split("/"):
            if not segment:
                continue
            node = node.setdefault(segment, {})
    return root


def _render_node(node: _Node, prefix: str, lines: list[str]) -> None:
    keys = list(node)
    for i, key in enumerate(keys):
        is_last = i == len(keys) - 1
        connector = "└── " if is_last else "├── "
        lines.append(f"{prefix}{connector}{key}\n")
        if node[key]:
            extension = "    " if is_last else "│   "
            _render_node(node[key], prefix + extension, lines)


def render_tree(paths: Iterable[str]) -> str:
    """
    Render paths as a text tree.

    A synthetic `Root/` line is printed when more than one path is given.
    Every rendered line ends with a newline; empty input renders as `""`.

    Args:
        paths: Relative file paths, in the order they should appear

    Returns:
        The tree block
    """
    path_list = list(paths)
    tree = build_tree(path_list)
    if not tree:
        return ""

    lines: list[str] = []
    if len(path_list) > 1:
        lines.append("Root/\n")
    _render_node(tree, "", lines)
    return "".join(lines)
