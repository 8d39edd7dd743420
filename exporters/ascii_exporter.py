"""ASCII tree-style exporter for link graphs."""

from pathlib import Path
from typing import List, Set, Tuple

from graph.model import LinkGraph, Node, NodeColor


# Unicode tree characters
UNICODE_BRANCH = "├── "
UNICODE_LAST = "└── "
UNICODE_VERTICAL = "│   "
UNICODE_SPACE = "    "

# ASCII fallback characters
ASCII_BRANCH = "|-- "
ASCII_LAST = "\\-- "
ASCII_VERTICAL = "|   "
ASCII_SPACE = "    "

MARKERS = {
    NodeColor.GREEN: "",
    NodeColor.YELLOW: " [REMOTE]",
    NodeColor.GRAY: " [MISSING]",
}


def to_ascii(
    graph: LinkGraph,
    root: Path,
    style: str = "tree",
    include_missing: bool = True,
    include_remote: bool = True,
    show_all: bool = False,
) -> str:
    """
    Convert a link graph to ASCII tree representation.

    Each tree starts at a document no other document links to; groups of
    documents that only link to each other start at their first document.
    Nodes already on the current branch are marked with ``[*]`` and not
    expanded again.

    Args:
        graph: The link graph to export.
        root: Scanned root, used to shorten document paths.
        style: Output style - "tree" (Unicode) or "ascii" (pure ASCII).
        include_missing: If True, show gray (unresolved) targets.
        include_remote: If True, show yellow (external URL) targets.
        show_all: If True, include documents with no links. Default False.

    Returns:
        ASCII tree string.
    """
    if style == "ascii":
        chars = (ASCII_BRANCH, ASCII_LAST, ASCII_VERTICAL, ASCII_SPACE)
    else:
        chars = (UNICODE_BRANCH, UNICODE_LAST, UNICODE_VERTICAL, UNICODE_SPACE)

    selected = graph.filtered(
        include_missing=include_missing,
        include_remote=include_remote,
        show_all=show_all,
    )

    def sort_key(node_id: int) -> str:
        return _get_display(selected.get_node(node_id), root)

    lines: List[str] = []
    rendered: Set[int] = set()

    def render_tree(root_id: int) -> None:
        if lines:
            lines.append("")
        _render_node(
            graph=selected,
            node_id=root_id,
            root=root,
            prefix="",
            is_last=True,
            chars=chars,
            visited=set(),
            lines=lines,
            rendered=rendered,
            is_root=True,
        )

    for root_id in sorted(selected.get_roots(), key=sort_key):
        render_tree(root_id)

    # Components that are all cycles have no root: start them from their
    # first node with links until every node has been shown
    while len(rendered) < len(selected):
        remaining = [node.id for node in selected.nodes if node.id not in rendered]
        linking = [node_id for node_id in remaining if selected.get_targets(node_id)]
        render_tree(min(linking or remaining, key=sort_key))

    return "\n".join(lines)


def _render_node(
    graph: LinkGraph,
    node_id: int,
    root: Path,
    prefix: str,
    is_last: bool,
    chars: Tuple[str, str, str, str],
    visited: Set[int],
    lines: List[str],
    rendered: Set[int],
    is_root: bool = False,
) -> None:
    """
    Recursively render a node and the nodes it links to.

    Args:
        graph: The link graph.
        node_id: Current node to render.
        root: Scanned root.
        prefix: Current line prefix for indentation.
        is_last: Whether this is the last child of its parent.
        chars: Character set (branch, last, vertical, space).
        visited: Nodes on the current branch (to detect cycles).
        rendered: Nodes shown anywhere so far (modified in place).
        lines: Output lines list (modified in place).
        is_root: Whether this is a root-level node.
    """
    branch, last, vertical, space = chars
    node = graph.get_node(node_id)

    rendered.add(node_id)
    is_cycle = node_id in visited
    text = _get_display(node, root) + MARKERS[node.color] + (" [*]" if is_cycle else "")

    if is_root:
        lines.append(text)
    else:
        lines.append(f"{prefix}{last if is_last else branch}{text}")

    if is_cycle:
        return

    visited.add(node_id)

    children = sorted(graph.get_targets(node_id), key=lambda child: _get_display(graph.get_node(child), root))
    child_prefix = "" if is_root else prefix + (space if is_last else vertical)

    for index, child in enumerate(children):
        _render_node(
            graph=graph,
            node_id=child,
            root=root,
            prefix=child_prefix,
            is_last=index == len(children) - 1,
            chars=chars,
            visited=visited,
            lines=lines,
            rendered=rendered,
        )

    # Allow the same node under different branches; only cycles are cut
    visited.discard(node_id)


def _get_display(node: Node, root: Path) -> str:
    """Documents show their path under root, everything else its label."""
    if node.color is NodeColor.GREEN and node.file_path is not None:
        try:
            rel_path = Path(node.file_path).relative_to(Path(root).absolute())
            return str(rel_path).replace("\\", "/")
        except ValueError:
            return node.file_path.replace("\\", "/")
    return node.label
