"""Mermaid flowchart exporter for link graphs."""

import re
from pathlib import Path
from typing import Dict, List, Optional

from graph.model import LinkGraph, Node, NodeColor


# Stroke colors per node provenance
NODE_STYLES = {
    NodeColor.GREEN: "stroke:#2e7d32",
    NodeColor.YELLOW: "stroke:#f9a825,stroke-dasharray: 5 5",
    NodeColor.GRAY: "stroke:#9e9e9e,stroke-dasharray: 5 5",
}

NODE_SUFFIXES = {
    NodeColor.GREEN: "",
    NodeColor.YELLOW: " [REMOTE]",
    NodeColor.GRAY: " [MISSING]",
}


def to_mermaid(
    graph: LinkGraph,
    root: Path,
    orientation: str = "LR",
    group_by_directory: bool = False,
    include_missing: bool = True,
    include_remote: bool = True,
    show_all: bool = True,
) -> str:
    """
    Convert a link graph to Mermaid flowchart syntax.

    Args:
        graph: The link graph to export.
        root: Scanned root, used to shorten document paths.
        orientation: Flowchart orientation (LR, TD, TB, RL, BT).
        group_by_directory: If True, group documents by top-level directory.
        include_missing: If True, show gray (unresolved) nodes.
        include_remote: If True, show yellow (external URL) nodes.
        show_all: If True, include nodes with no links.

    Returns:
        Mermaid flowchart string.
    """
    selected = graph.filtered(
        include_missing=include_missing,
        include_remote=include_remote,
        show_all=show_all,
    )

    lines = [f"flowchart {orientation}"]

    if group_by_directory:
        lines.extend(_generate_grouped_nodes(selected, root))
    else:
        lines.extend(_generate_flat_nodes(selected, root))

    lines.append("")
    for source, target, edge in selected.iter_edges():
        arrow = "-.->" if edge.dashes else "-->"
        lines.append(f"    {_node_id(source)} {arrow} {_node_id(target)}")

    return "\n".join(lines)


def _generate_flat_nodes(graph: LinkGraph, root: Path) -> List[str]:
    """Generate flat (non-grouped) node definitions."""
    lines = []
    for node in graph.nodes:
        lines.extend(_node_lines(node, root, "    "))
    return lines


def _generate_grouped_nodes(graph: LinkGraph, root: Path) -> List[str]:
    """Generate node definitions in subgraphs, documents by top-level directory."""
    lines = []

    groups: Dict[str, List[Node]] = {}
    for node in graph.nodes_with_color(NodeColor.GREEN):
        groups.setdefault(_top_directory(node, root), []).append(node)

    for group_name in sorted(groups):
        lines.append(f"    subgraph {_sanitize_id(group_name)}[{group_name}]")
        for node in groups[group_name]:
            lines.extend(_node_lines(node, root, "        "))
        lines.append("    end")
        lines.append("")

    for color, subgraph in ((NodeColor.GRAY, "missing[Missing References]"),
                            (NodeColor.YELLOW, "remote[Remote References]")):
        nodes = graph.nodes_with_color(color)
        if not nodes:
            continue
        lines.append(f"    subgraph {subgraph}")
        for node in nodes:
            lines.extend(_node_lines(node, root, "        "))
        lines.append("    end")
        lines.append("")

    return lines


def _node_lines(node: Node, root: Path, indent: str) -> List[str]:
    node_id = _node_id(node)
    label = _get_label(node, root) + NODE_SUFFIXES[node.color]
    return [
        f'{indent}{node_id}["{_escape(label)}"]',
        f"{indent}style {node_id} {NODE_STYLES[node.color]}",
    ]


def _node_id(node: Node) -> str:
    return f"n{node.id}"


def _top_directory(node: Node, root: Path) -> str:
    rel_path = _relative(node.file_path, root)
    if rel_path is None:
        return "external"
    return rel_path.parts[0] if len(rel_path.parts) > 1 else "root"


def _relative(file_path: Optional[str], root: Path) -> Optional[Path]:
    if file_path is None:
        return None
    try:
        return Path(file_path).relative_to(Path(root).absolute())
    except ValueError:
        return None


def _sanitize_id(value: str) -> str:
    """Sanitize a string to be a valid Mermaid ID."""
    sanitized = re.sub(r"[/\\.\-]", "_", value)
    sanitized = re.sub(r"[^a-zA-Z0-9_]", "", sanitized)
    if sanitized and not sanitized[0].isalpha():
        sanitized = "g_" + sanitized
    return sanitized or "unknown"


def _escape(label: str) -> str:
    return label.replace('"', "#quot;")


def _get_label(node: Node, root: Path) -> str:
    """Documents show their path under root, everything else its label."""
    if node.color is NodeColor.GREEN:
        rel_path = _relative(node.file_path, root)
        if rel_path is not None:
            return str(rel_path).replace("\\", "/")
    return node.label
