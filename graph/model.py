"""Graph data model for storing document link relationships."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple


class NodeColor(str, Enum):
    """Provenance of a node."""

    GREEN = "green"    # scanned local document
    YELLOW = "yellow"  # external URL
    GRAY = "gray"      # referenced, never found

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Node:
    """
    A vertex in the link graph.

    Nodes without a ``file_path`` are placeholders: something links to them
    but no matching document was scanned.
    """

    id: int
    label: str
    color: NodeColor = NodeColor.GRAY
    file_path: Optional[str] = None

    @property
    def is_placeholder(self) -> bool:
        return self.file_path is None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "label": self.label}
        if self.file_path is not None:
            data["filePath"] = self.file_path
        data["color"] = self.color.value
        return data


@dataclass(frozen=True)
class Edge:
    """A directed 'source links to target' relationship."""

    source: int
    target: int
    color: NodeColor
    arrows: str = "to"

    @property
    def dashes(self) -> bool:
        """Edges pointing at unresolved targets are drawn dashed."""
        return self.color is NodeColor.GRAY

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "from": self.source,
            "to": self.target,
            "arrows": self.arrows,
            "color": {"color": self.color.value},
        }
        if self.dashes:
            data["dashes"] = True
        return data


class LinkGraph:
    """
    A directed graph of documents and the targets they link to.

    Nodes are kept in id order. Edges are kept in insertion order; the graph
    itself does not deduplicate them, the builder decides.
    """

    def __init__(self, nodes: Optional[List[Node]] = None, edges: Optional[List[Edge]] = None):
        self._nodes: Dict[int, Node] = {}
        self._by_label: Dict[str, int] = {}
        self._edges: List[Edge] = []
        for node in nodes or []:
            self.add_node(node)
        for edge in edges or []:
            self.add_edge(edge)

    @property
    def nodes(self) -> List[Node]:
        """Return all nodes ordered by id."""
        return [self._nodes[node_id] for node_id in sorted(self._nodes)]

    @property
    def edges(self) -> List[Edge]:
        """Return all edges in insertion order."""
        return list(self._edges)

    def add_node(self, node: Node) -> None:
        """Add a node, replacing any node with the same id."""
        previous = self._nodes.get(node.id)
        if previous is not None and previous.label != node.label:
            del self._by_label[previous.label]
        self._nodes[node.id] = node
        self._by_label[node.label] = node.id

    def add_edge(self, edge: Edge) -> None:
        """
        Add a directed edge.

        Both endpoints must already be nodes of the graph.
        """
        for node_id in (edge.source, edge.target):
            if node_id not in self._nodes:
                raise KeyError(f"edge endpoint {node_id} is not a node of this graph")
        self._edges.append(edge)

    def get_node(self, node_id: int) -> Node:
        return self._nodes[node_id]

    def find(self, label: str) -> Optional[Node]:
        """Look up a node by label (case-insensitive)."""
        node_id = self._by_label.get(label.lower())
        if node_id is None:
            return None
        return self._nodes[node_id]

    def get_targets(self, source: int) -> Set[int]:
        """Get ids of all nodes the source node links to."""
        return {e.target for e in self._edges if e.source == source}

    def get_sources(self, target: int) -> Set[int]:
        """Get ids of all nodes that link to the target node."""
        return {e.source for e in self._edges if e.target == target}

    def get_roots(self) -> Set[int]:
        """
        Get nodes that are never linked to by another node.

        Self-links do not count as incoming links.
        """
        linked = {e.target for e in self._edges if e.source != e.target}
        return set(self._nodes) - linked

    def get_connected_nodes(self) -> Set[int]:
        """Get nodes with at least one incoming or outgoing edge."""
        connected: Set[int] = set()
        for edge in self._edges:
            connected.add(edge.source)
            connected.add(edge.target)
        return connected

    def nodes_with_color(self, color: NodeColor) -> List[Node]:
        return [node for node in self.nodes if node.color is color]

    def iter_edges(self) -> Iterator[Tuple[Node, Node, Edge]]:
        """Iterate over edges as (source node, target node, edge) tuples."""
        for edge in self._edges:
            yield self._nodes[edge.source], self._nodes[edge.target], edge

    def filtered(
        self,
        include_missing: bool = True,
        include_remote: bool = True,
        show_all: bool = True,
    ) -> "LinkGraph":
        """
        Return a copy restricted to the selected kinds of node.

        Args:
            include_missing: Keep gray (unresolved) nodes.
            include_remote: Keep yellow (external URL) nodes.
            show_all: Keep nodes left without any edge after filtering.

        Returns:
            A new LinkGraph; node ids are unchanged.
        """
        dropped = set()
        if not include_missing:
            dropped.add(NodeColor.GRAY)
        if not include_remote:
            dropped.add(NodeColor.YELLOW)

        kept = {node_id for node_id, node in self._nodes.items() if node.color not in dropped}
        edges = [e for e in self._edges if e.source in kept and e.target in kept]

        if not show_all:
            connected: Set[int] = set()
            for edge in edges:
                connected.update((edge.source, edge.target))
            kept &= connected

        return LinkGraph([self._nodes[node_id] for node_id in sorted(kept)], edges)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        """Return the ``{nodes, edges}`` interchange representation."""
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self._edges],
        }

    def __len__(self) -> int:
        """Return the number of nodes in the graph."""
        return len(self._nodes)

    def __contains__(self, label: object) -> bool:
        """Check if a node with this label is in the graph."""
        return isinstance(label, str) and label.lower() in self._by_label

    def __repr__(self) -> str:
        counts = {color: 0 for color in NodeColor}
        for node in self._nodes.values():
            counts[node.color] += 1
        return (
            f"LinkGraph(nodes={len(self._nodes)}, edges={len(self._edges)}, "
            f"documents={counts[NodeColor.GREEN]}, external={counts[NodeColor.YELLOW]}, "
            f"missing={counts[NodeColor.GRAY]})"
        )
