"""Mapping of link targets to stable node identities."""

import logging
import os
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import urlsplit

from graph.model import Node, NodeColor
from .errors import InvalidLinkError, UnknownLabelError

logger = logging.getLogger(__name__)


URL_SCHEMES = {"http", "https"}


class TargetKind(str, Enum):
    DOCUMENT = "document"  # path ending with the document extension
    EXTERNAL = "external"  # absolute http(s) URL
    LOCAL = "local"        # bare name, e.g. a wiki link


@dataclass(frozen=True)
class LinkTarget:
    """A classified link target."""

    kind: TargetKind
    label: str
    path: Optional[str] = None


def document_label(name: str) -> str:
    """
    Return the identity label for a document path or bare name.

    The label is the base name with its last extension stripped, lowercased.
    Documents with the same name in different directories therefore share a
    label, and so a node.
    """
    return Path(name).stem.lower()


def classify_target(raw: str, source_file: Path, extension: str = ".md") -> LinkTarget:
    """
    Classify a raw link target.

    Args:
        raw: The target string as written in the document.
        source_file: The document containing the link.
        extension: The recognized document extension.

    Returns:
        A LinkTarget. DOCUMENT targets carry the absolute path the link
        points at, relative links being taken from the linking document's
        directory. EXTERNAL targets use the lowercased hostname as both
        label and path. LOCAL targets carry no path. The DOCUMENT path is
        informational only: the builder resolves document targets by label
        and never hands this path to the registry.

    Raises:
        InvalidLinkError: If the target looks like a URL but is not a
                          valid absolute http(s) URL.
    """
    if raw.endswith(extension):
        resolved = os.path.normpath(os.path.join(os.path.dirname(os.fspath(source_file)), raw))
        return LinkTarget(TargetKind.DOCUMENT, document_label(resolved), resolved)

    if raw.startswith("http"):
        hostname = _hostname(raw)
        return LinkTarget(TargetKind.EXTERNAL, hostname, hostname)

    return LinkTarget(TargetKind.LOCAL, document_label(raw))


def _hostname(url: str) -> str:
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError as exc:
        raise InvalidLinkError(url, str(exc)) from exc

    if parts.scheme.lower() not in URL_SCHEMES:
        raise InvalidLinkError(url, "not an absolute http(s) URL")
    if not hostname:
        raise InvalidLinkError(url, "no hostname")
    return hostname


def transition(
    current: Optional[Node],
    node_id: int,
    label: str,
    file_path: Optional[str],
    color: NodeColor,
) -> Node:
    """
    Compute the node a label resolves to after one more reference.

    - No current node: a new node with ``node_id``.
    - Current node is a placeholder and a path is supplied: the placeholder
      is upgraded to the supplied path and color, keeping its id.
    - Otherwise the current node is returned unchanged; the first resolved
      identity wins.

    ``node_id`` is only used when a node is created.
    """
    if current is None:
        return Node(id=node_id, label=label, color=color, file_path=file_path)
    if current.is_placeholder and file_path is not None:
        return replace(current, file_path=file_path, color=color)
    return current


class NodeRegistry:
    """
    Label-keyed node table for a single graph build.

    Ids are allocated densely from 0 in order of first reference.
    """

    def __init__(self):
        self._nodes: Dict[str, Node] = {}

    def resolve(
        self,
        label: str,
        file_path: Optional[str] = None,
        color: NodeColor = NodeColor.GRAY,
    ) -> int:
        """
        Resolve a label to a node id, creating or upgrading the node.

        Args:
            label: Identity label; compared case-insensitively.
            file_path: Path backing the node, None for a bare reference.
            color: Color to use if a node is created or upgraded.

        Returns:
            The id of the node the label resolves to.
        """
        key = label.lower()
        current = self._nodes.get(key)
        node = transition(current, len(self._nodes), key, file_path, color)
        if node is not current:
            if current is not None:
                logger.debug("Upgraded node %r from %s to %s", key, current.color, node.color)
            self._nodes[key] = node
        return node.id

    def color_of(self, label: str) -> NodeColor:
        """
        Return the color of the node a label currently resolves to.

        Raises:
            UnknownLabelError: If the label was never resolved.
        """
        key = label.lower()
        try:
            return self._nodes[key].color
        except KeyError:
            raise UnknownLabelError(key) from None

    def nodes(self) -> List[Node]:
        """Return all nodes ordered by id."""
        return sorted(self._nodes.values(), key=lambda node: node.id)

    def __contains__(self, label: str) -> bool:
        return label.lower() in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)
