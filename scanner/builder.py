"""Graph builder that orchestrates scanning and graph construction."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from graph.model import Edge, LinkGraph, NodeColor
from .discovery import DEFAULT_EXTENSION, find_documents
from .errors import InvalidLinkError, ScanError
from .links import extract_links
from .resolver import NodeRegistry, TargetKind, classify_target, document_label

logger = logging.getLogger(__name__)


def read_document(path: Path) -> str:
    """
    Read a document as UTF-8 text.

    Undecodable bytes are replaced rather than rejected.

    Raises:
        ScanError: If the file cannot be read.
    """
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise ScanError(f"cannot read {path}: {exc}", path) from exc


def build_graph(
    root: Path,
    extension: str = DEFAULT_EXTENSION,
    exclude_dirs: Optional[Set[str]] = None,
    max_depth: Optional[int] = None,
    keep_duplicates: bool = False,
) -> LinkGraph:
    """
    Scan a document tree and build its link graph.

    Every document is registered as a green node before any link is read, so
    a link to a scanned document always finds it regardless of scan order.
    Links that match no document become gray placeholder nodes; links to
    http(s) URLs become yellow nodes labelled with the hostname.

    Args:
        root: Root directory to scan.
        extension: Document file extension (default: .md).
        exclude_dirs: Directory names to exclude (default: none).
        max_depth: Maximum directory depth to scan.
        keep_duplicates: If True, every occurrence of a link produces an
                         edge. By default there is at most one edge per
                         (source, target) pair.

    Returns:
        LinkGraph with all documents, link targets and links.

    Raises:
        ScanError: If any directory or document cannot be read. No partial
                   graph is returned.
    """
    registry = NodeRegistry()
    documents = find_documents(
        root=root,
        extension=extension,
        exclude_dirs=exclude_dirs,
        max_depth=max_depth,
    )

    for document in documents:
        registry.resolve(document_label(document.name), str(document), NodeColor.GREEN)

    edges: List[Edge] = []
    seen: Set[Tuple[int, int]] = set()
    skipped = 0

    for document in documents:
        source_id = registry.resolve(document_label(document.name), str(document), NodeColor.GREEN)
        text = read_document(document)
        link_count = 0

        for link in extract_links(text):
            try:
                target = classify_target(link.target, document, extension)
            except InvalidLinkError as exc:
                logger.warning("Skipping link in %s: %s", document, exc)
                skipped += 1
                continue

            if target.kind is TargetKind.EXTERNAL:
                target_id = registry.resolve(target.label, target.path, NodeColor.YELLOW)
            else:
                color = registry.color_of(target.label) if target.label in registry else NodeColor.GRAY
                target_id = registry.resolve(target.label, None, color)

            link_count += 1
            if not keep_duplicates:
                if (source_id, target_id) in seen:
                    continue
                seen.add((source_id, target_id))
            edges.append(Edge(source_id, target_id, registry.color_of(target.label)))

        logger.debug("Found %d links in %s", link_count, document)

    graph = LinkGraph(registry.nodes(), edges)
    logger.info(
        "Built graph for %s: %d documents, %d nodes, %d edges, %d links skipped",
        root, len(documents), len(graph), len(edges), skipped,
    )
    return graph


def rebuild(root: Path, **options: Any) -> Dict[str, List[Dict[str, Any]]]:
    """
    Rescan root from scratch and return the ``{nodes, edges}`` document.

    Accepts the keyword options of build_graph.
    """
    return build_graph(Path(root), **options).to_dict()
