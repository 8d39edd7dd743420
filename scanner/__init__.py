"""Scanner module for document discovery and link graph construction."""

from .discovery import iter_documents, find_documents
from .links import Link, LinkKind, extract_links, extract_targets
from .resolver import NodeRegistry, classify_target, document_label, transition
from .builder import build_graph, rebuild
from .errors import MapdownError, ScanError, InvalidLinkError, UnknownLabelError

__all__ = [
    "iter_documents",
    "find_documents",
    "Link",
    "LinkKind",
    "extract_links",
    "extract_targets",
    "NodeRegistry",
    "classify_target",
    "document_label",
    "transition",
    "build_graph",
    "rebuild",
    "MapdownError",
    "ScanError",
    "InvalidLinkError",
    "UnknownLabelError",
]
