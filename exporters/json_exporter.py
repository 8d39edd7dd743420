"""JSON exporter for link graphs (interchange format for graph renderers)."""

import json
from typing import Any, Dict

from graph.model import LinkGraph


def to_json(
    graph: LinkGraph,
    indent: int = 2,
    include_missing: bool = True,
    include_remote: bool = True,
    show_all: bool = True,
) -> str:
    """
    Convert a link graph to JSON.

    The document has a ``nodes`` list (``id``, ``label``, optional
    ``filePath``, ``color``) and an ``edges`` list (``from``, ``to``,
    ``arrows``, ``color``, ``dashes`` for unresolved targets), the shape
    vis-network style renderers load directly.

    Args:
        graph: The link graph to export.
        indent: JSON indentation level.
        include_missing: If True, include gray (unresolved) nodes.
        include_remote: If True, include yellow (external URL) nodes.
        show_all: If True, include nodes with no links.

    Returns:
        JSON string representation of the graph.
    """
    selected = graph.filtered(
        include_missing=include_missing,
        include_remote=include_remote,
        show_all=show_all,
    )
    data: Dict[str, Any] = selected.to_dict()
    return json.dumps(data, indent=indent)
