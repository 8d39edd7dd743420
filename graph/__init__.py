"""Graph data model for document link relationships."""

from .model import Edge, LinkGraph, Node, NodeColor

__all__ = ["Edge", "LinkGraph", "Node", "NodeColor"]
