from haiku.tree.client import HaikuTree
from haiku.tree.exceptions import (
    CascadeError,
    CycleError,
    DanglingParentError,
    NodeNotFoundError,
    TreeError,
)
from haiku.tree.store.models.node import Node

__all__ = [
    "CascadeError",
    "CycleError",
    "DanglingParentError",
    "HaikuTree",
    "Node",
    "NodeNotFoundError",
    "TreeError",
]
