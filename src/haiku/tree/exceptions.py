class TreeError(Exception):
    """Base class for errors raised while maintaining or querying a tree."""

    pass


class NodeNotFoundError(TreeError):
    """Raised when a node id does not resolve to a stored node."""

    def __init__(self, node_id: str | None) -> None:
        self.node_id = node_id
        super().__init__(f"Node not found: {node_id}")


class DanglingParentError(TreeError):
    """Raised when a node references a parent that does not exist.

    The node is left untouched and must not be committed.
    """

    def __init__(self, node_id: str | None, parent_id: str) -> None:
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(
            f"Parent {parent_id} of node {node_id or '<new>'} does not exist"
        )


class CycleError(TreeError):
    """Raised when a parent assignment would make a node its own ancestor."""

    def __init__(self, node_id: str | None, parent_id: str | None) -> None:
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(
            f"Node {node_id} cannot be placed under {parent_id}: "
            "it would become its own ancestor"
        )


class CascadeError(TreeError):
    """Raised when a cascade fails to read or write a descendant.

    Descendants written before the failure keep their new paths; the rest are
    stale until the subtree is repaired. The underlying error is available as
    ``__cause__``.
    """

    def __init__(self, node_id: str, source_id: str) -> None:
        self.node_id = node_id
        self.source_id = source_id
        super().__init__(f"Cascade from {source_id} failed at node {node_id}")
