from collections import deque
from collections.abc import AsyncGenerator
from enum import Enum

from haiku.tree.exceptions import NodeNotFoundError
from haiku.tree.paths import TreeStore
from haiku.tree.store.filters import ArrayContains, FieldEquals, FieldIn
from haiku.tree.store.models.node import Node


class TraversalOrder(Enum):
    """Order in which ``traverse`` visits a subtree."""

    DEPTH_FIRST = "depth_first"
    BREADTH_FIRST = "breadth_first"


class TreeTraversal:
    """Tree queries answered from parent ids and materialized paths.

    Every query reads fields already on the node or issues a single filtered
    read; the store is never walked recursively. Results come back in store
    order except for ``ancestors``, which is root first.
    """

    def __init__(self, repository: TreeStore) -> None:
        self.repository = repository

    @staticmethod
    def is_root(node: Node) -> bool:
        return node.parent_id is None

    async def is_leaf(self, node: Node) -> bool:
        if node.id is None:
            return True
        children = await self.repository.find_where(
            FieldEquals("parent_id", node.id), limit=1
        )
        return not children

    @staticmethod
    def depth(node: Node) -> int:
        return node.depth

    async def children_of(self, node_id: str) -> list[Node]:
        return await self.repository.find_where(FieldEquals("parent_id", node_id))

    async def parent_of(self, node: Node) -> Node | None:
        if node.parent_id is None:
            return None
        return await self.repository.get(node.parent_id)

    async def root(self, node: Node) -> Node:
        """Return the root of the node's tree, the node itself for roots."""
        if not node.ancestor_ids:
            return node
        root_id = node.ancestor_ids[0]
        root = await self.repository.get(root_id)
        if root is None:
            raise NodeNotFoundError(root_id)
        return root

    async def ancestors(self, node: Node) -> list[Node]:
        """Return the node's ancestors, root first."""
        found = await self.repository.find_where(FieldIn("id", node.ancestor_ids))
        position = {node_id: i for i, node_id in enumerate(node.ancestor_ids)}
        return sorted(found, key=lambda ancestor: position[ancestor.id])  # type: ignore[index]

    async def ancestors_and_self(self, node: Node) -> list[Node]:
        return [*await self.ancestors(node), node]

    @staticmethod
    def is_ancestor_of(node: Node, other: Node) -> bool:
        return node.id is not None and node.id in other.ancestor_ids

    async def descendants(self, node: Node) -> list[Node]:
        if node.id is None:
            return []
        return await self.repository.find_where(ArrayContains("ancestor_ids", node.id))

    async def descendants_and_self(self, node: Node) -> list[Node]:
        return [node, *await self.descendants(node)]

    @staticmethod
    def is_descendant_of(node: Node, other: Node) -> bool:
        return other.id is not None and other.id in node.ancestor_ids

    async def siblings_and_self(self, node: Node) -> list[Node]:
        """Return every node sharing this node's parent, itself included.

        Roots are siblings of all other roots.
        """
        return await self.repository.find_where(FieldEquals("parent_id", node.parent_id))

    async def siblings(self, node: Node) -> list[Node]:
        return [
            sibling
            for sibling in await self.siblings_and_self(node)
            if sibling.id != node.id
        ]

    async def traverse(
        self, node: Node, order: TraversalOrder = TraversalOrder.DEPTH_FIRST
    ) -> AsyncGenerator[Node, None]:
        """Walk the node and its subtree, node first.

        The subtree is fetched with one ``descendants`` query and arranged in
        memory from parent ids. Siblings are visited oldest first.
        """
        children: dict[str | None, list[Node]] = {}
        for descendant in await self.descendants(node):
            children.setdefault(descendant.parent_id, []).append(descendant)
        for siblings in children.values():
            siblings.sort(key=lambda sibling: (sibling.created_at, sibling.id or ""))

        if order is TraversalOrder.BREADTH_FIRST:
            queue = deque([node])
            while queue:
                current = queue.popleft()
                yield current
                queue.extend(children.get(current.id, []))
        else:
            stack = [node]
            while stack:
                current = stack.pop()
                yield current
                stack.extend(reversed(children.get(current.id, [])))
