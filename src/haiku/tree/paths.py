import logging
from dataclasses import dataclass, replace
from typing import Protocol

from haiku.tree.exceptions import (
    CascadeError,
    CycleError,
    DanglingParentError,
    TreeError,
)
from haiku.tree.store.filters import FieldEquals, Predicate
from haiku.tree.store.models.node import Node

logger = logging.getLogger(__name__)


class TreeStore(Protocol):
    """The document store operations the tree engines need."""

    async def get(self, node_id: str) -> Node | None: ...

    async def find_where(
        self, *predicates: Predicate, limit: int | None = None
    ) -> list[Node]: ...

    async def commit(self, node: Node) -> Node: ...


@dataclass(frozen=True)
class PathChange:
    """Outcome of recomputing a node's ancestor ids.

    Attributes:
        node_id: Id of the recomputed node (None before its first commit)
        previous: Ancestor ids held before recomputation
        current: Ancestor ids after recomputation
        forced: Children must be recomputed even if the path is unchanged
    """

    node_id: str | None
    previous: tuple[str, ...]
    current: tuple[str, ...]
    forced: bool = False

    @property
    def changed(self) -> bool:
        return self.previous != self.current

    @property
    def needs_cascade(self) -> bool:
        return self.changed or self.forced


class PathMaintenance:
    """Keeps every node's ancestor ids in line with its parent chain.

    ``before_commit`` must run before a node is written and ``after_commit``
    after the write succeeded, passing along the change returned by the
    former. Moving a node costs one read and one write per descendant.
    """

    def __init__(self, repository: TreeStore) -> None:
        self.repository = repository

    async def recompute_path(self, node: Node) -> PathChange:
        """Set the node's ancestor ids from its parent.

        Raises:
            DanglingParentError: The parent does not exist.
            CycleError: The node would become its own ancestor.
        """
        previous = tuple(node.ancestor_ids)

        if node.parent_id is None:
            current: tuple[str, ...] = ()
        else:
            if node.id is not None and node.parent_id == node.id:
                raise CycleError(node.id, node.parent_id)

            parent = await self.repository.get(node.parent_id)
            if parent is None:
                raise DanglingParentError(node.id, node.parent_id)
            assert parent.id is not None, "Stored nodes always have an ID"

            if node.id is not None and node.id in parent.ancestor_ids:
                raise CycleError(node.id, node.parent_id)

            current = (*parent.ancestor_ids, parent.id)

        node.ancestor_ids = list(current)
        change = PathChange(node_id=node.id, previous=previous, current=current)
        if change.changed:
            logger.debug(f"Path of {node.id or '<new>'} changed to {list(current)}")
        return change

    async def cascade(self, node: Node, change: PathChange) -> int:
        """Recompute and write the descendants of a committed node.

        Only generations whose path actually changed (or was forced) are
        descended into.

        Returns:
            Number of descendants written.

        Raises:
            CascadeError: A descendant could not be written.
            CycleError: The subtree loops back on itself.
        """
        if not change.needs_cascade:
            return 0
        assert node.id is not None, "Node must be committed before cascading"

        written = await self._cascade(node, visited={node.id}, recursive=False)
        if written:
            logger.info(f"Updated paths of {written} descendants of {node.id}")
        return written

    async def force_cascade(self, node: Node, recursive: bool = False) -> int:
        """Recompute the children of a node even if its own path is unchanged.

        With ``recursive`` every generation below is recomputed as well,
        which repairs subtrees left stale by an interrupted cascade or an
        import that bypassed the engine.

        Returns:
            Number of descendants written.
        """
        assert node.id is not None, "Node must be committed before cascading"

        logger.info(f"Forcing path recomputation below {node.id}")
        return await self._cascade(node, visited={node.id}, recursive=recursive)

    async def before_commit(self, node: Node, force: bool = False) -> PathChange:
        """Hook to run before a node is written."""
        change = await self.recompute_path(node)
        if force:
            change = replace(change, forced=True)
        return change

    async def after_commit(self, node: Node, change: PathChange) -> int:
        """Hook to run once the node returned by ``before_commit`` is written."""
        if change.node_id is None:
            # First commit: the id was assigned by the store
            change = replace(change, node_id=node.id)
        return await self.cascade(node, change)

    async def _cascade(self, node: Node, visited: set[str], recursive: bool) -> int:
        assert node.id is not None
        written = 0

        try:
            children = await self.repository.find_where(
                FieldEquals("parent_id", node.id)
            )
        except TreeError:
            raise
        except Exception as e:
            logger.error(f"Cascade could not read the children of {node.id}: {e}")
            raise CascadeError(node.id, node.parent_id or node.id) from e

        for child in children:
            assert child.id is not None
            if child.id in visited:
                raise CycleError(child.id, node.id)
            visited.add(child.id)

            try:
                change = await self.recompute_path(child)
                await self.repository.commit(child)
            except TreeError:
                raise
            except Exception as e:
                logger.error(f"Cascade from {node.id} failed at {child.id}: {e}")
                raise CascadeError(child.id, node.id) from e
            written += 1

            if recursive or change.needs_cascade:
                written += await self._cascade(child, visited, recursive)

        return written
