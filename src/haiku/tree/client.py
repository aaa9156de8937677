import logging
from collections.abc import AsyncGenerator
from pathlib import Path

from haiku.tree.config import AppConfig, Config
from haiku.tree.exceptions import NodeNotFoundError
from haiku.tree.paths import PathMaintenance
from haiku.tree.store.engine import Store
from haiku.tree.store.filters import FieldEquals
from haiku.tree.store.models.node import Node
from haiku.tree.store.repositories.node import NodeRepository
from haiku.tree.traversal import TreeTraversal

logger = logging.getLogger(__name__)


class HaikuTree:
    """High-level haiku-tree client."""

    def __init__(
        self,
        db_path: Path | None = None,
        config: AppConfig = Config,
        create: bool = False,
        read_only: bool = False,
    ):
        """Initialize the client with a database path.

        Args:
            db_path: Path to the database file. If None, uses config.storage.data_dir.
            config: Configuration to use. Defaults to global Config.
            create: Whether to create the database if it doesn't exist.
            read_only: Whether to refuse all writes.
        """
        self._config = config
        if db_path is None:
            db_path = self._config.storage.data_dir / "haiku.tree.lancedb"
        self.store = Store(
            db_path,
            config=self._config,
            create=create,
            read_only=read_only,
        )
        self.node_repository = NodeRepository(self.store)
        self.paths = PathMaintenance(self.node_repository)
        self.traversal = TreeTraversal(self.node_repository)

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):  # noqa: ARG002
        """Async context manager exit."""
        self.close()
        return False

    async def save(self, node: Node, force_cascade: bool = False) -> Node:
        """Write a node, keeping its path and its descendants' paths current.

        Args:
            node: The node to write. New nodes get an ID assigned.
            force_cascade: Recompute the children even if the node's path
                did not change.

        Returns:
            The written node.

        Raises:
            DanglingParentError: The parent does not exist; nothing is written.
            CycleError: The node would become its own ancestor; nothing is written.
            CascadeError: The node was written but a descendant could not be.
        """
        change = await self.paths.before_commit(node, force=force_cascade)
        await self.node_repository.commit(node)
        await self.paths.after_commit(node, change)
        return node

    async def create_node(
        self,
        parent_id: str | None = None,
        title: str | None = None,
        metadata: dict | None = None,
    ) -> Node:
        """Create a new node, as a root unless a parent is given."""
        node = Node(parent_id=parent_id, title=title, metadata=metadata or {})
        return await self.save(node)

    async def get_node(self, node_id: str) -> Node | None:
        """Get a node by its ID."""
        return await self.node_repository.get(node_id)

    async def _require(self, node_id: str) -> Node:
        node = await self.node_repository.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    async def update_node(
        self,
        node_id: str,
        title: str | None = None,
        metadata: dict | None = None,
    ) -> Node:
        """Update the title and/or metadata of a node."""
        node = await self._require(node_id)
        if title is not None:
            node.title = title
        if metadata is not None:
            node.metadata = metadata
        return await self.save(node)

    async def move_node(self, node_id: str, parent_id: str | None) -> Node:
        """Move a node under a new parent, or make it a root with None."""
        node = await self._require(node_id)
        logger.info(f"Moving {node_id} from {node.parent_id} to {parent_id}")
        node.parent_id = parent_id
        return await self.save(node)

    async def delete_node(self, node_id: str) -> bool:
        """Delete a single node.

        Children keep pointing at the deleted node; reparent or delete them
        first if that is not wanted.
        """
        return await self.node_repository.delete(node_id)

    async def list_nodes(
        self, limit: int | None = None, offset: int | None = None
    ) -> list[Node]:
        """List all nodes with optional pagination."""
        return await self.node_repository.list_all(limit=limit, offset=offset)

    async def roots(self) -> list[Node]:
        """List the roots of every tree in the store."""
        return await self.node_repository.find_where(FieldEquals("parent_id", None))

    async def repair(self, node_id: str, recursive: bool = True) -> int:
        """Recompute a node's path and force it down its subtree.

        Returns:
            Number of descendants written.
        """
        node = await self._require(node_id)
        await self.paths.recompute_path(node)
        await self.node_repository.commit(node)
        return await self.paths.force_cascade(node, recursive=recursive)

    async def rebuild(self) -> AsyncGenerator[str, None]:
        """Recompute the path of every node reachable from a root.

        Yields:
            The ID of each root once its tree has been rebuilt.
        """
        for root in await self.roots():
            assert root.id is not None
            await self.repair(root.id, recursive=True)
            yield root.id

    async def check(self) -> list[str]:
        """Find nodes whose ancestor ids disagree with their parent chain.

        Returns:
            IDs of inconsistent nodes, including nodes with a missing parent
            or a parent chain that loops.
        """
        nodes = {node.id: node for node in await self.node_repository.list_all()}
        inconsistent = []

        for node_id, node in nodes.items():
            chain: list[str] = []
            seen = {node_id}
            current = node
            valid = True
            while current.parent_id is not None:
                parent = nodes.get(current.parent_id)
                if parent is None or parent.id in seen:
                    valid = False
                    break
                assert parent.id is not None
                chain.append(parent.id)
                seen.add(parent.id)
                current = parent
            chain.reverse()

            if not valid or chain != node.ancestor_ids:
                assert node_id is not None
                inconsistent.append(node_id)

        return inconsistent

    def close(self):
        """Close the underlying store connection."""
        self.store.close()
