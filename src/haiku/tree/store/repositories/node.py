import json
from datetime import datetime
from uuid import uuid4

from haiku.tree.store.engine import NodeRecord, Store
from haiku.tree.store.filters import Predicate, combine_filters
from haiku.tree.store.models.node import Node


class NodeRepository:
    """Repository for Node operations.

    Implements the document store contract the tree engines rely on:
    point lookups, filtered reads and atomic single-document upserts.
    """

    def __init__(self, store: Store) -> None:
        self.store = store

    def _to_node(self, record: NodeRecord) -> Node:
        return Node(
            id=record.id,
            parent_id=record.parent_id,
            ancestor_ids=list(record.ancestor_ids or []),
            title=record.title,
            metadata=json.loads(record.metadata) if record.metadata else {},
            created_at=datetime.fromisoformat(record.created_at)
            if record.created_at
            else datetime.now(),
            updated_at=datetime.fromisoformat(record.updated_at)
            if record.updated_at
            else datetime.now(),
        )

    async def get(self, node_id: str) -> Node | None:
        """Get a node by its ID."""
        escaped = node_id.replace("'", "''")
        results = list(
            self.store.nodes_table.search()
            .where(f"id = '{escaped}'")
            .limit(1)
            .to_pydantic(NodeRecord)
        )

        if not results:
            return None

        return self._to_node(results[0])

    async def find_where(
        self, *predicates: Predicate, limit: int | None = None
    ) -> list[Node]:
        """Get all nodes matching every predicate, in no particular order.

        With no predicates every node matches.
        """
        if any(predicate.matches_nothing for predicate in predicates):
            return []

        query = self.store.nodes_table.search()
        where = combine_filters(*predicates)
        if where:
            query = query.where(where)
        # LanceDB returns at most 10 rows by default; limit(None) lifts the cap
        query = query.limit(limit)

        return [self._to_node(record) for record in query.to_pydantic(NodeRecord)]

    async def commit(self, node: Node) -> Node:
        """Insert or update a node in a single write.

        Nodes without an ID get a new one.
        """
        self.store._assert_writable()

        now = datetime.now()
        if node.id is None:
            node.id = str(uuid4())
            node.created_at = now
        node.updated_at = now

        record = NodeRecord(
            id=node.id,
            parent_id=node.parent_id,
            ancestor_ids=list(node.ancestor_ids),
            title=node.title,
            metadata=json.dumps(node.metadata),
            created_at=node.created_at.isoformat(),
            updated_at=now.isoformat(),
        )

        (
            self.store.nodes_table.merge_insert("id")
            .when_matched_update_all()
            .when_not_matched_insert_all()
            .execute([record])
        )

        return node

    async def delete(self, node_id: str) -> bool:
        """Delete a node by its ID. Children are left in place."""
        self.store._assert_writable()

        node = await self.get(node_id)
        if node is None:
            return False

        escaped = node_id.replace("'", "''")
        self.store.nodes_table.delete(f"id = '{escaped}'")
        return True

    async def list_all(
        self, limit: int | None = None, offset: int | None = None
    ) -> list[Node]:
        """List all nodes with optional pagination."""
        query = self.store.nodes_table.search()

        if offset is not None:
            query = query.offset(offset)
        query = query.limit(limit)

        return [self._to_node(record) for record in query.to_pydantic(NodeRecord)]

    async def count(self) -> int:
        """Count total number of nodes."""
        return self.store.nodes_table.count_rows()
