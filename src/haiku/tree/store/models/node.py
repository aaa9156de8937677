from datetime import datetime

from pydantic import BaseModel, Field


class Node(BaseModel):
    """
    A document in the tree.

    Attributes:
        id: Unique identifier, assigned by the store on first commit
        parent_id: Id of the parent node, None for roots
        ancestor_ids: Ids of every ancestor, root first, excluding the node itself
        title: Optional human readable label
        metadata: Free-form document payload
    """

    id: str | None = None
    parent_id: str | None = None
    ancestor_ids: list[str] = []
    title: str | None = None
    metadata: dict = {}
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def depth(self) -> int:
        """Number of ancestors; 0 for roots."""
        return len(self.ancestor_ids)
