from haiku.tree.store.repositories.node import NodeRepository

__all__ = ["NodeRepository"]
