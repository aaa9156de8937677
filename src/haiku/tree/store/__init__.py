from haiku.tree.store.engine import NodeRecord, Store
from haiku.tree.store.exceptions import ReadOnlyError

__all__ = ["NodeRecord", "ReadOnlyError", "Store"]
