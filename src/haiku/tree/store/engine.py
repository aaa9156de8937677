import logging
from pathlib import Path
from uuid import uuid4

import lancedb
from lancedb.pydantic import LanceModel
from pydantic import Field

from haiku.tree.config import AppConfig, Config
from haiku.tree.store.exceptions import ReadOnlyError

logger = logging.getLogger(__name__)


class NodeRecord(LanceModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    parent_id: str | None = None
    ancestor_ids: list[str] = Field(default_factory=list)
    title: str | None = None
    metadata: str = Field(default="{}")
    created_at: str = ""
    updated_at: str = ""


class Store:
    def __init__(
        self,
        db_path: Path,
        config: AppConfig = Config,
        create: bool = False,
        read_only: bool = False,
    ):
        self.db_path: Path = db_path
        self._config = config
        self._read_only = read_only

        self.db = self._connect(create)
        self.create_or_update_db()

    @property
    def is_read_only(self) -> bool:
        return self._read_only

    @property
    def table_name(self) -> str:
        return self._config.tree.table_name

    def _assert_writable(self) -> None:
        if self._read_only:
            raise ReadOnlyError("Cannot modify database in read-only mode")

    def _connect(self, create: bool):
        lancedb_config = self._config.lancedb
        if lancedb_config.uri:
            # LanceDB Cloud, databases are provisioned remotely
            return lancedb.connect(
                uri=lancedb_config.uri,
                api_key=lancedb_config.api_key or None,
                region=lancedb_config.region or "us-east-1",
            )

        if not self.db_path.exists():
            if not create or self._read_only:
                raise FileNotFoundError(f"Database does not exist: {self.db_path}")
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Creating database at {self.db_path}")

        return lancedb.connect(self.db_path)

    def create_or_update_db(self):
        """Create the node table if it does not exist yet."""
        existing_tables = self.db.table_names()

        if self.table_name in existing_tables:
            self.nodes_table = self.db.open_table(self.table_name)
        else:
            self._assert_writable()
            self.nodes_table = self.db.create_table(self.table_name, schema=NodeRecord)

    def close(self):
        """Close the database connection."""
        # LanceDB connections are automatically managed
        pass
