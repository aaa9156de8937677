from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from haiku.tree.utils import get_default_data_dir


class StorageConfig(BaseModel):
    data_dir: Path = Field(default_factory=get_default_data_dir)

    @field_validator("data_dir", mode="before")
    @classmethod
    def _empty_means_default(cls, value):
        if value is None or value == "":
            return get_default_data_dir()
        return value


class LanceDBConfig(BaseModel):
    uri: str = ""
    api_key: str = ""
    region: str = ""


class TreeConfig(BaseModel):
    """Configuration for the node table.

    Attributes:
        table_name: Name of the LanceDB table holding the nodes
    """

    table_name: str = "nodes"


class AppConfig(BaseModel):
    environment: str = "production"
    storage: StorageConfig = Field(default_factory=StorageConfig)
    lancedb: LanceDBConfig = Field(default_factory=LanceDBConfig)
    tree: TreeConfig = Field(default_factory=TreeConfig)
