import os
import tempfile
from pathlib import Path

# Prevent tests from loading user's local haiku.tree.yaml by setting env var
# to an empty config file BEFORE any haiku.tree imports.
# This ensures tests always use default config values.
_test_config_dir = tempfile.mkdtemp()
_test_config_path = Path(_test_config_dir) / "test-defaults.yaml"
_test_config_path.write_text("{}")  # Empty YAML = use all defaults
os.environ["HAIKU_TREE_CONFIG_PATH"] = str(_test_config_path)

import pytest  # noqa: E402


@pytest.fixture
def temp_db_path():
    """Create a temporary database path for testing.

    Note: Tests that need a database should use HaikuTree with create=True.
    """
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir) / "test.lancedb"
