from haiku.tree.config.loader import (
    find_config_file,
    generate_default_config,
    load_yaml_config,
)
from haiku.tree.config.models import (
    AppConfig,
    LanceDBConfig,
    StorageConfig,
    TreeConfig,
)

__all__ = [
    "Config",
    "AppConfig",
    "StorageConfig",
    "LanceDBConfig",
    "TreeConfig",
    "find_config_file",
    "load_yaml_config",
    "generate_default_config",
    "set_config",
]


class ConfigProxy:
    """Proxy for the global configuration that allows runtime updates."""

    def __init__(self):
        # Load config from YAML file or use defaults
        config_path = find_config_file(None)
        if config_path:
            yaml_data = load_yaml_config(config_path)
            self._config = AppConfig.model_validate(yaml_data)
        else:
            self._config = AppConfig()

    def __getattr__(self, name):
        """Proxy attribute access to the underlying config."""
        return getattr(self._config, name)

    def set(self, config: AppConfig) -> None:
        """Replace the current configuration."""
        self._config = config


# Create the global Config instance
Config = ConfigProxy()


def set_config(config: AppConfig) -> None:
    """Set the global configuration programmatically.

    This allows library users to configure haiku.tree without needing
    a YAML file.

    Args:
        config: The AppConfig instance to use globally.

    Example:
        >>> from haiku.tree.config import set_config, AppConfig
        >>> set_config(AppConfig(tree={"table_name": "categories"}))
    """
    Config.set(config)
