import os
from pathlib import Path

import yaml

from haiku.tree.config.models import AppConfig


def find_config_file(cli_path: Path | None = None) -> Path | None:
    """Find the YAML config file using the search path.

    Search order:
    1. CLI-provided path (if given)
    2. HAIKU_TREE_CONFIG_PATH environment variable
    3. ./haiku.tree.yaml (current directory)
    4. ~/.config/haiku.tree/config.yaml (user config)

    Returns None if no config file is found.
    """
    if cli_path:
        if cli_path.exists():
            return cli_path
        raise FileNotFoundError(f"Config file not found: {cli_path}")

    env_path = os.getenv("HAIKU_TREE_CONFIG_PATH")
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path

    cwd_config = Path.cwd() / "haiku.tree.yaml"
    if cwd_config.exists():
        return cwd_config

    user_config = Path.home() / ".config" / "haiku.tree" / "config.yaml"
    if user_config.exists():
        return user_config

    return None


def load_yaml_config(path: Path) -> dict:
    """Load and parse a YAML config file."""
    with open(path) as f:
        data = yaml.safe_load(f)
    return data or {}


def generate_default_config() -> dict:
    """Generate the default YAML config structure."""
    config = AppConfig().model_dump(mode="json")
    # Leave data_dir empty so the platform default applies wherever the file is used
    config["storage"]["data_dir"] = ""
    return config
