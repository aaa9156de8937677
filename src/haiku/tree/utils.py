import sys
from pathlib import Path


def get_default_data_dir() -> Path:
    """Get the user data directory for the current system platform.

    Linux: ~/.local/share/haiku.tree
    macOS: ~/Library/Application Support/haiku.tree
    Windows: C:/Users/<USER>/AppData/Roaming/haiku.tree

    Returns:
        User Data Path.
    """
    home = Path.home()

    system_paths = {
        "win32": home / "AppData/Roaming/haiku.tree",
        "linux": home / ".local/share/haiku.tree",
        "darwin": home / "Library/Application Support/haiku.tree",
    }

    data_path = system_paths[sys.platform]
    return data_path
