class ReadOnlyError(Exception):
    """Raised when attempting to write to a store opened read-only."""

    pass
