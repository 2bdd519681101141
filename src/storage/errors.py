class StorageError(Exception):
    """Raised when reading from or writing to durable storage fails."""
