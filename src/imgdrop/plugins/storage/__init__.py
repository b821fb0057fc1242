"""Built-in object store backends."""
