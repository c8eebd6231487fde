"""Domain models and pure helpers with no I/O."""
