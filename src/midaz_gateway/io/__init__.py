"""I/O layer: in-process storage."""
