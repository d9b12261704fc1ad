"""L2 Coach backend."""
