"""Core infrastructure: paths, configuration profiles and logging."""
