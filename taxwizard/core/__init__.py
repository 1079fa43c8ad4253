"""Application-wide configuration and logging."""
