"""Core infrastructure: configuration, HTTP client pool, feed cache, logging."""
