"""Storage infrastructure: database wiring, backends and repositories."""
