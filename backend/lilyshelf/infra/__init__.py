"""Cross-cutting infrastructure: logging and metrics."""
