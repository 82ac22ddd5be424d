"""HTTP adapters for kernel types."""
