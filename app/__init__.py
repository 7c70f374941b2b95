"""Survey collection backend."""
