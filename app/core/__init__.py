"""Configuration, database, security and logging."""
