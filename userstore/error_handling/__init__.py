"""Detection of and retry on transient PostgreSQL connection failures."""
