"""PostgreSQL connection parameters, pool lifecycle and schema setup for the
credential store."""
