"""Core query, aggregation and write-back logic for taskbase."""
