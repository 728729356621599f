"""Domain logic for match ingestion and ranking."""
