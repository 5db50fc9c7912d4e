"""Recipe Diversity - HTTP API (FastAPI)."""
