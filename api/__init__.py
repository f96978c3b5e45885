"""HTTP adapter serving the dashboard core (FastAPI)."""
